# server/tenderscore/views/award_views.py

from rest_framework import viewsets, permissions, status, mixins
from rest_framework.decorators import action
from rest_framework.response import Response

import logging

from .. import awards
from ..exceptions import ScoringError
from ..models import AwardAcceptance, BidSubmission
from ..serializers import AwardAcceptanceSerializer
from ..permissions import IsStaffOrAdmin, IsAwardedVendor, CanManageOwnSubmissions
from ..utils import log_action

logger = logging.getLogger('tenderscore')


class AwardViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """ViewSet for tender awards and their signing workflow"""
    queryset = AwardAcceptance.objects.all()
    serializer_class = AwardAcceptanceSerializer

    def get_permissions(self):
        if self.action in ['create', 'sla_review', 'remind']:
            return [permissions.IsAuthenticated(), IsStaffOrAdmin()]
        if self.action in ['sign', 'decline']:
            return [permissions.IsAuthenticated(), IsAwardedVendor()]
        return [permissions.IsAuthenticated(), CanManageOwnSubmissions()]

    def get_queryset(self):
        user = self.request.user
        queryset = AwardAcceptance.objects.select_related('tender', 'vendor', 'submission')

        if user.role == 'vendor':
            queryset = queryset.filter(vendor__users=user)

        tender_id = self.request.query_params.get('tender_id')
        if tender_id:
            queryset = queryset.filter(tender_id=tender_id)

        signing_status = self.request.query_params.get('signing_status')
        if signing_status:
            queryset = queryset.filter(signing_status=signing_status)

        return queryset

    def create(self, request):
        """Award a tender to a scored submission"""
        submission_id = request.data.get('submission_id')
        if not submission_id:
            return Response({'error': 'submission_id is required'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            submission = BidSubmission.objects.select_related('tender', 'vendor').get(id=submission_id)
        except BidSubmission.DoesNotExist:
            return Response({'error': 'Submission not found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            award = awards.award_submission(submission, request.user, request.data.get('award_letter_content'))
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(
            request.user, 'award_tender', submission.tender,
            {'submission_id': submission.id, 'vendor': submission.vendor.company_name},
            request
        )
        return Response(AwardAcceptanceSerializer(award).data, status=status.HTTP_201_CREATED)

    def _respond(self, request, award, action_name, operation, *args):
        try:
            operation(award, *args)
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(request.user, action_name, award, {'signing_status': award.signing_status}, request)
        return Response(AwardAcceptanceSerializer(award).data)

    @action(detail=True, methods=['post'])
    def sla_review(self, request, pk=None):
        """Send the award for service level agreement review"""
        return self._respond(request, self.get_object(), 'award_sla_review', awards.send_for_sla_review)

    @action(detail=True, methods=['post'])
    def sign(self, request, pk=None):
        """Vendor signs the award letter"""
        award = self.get_object()
        return self._respond(
            request, award, 'sign_award', awards.sign_award,
            request.data.get('signature_data'), request.data.get('signed_by_name')
        )

    @action(detail=True, methods=['post'])
    def decline(self, request, pk=None):
        """Vendor declines the award"""
        return self._respond(request, self.get_object(), 'decline_award', awards.decline_award,
                             request.data.get('reason'))

    @action(detail=True, methods=['post'])
    def remind(self, request, pk=None):
        """Remind the vendor to sign"""
        return self._respond(request, self.get_object(), 'remind_award', awards.remind)
