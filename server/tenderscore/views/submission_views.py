# server/tenderscore/views/submission_views.py

from rest_framework import viewsets, permissions, status, filters
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

import logging

from .. import evaluation
from ..compliance import run_submission_compliance
from ..exceptions import ScoringError
from ..models import BidSubmission, SubmissionDocument, Vendor
from ..serializers import (
    BidSubmissionSerializer, BidSubmissionDetailSerializer, SubmissionDocumentSerializer,
    EvaluationScoreSerializer, ScoreInputSerializer
)
from ..permissions import IsStaffOrAdmin, IsEvaluator, IsEvaluatorOrStaff, CanManageOwnSubmissions
from ..utils import log_action, create_notification
from ..workflow import transition_submission

logger = logging.getLogger('tenderscore')

EVALUATION_TENDER_STATUSES = ['closed', 'under_review', 'awarded']

# Statuses set by the service that owns their side effects
SERVICE_OWNED_STATUSES = {
    'submitted': 'the submit action',
    'passed': 'the compliance check',
    'disqualified': 'the compliance check',
    'scored': 'tender scoring',
    'awarded': 'the awards endpoint',
}


class BidSubmissionViewSet(viewsets.ModelViewSet):
    """ViewSet for managing bid submissions"""
    queryset = BidSubmission.objects.all()
    serializer_class = BidSubmissionSerializer
    permission_classes = [permissions.IsAuthenticated, CanManageOwnSubmissions]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ['created_at', 'submitted_at', 'bid_amount', 'total_score', 'rank']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return BidSubmissionDetailSerializer
        return BidSubmissionSerializer

    def get_permissions(self):
        if self.action in ['run_compliance_check', 'transition']:
            return [permissions.IsAuthenticated(), IsStaffOrAdmin()]
        if self.action == 'scores' and self.request.method == 'POST':
            return [permissions.IsAuthenticated(), IsEvaluator()]
        if self.action in ['scores', 'breakdown']:
            return [permissions.IsAuthenticated(), IsEvaluatorOrStaff()]
        return [permissions.IsAuthenticated(), CanManageOwnSubmissions()]

    def get_queryset(self):
        """Filter submissions based on user role"""
        user = self.request.user
        queryset = BidSubmission.objects.select_related('tender', 'vendor')

        if user.role == 'vendor':
            queryset = queryset.filter(vendor__users=user)
        elif user.role == 'evaluator':
            # Bids only become visible to evaluators once bidding has closed
            queryset = queryset.filter(tender__status__in=EVALUATION_TENDER_STATUSES)

        tender_id = self.request.query_params.get('tender_id')
        if tender_id:
            queryset = queryset.filter(tender_id=tender_id)

        status_param = self.request.query_params.get('status')
        if status_param:
            queryset = queryset.filter(status=status_param)

        return queryset

    def create(self, request, *args, **kwargs):
        if request.user.role == 'vendor':
            vendor_id = request.data.get('vendor')
            if not Vendor.objects.filter(id=vendor_id, users=request.user).exists():
                return Response(
                    {'error': 'You can only bid on behalf of your own company'},
                    status=status.HTTP_403_FORBIDDEN
                )
        elif request.user.role == 'evaluator':
            return Response(
                {'error': 'Evaluators cannot create submissions'},
                status=status.HTTP_403_FORBIDDEN
            )
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        submission = serializer.save(submitted_by=self.request.user)
        log_action(self.request.user, 'create_submission', submission, {'tender_id': submission.tender_id}, self.request)

    def perform_destroy(self, instance):
        if instance.status != 'draft':
            raise PermissionDenied('Only draft submissions can be deleted')
        instance.delete()

    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        """Submit a draft bid"""
        submission = self.get_object()

        if submission.tender.status != 'open':
            return Response(
                {'error': 'Tender is not open for submissions'},
                status=status.HTTP_400_BAD_REQUEST
            )
        if submission.bid_amount is None:
            return Response(
                {'error': 'A bid amount is required before submitting'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            transition_submission(submission, 'submitted')
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(request.user, 'submit_bid', submission, {'bid_amount': str(submission.bid_amount)}, request)
        return Response(BidSubmissionSerializer(submission).data)

    @action(detail=True, methods=['post'])
    def run_compliance_check(self, request, pk=None):
        """Check the submission's documents against the tender requirements"""
        submission = self.get_object()
        if submission.status != 'submitted':
            return Response(
                {'error': f'Compliance can only be checked on submitted bids, not {submission.status}'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            outcome = run_submission_compliance(submission, performed_by=request.user)
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(request.user, 'run_compliance_check', submission, outcome['summary'], request)

        if not outcome['summary']['overall_passed']:
            for user in submission.vendor.users.all():
                create_notification(
                    user=user,
                    title='Bid Disqualified',
                    message=f'Your bid for {submission.tender.tender_number} did not meet the mandatory requirements.',
                    notification_type='warning',
                    related_entity=submission
                )

        return Response({
            'submission_id': submission.id,
            'status': submission.status,
            **outcome,
        })

    @action(detail=True, methods=['get', 'post'])
    def scores(self, request, pk=None):
        """List or record evaluation scores"""
        submission = self.get_object()

        if request.method == 'GET':
            rows = submission.evaluation_scores.select_related('evaluator')
            if request.user.role == 'evaluator':
                rows = rows.filter(evaluator=request.user)
            return Response(EvaluationScoreSerializer(rows, many=True).data)

        serializer = ScoreInputSerializer(data=request.data.get('scores', []), many=True)
        if not serializer.is_valid():
            return Response({'error': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        try:
            saved = evaluation.record_scores(submission, request.user, serializer.validated_data)
        except ScoringError as e:
            logger.warning(f"Rejected scores for submission {submission.id}: {e}")
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(request.user, 'record_scores', submission, {'count': len(saved)}, request)
        return Response(EvaluationScoreSerializer(saved, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def breakdown(self, request, pk=None):
        """Per-criterion score breakdown"""
        submission = self.get_object()
        return Response(evaluation.submission_breakdown(submission))

    @action(detail=True, methods=['post'])
    def transition(self, request, pk=None):
        """Move a submission to another status"""
        submission = self.get_object()
        target = request.data.get('status')
        if not target:
            return Response({'error': 'status is required'}, status=status.HTTP_400_BAD_REQUEST)
        if target in SERVICE_OWNED_STATUSES:
            return Response(
                {'error': f'{target} can only be set through {SERVICE_OWNED_STATUSES[target]}'},
                status=status.HTTP_400_BAD_REQUEST
            )

        previous = submission.status
        try:
            transition_submission(submission, target)
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(
            request.user, 'transition_submission', submission,
            {'from': previous, 'to': target, 'reason': request.data.get('reason', '')},
            request
        )
        return Response(BidSubmissionSerializer(submission).data)


class SubmissionDocumentViewSet(viewsets.ModelViewSet):
    """ViewSet for the document records attached to a bid"""
    queryset = SubmissionDocument.objects.all()
    serializer_class = SubmissionDocumentSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        queryset = SubmissionDocument.objects.select_related('submission')

        if user.role == 'vendor':
            queryset = queryset.filter(submission__vendor__users=user)

        submission_id = self.request.query_params.get('submission_id')
        if submission_id:
            queryset = queryset.filter(submission_id=submission_id)

        return queryset

    def perform_create(self, serializer):
        submission = serializer.validated_data['submission']
        user = self.request.user

        if user.role == 'vendor' and not submission.vendor.users.filter(id=user.id).exists():
            raise PermissionDenied('You can only add documents to your own bids')
        if submission.status not in ['draft', 'submitted']:
            raise PermissionDenied('Documents can no longer be added to this bid')

        document = serializer.save()
        log_action(user, 'add_submission_document', document, {'document_type': document.document_type}, self.request)
