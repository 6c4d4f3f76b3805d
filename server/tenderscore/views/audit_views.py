# server/tenderscore/views/audit_views.py

from rest_framework import viewsets, permissions, filters
from django.db.models import Q

from ..models import AuditLog, BidSubmission, AwardAcceptance
from ..serializers import AuditLogSerializer
from ..permissions import IsAdminUser


def tender_trail_filter(tender_id):
    """Audit entries for a tender, its bids and its award"""
    submission_ids = BidSubmission.objects.filter(tender_id=tender_id).values_list('id', flat=True)
    award_ids = AwardAcceptance.objects.filter(tender_id=tender_id).values_list('id', flat=True)
    return (
        Q(entity_type='tender', entity_id=tender_id)
        | Q(entity_type='bidsubmission', entity_id__in=list(submission_ids))
        | Q(entity_type='awardacceptance', entity_id__in=list(award_ids))
    )


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """ViewSet for viewing audit logs"""
    queryset = AuditLog.objects.all()
    serializer_class = AuditLogSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminUser]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ['created_at', 'action', 'entity_type']
    ordering = ['-created_at']

    def get_queryset(self):
        queryset = AuditLog.objects.select_related('user')

        tender_id = self.request.query_params.get('tender_id')
        if tender_id:
            queryset = queryset.filter(tender_trail_filter(tender_id))

        for param in ['user_id', 'action', 'entity_type', 'entity_id']:
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})

        start_date = self.request.query_params.get('start_date')
        end_date = self.request.query_params.get('end_date')
        if start_date and end_date:
            queryset = queryset.filter(created_at__range=[start_date, end_date])

        return queryset
