# server/tenderscore/views/compliance_views.py

from rest_framework import viewsets, permissions, filters

from ..models import ComplianceRule, ComplianceCheck
from ..serializers import ComplianceRuleSerializer, ComplianceCheckSerializer
from ..permissions import IsStaffOrAdmin, IsEvaluatorOrStaff
from ..utils import log_action


class ComplianceRuleViewSet(viewsets.ModelViewSet):
    """ViewSet for managing configurable compliance rules"""
    queryset = ComplianceRule.objects.all()
    serializer_class = ComplianceRuleSerializer
    permission_classes = [permissions.IsAuthenticated, IsStaffOrAdmin]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['code', 'name', 'category']
    ordering = ['category', 'code']

    def get_queryset(self):
        queryset = ComplianceRule.objects.all()

        is_active = self.request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=(is_active.lower() == 'true'))

        rule_type = self.request.query_params.get('rule_type')
        if rule_type:
            queryset = queryset.filter(rule_type=rule_type)

        municipality = self.request.query_params.get('municipality')
        if municipality:
            queryset = queryset.filter(municipality_id=municipality)

        return queryset

    def perform_create(self, serializer):
        rule = serializer.save()
        log_action(self.request.user, 'create_compliance_rule', rule, {'code': rule.code}, self.request)


class ComplianceCheckViewSet(viewsets.ReadOnlyModelViewSet):
    """Stored compliance check outcomes"""
    queryset = ComplianceCheck.objects.all()
    serializer_class = ComplianceCheckSerializer
    permission_classes = [permissions.IsAuthenticated, IsEvaluatorOrStaff]
    filter_backends = [filters.OrderingFilter]
    ordering = ['-performed_at']

    def get_queryset(self):
        queryset = ComplianceCheck.objects.select_related('vendor', 'rule')

        for param, lookup in [('vendor_id', 'vendor_id'), ('tender_id', 'tender_id'),
                              ('submission_id', 'submission_id'), ('result', 'result')]:
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{lookup: value})

        return queryset
