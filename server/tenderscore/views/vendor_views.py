# server/tenderscore/views/vendor_views.py

from rest_framework import viewsets, permissions, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django.db.models import Q

import logging

from ..compliance import run_vendor_rules
from ..exceptions import ScoringError
from ..models import Municipality, Vendor, ComplianceRule, Tender
from ..serializers import MunicipalitySerializer, VendorSerializer, ComplianceCheckSerializer
from ..permissions import IsStaffOrAdmin, IsAdminUser
from ..utils import log_action

logger = logging.getLogger('tenderscore')


class MunicipalityViewSet(viewsets.ModelViewSet):
    """ViewSet for managing municipalities"""
    queryset = Municipality.objects.all()
    serializer_class = MunicipalitySerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'code', 'province']
    ordering = ['name']

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsAdminUser()]


class VendorViewSet(viewsets.ModelViewSet):
    """ViewSet for managing vendors"""
    queryset = Vendor.objects.all()
    serializer_class = VendorSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['company_name', 'trading_name', 'registration_number', 'csd_id']
    ordering_fields = ['company_name', 'created_at', 'bbbee_level']
    ordering = ['company_name']

    def get_permissions(self):
        if self.action in ['create', 'destroy', 'run_compliance']:
            return [permissions.IsAuthenticated(), IsStaffOrAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        """Vendors only see the companies they belong to"""
        user = self.request.user
        queryset = Vendor.objects.all()

        if user.role == 'vendor':
            queryset = queryset.filter(users=user)

        status_param = self.request.query_params.get('status')
        if status_param:
            queryset = queryset.filter(status=status_param)

        level = self.request.query_params.get('bbbee_level')
        if level:
            queryset = queryset.filter(bbbee_level=level)

        municipality = self.request.query_params.get('municipality')
        if municipality:
            queryset = queryset.filter(municipality_id=municipality)

        return queryset

    def perform_create(self, serializer):
        vendor = serializer.save()
        log_action(self.request.user, 'create_vendor', vendor, {'company_name': vendor.company_name}, self.request)

    @action(detail=True, methods=['post'])
    def run_compliance(self, request, pk=None):
        """Evaluate the active compliance rules against this vendor"""
        vendor = self.get_object()

        rules = ComplianceRule.objects.filter(is_active=True).filter(
            Q(municipality__isnull=True) | Q(municipality=vendor.municipality)
        )
        rule_ids = request.data.get('rule_ids')
        if rule_ids:
            rules = rules.filter(id__in=rule_ids)

        tender = None
        tender_id = request.data.get('tender_id')
        if tender_id:
            try:
                tender = Tender.objects.get(id=tender_id)
            except Tender.DoesNotExist:
                return Response({'error': 'Tender not found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            checks = run_vendor_rules(vendor, list(rules), tender=tender, performed_by=request.user)
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        summary = {
            'total': len(checks),
            'passed': sum(1 for c in checks if c.result == 'passed'),
            'failed': sum(1 for c in checks if c.result == 'failed'),
            'flagged': sum(1 for c in checks if c.result == 'flagged'),
        }
        summary['compliant'] = summary['failed'] == 0

        log_action(request.user, 'run_vendor_compliance', vendor, summary, request)

        return Response({
            'vendor_id': vendor.id,
            'checks': ComplianceCheckSerializer(checks, many=True).data,
            'summary': summary,
        })
