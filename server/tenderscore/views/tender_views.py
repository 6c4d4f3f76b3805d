# server/tenderscore/views/tender_views.py

from rest_framework import viewsets, permissions, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django.db import transaction
from django.db.models import Q
from django.http import HttpResponse

import logging

from .. import evaluation
from ..criteria import apply_scoring_template
from ..exceptions import ScoringError
from ..models import Tender, TenderRequirement, TenderScoringCriteria, ScoringTemplate
from ..serializers import (
    TenderSerializer, TenderDetailSerializer, TenderRequirementSerializer,
    TenderScoringCriteriaSerializer, ScoringTemplateSerializer, BidSubmissionSerializer
)
from ..permissions import IsStaffOrAdmin, IsEvaluatorOrStaff
from ..utils import (
    generate_tender_number, log_action, notify_tender_closed, export_ranking_csv,
    generate_evaluation_report
)
from ..workflow import transition_tender

logger = logging.getLogger('tenderscore')


def ranked_result(result):
    return {
        'submission_id': result.submission_id,
        'rank': result.rank,
        'eligible': result.eligible,
        'price_score': result.price_score,
        'bbbee_points': result.bbbee_points,
        'technical_score': result.technical_score,
        'total_score': result.total_score,
    }


class TenderViewSet(viewsets.ModelViewSet):
    """ViewSet for managing tenders"""
    queryset = Tender.objects.all()
    serializer_class = TenderSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['title', 'description', 'tender_number', 'category']
    ordering_fields = ['created_at', 'closing_date', 'title', 'estimated_value']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return TenderDetailSerializer
        return TenderSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [permissions.IsAuthenticated()]
        if self.action in ['ranking', 'export_ranking', 'evaluation_report']:
            return [permissions.IsAuthenticated(), IsEvaluatorOrStaff()]
        return [permissions.IsAuthenticated(), IsStaffOrAdmin()]

    def get_queryset(self):
        """Filter tenders based on user role"""
        user = self.request.user
        queryset = Tender.objects.select_related('municipality', 'created_by')

        status_param = self.request.query_params.get('status')
        if status_param:
            queryset = queryset.filter(status=status_param)

        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(category=category)

        municipality = self.request.query_params.get('municipality')
        if municipality:
            queryset = queryset.filter(municipality_id=municipality)

        start_date = self.request.query_params.get('start_date')
        end_date = self.request.query_params.get('end_date')
        if start_date and end_date:
            queryset = queryset.filter(closing_date__range=[start_date, end_date])

        # Vendors see open tenders and the ones they have bid on
        if user.role == 'vendor':
            queryset = queryset.filter(
                Q(status='open') | Q(submissions__vendor__users=user)
            ).distinct()

        return queryset

    def perform_create(self, serializer):
        """Auto-assign created_by and generate the tender number"""
        tender = serializer.save(
            created_by=self.request.user,
            tender_number=generate_tender_number()
        )
        log_action(self.request.user, 'create_tender', tender, {'tender_number': tender.tender_number}, self.request)

    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        """Close a tender for bidding"""
        tender = self.get_object()
        try:
            transition_tender(tender, 'closed')
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        notify_tender_closed(tender)
        log_action(request.user, 'close_tender', tender, {}, request)
        return Response({'status': 'tender closed'})

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel a tender"""
        tender = self.get_object()
        try:
            transition_tender(tender, 'cancelled')
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(request.user, 'cancel_tender', tender, {'reason': request.data.get('reason', '')}, request)
        return Response({'status': 'tender cancelled'})

    @action(detail=True, methods=['post'])
    def apply_scoring_template(self, request, pk=None):
        """Replace the tender's criteria with a scoring template's"""
        tender = self.get_object()
        template_id = request.data.get('template_id')
        if not template_id:
            return Response({'error': 'template_id is required'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            template = ScoringTemplate.objects.get(id=template_id)
        except (ScoringTemplate.DoesNotExist, ValueError):
            return Response({'error': 'Scoring template not found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            criteria = apply_scoring_template(tender, template)
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(
            request.user, 'apply_scoring_template', tender,
            {'template_id': template.id, 'template': template.name, 'criteria': len(criteria)},
            request
        )
        return Response(TenderScoringCriteriaSerializer(criteria, many=True).data)

    @action(detail=True, methods=['post'])
    def score(self, request, pk=None):
        """Score and rank all compliance-checked submissions"""
        tender = self.get_object()
        try:
            results = evaluation.score_tender(tender)
        except ScoringError as e:
            logger.warning(f"Scoring of tender {tender.tender_number} failed: {e}")
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(
            request.user, 'score_tender', tender,
            {'scoring_system': tender.active_scoring_system.value, 'submissions': len(results)},
            request
        )
        return Response({
            'tender_id': tender.id,
            'scoring_system': tender.active_scoring_system.value,
            'results': [ranked_result(r) for r in results],
        })

    @action(detail=True, methods=['get'])
    def ranking(self, request, pk=None):
        """Ranked submissions of a scored tender"""
        tender = self.get_object()
        submissions = tender.submissions.filter(rank__isnull=False).select_related('vendor').order_by('rank')
        return Response({
            'tender_id': tender.id,
            'scoring_system': tender.active_scoring_system.value,
            'ranking': BidSubmissionSerializer(submissions, many=True).data,
        })

    @action(detail=True, methods=['get'])
    def export_ranking(self, request, pk=None):
        """Download the ranking as CSV"""
        tender = self.get_object()
        buffer = export_ranking_csv(tender)

        response = HttpResponse(buffer.getvalue(), content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="ranking_{tender.tender_number}.csv"'
        log_action(request.user, 'export_ranking', tender, {}, request)
        return response

    @action(detail=True, methods=['get'])
    def evaluation_report(self, request, pk=None):
        """Download the evaluation report as PDF"""
        tender = self.get_object()
        buffer = generate_evaluation_report(tender)

        response = HttpResponse(buffer.getvalue(), content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="evaluation_{tender.tender_number}.pdf"'
        log_action(request.user, 'generate_evaluation_report', tender, {}, request)
        return response


class TenderRequirementViewSet(viewsets.ModelViewSet):
    """ViewSet for the documents a tender requires"""
    queryset = TenderRequirement.objects.all()
    serializer_class = TenderRequirementSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsStaffOrAdmin()]

    def get_queryset(self):
        queryset = TenderRequirement.objects.all()
        tender_id = self.request.query_params.get('tender_id')
        if tender_id:
            queryset = queryset.filter(tender_id=tender_id)
        return queryset


class TenderScoringCriteriaViewSet(viewsets.ModelViewSet):
    """ViewSet for managing a tender's scoring criteria"""
    queryset = TenderScoringCriteria.objects.all()
    serializer_class = TenderScoringCriteriaSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsStaffOrAdmin()]

    def get_queryset(self):
        queryset = TenderScoringCriteria.objects.all()
        tender_id = self.request.query_params.get('tender_id')
        if tender_id:
            queryset = queryset.filter(tender_id=tender_id)
        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(criteria_category=category)
        return queryset

    @action(detail=False, methods=['post'])
    def bulk_create(self, request):
        """Create several criteria for one tender at once"""
        tender_id = request.data.get('tender_id')
        criteria = request.data.get('criteria', [])

        if not tender_id or not criteria:
            return Response(
                {'error': 'tender_id and criteria are required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            tender = Tender.objects.get(id=tender_id)
        except Tender.DoesNotExist:
            return Response({'error': 'Tender not found'}, status=status.HTTP_404_NOT_FOUND)

        serializer = TenderScoringCriteriaSerializer(
            data=[{**item, 'tender': tender.id} for item in criteria], many=True
        )
        if not serializer.is_valid():
            return Response({'error': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            created = serializer.save()

        log_action(request.user, 'bulk_create_criteria', tender, {'count': len(created)}, request)
        return Response(TenderScoringCriteriaSerializer(created, many=True).data, status=status.HTTP_201_CREATED)


class ScoringTemplateViewSet(viewsets.ModelViewSet):
    """ViewSet for reusable sets of scoring criteria"""
    queryset = ScoringTemplate.objects.all()
    serializer_class = ScoringTemplateSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsStaffOrAdmin()]

    def get_queryset(self):
        queryset = ScoringTemplate.objects.select_related('created_by').prefetch_related('criteria')

        municipality = self.request.query_params.get('municipality')
        if municipality:
            queryset = queryset.filter(municipality_id=municipality)

        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(category=category)

        is_active = self.request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() == 'true')

        return queryset

    def perform_create(self, serializer):
        template = serializer.save(created_by=self.request.user)
        log_action(
            self.request.user, 'create_scoring_template', template,
            {'name': template.name, 'criteria': template.criteria.count()},
            self.request
        )

    def perform_update(self, serializer):
        template = serializer.save()
        log_action(self.request.user, 'update_scoring_template', template, {'name': template.name}, self.request)

    def perform_destroy(self, instance):
        log_action(self.request.user, 'delete_scoring_template', instance, {'name': instance.name}, self.request)
        instance.delete()
