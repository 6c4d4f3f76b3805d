# server/tenderscore/views/evaluation_views.py

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django.conf import settings

from .. import scoring
from ..exceptions import ScoringError
from ..models import Vendor


class BBBEEPointsView(APIView):
    """B-BBEE preference points for a level or a vendor under a scoring system"""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        level = request.data.get('level')
        vendor_id = request.data.get('vendor_id')

        if vendor_id:
            try:
                level = Vendor.objects.get(id=vendor_id).bbbee_level
            except Vendor.DoesNotExist:
                return Response({'error': 'Vendor not found'}, status=status.HTTP_404_NOT_FOUND)
        elif not level:
            return Response(
                {'error': 'Either level or vendor_id is required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        system = request.data.get('scoring_system') or settings.PROCUREMENT_SETTINGS.get(
            'DEFAULT_SCORING_SYSTEM', scoring.ScoringSystem.EIGHTY_TWENTY.value
        )
        try:
            system = scoring.ScoringSystem.parse(system)
            vendor_level = scoring.normalize_bbbee_level(level)
            points = scoring.preference_points(vendor_level, system)
        except ScoringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'vendorLevel': vendor_level,
            'scoringSystem': system.value,
            'points': points,
            'maxPoints': system.preference_points,
        })
