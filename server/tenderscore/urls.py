# server/tenderscore/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    # Authentication views
    LoginView, LogoutView, UserProfileView,

    # Main model viewsets
    MunicipalityViewSet, VendorViewSet, TenderViewSet, TenderRequirementViewSet,
    TenderScoringCriteriaViewSet, ScoringTemplateViewSet, BidSubmissionViewSet, SubmissionDocumentViewSet,
    ComplianceRuleViewSet, ComplianceCheckViewSet, AwardViewSet, NotificationViewSet,
    AuditLogViewSet,

    # Calculators
    BBBEEPointsView,
)

router = DefaultRouter()
router.register(r'municipalities', MunicipalityViewSet)
router.register(r'vendors', VendorViewSet)
router.register(r'tenders', TenderViewSet)
router.register(r'tender-requirements', TenderRequirementViewSet)
router.register(r'scoring-criteria', TenderScoringCriteriaViewSet)
router.register(r'scoring-templates', ScoringTemplateViewSet)
router.register(r'submissions', BidSubmissionViewSet)
router.register(r'submission-documents', SubmissionDocumentViewSet)
router.register(r'compliance-rules', ComplianceRuleViewSet)
router.register(r'compliance-checks', ComplianceCheckViewSet)
router.register(r'awards', AwardViewSet)
router.register(r'notifications', NotificationViewSet)
router.register(r'audit-logs', AuditLogViewSet)

urlpatterns = [
    path('', include(router.urls)),

    # Authentication Endpoints
    path('auth/login/', LoginView.as_view(), name='login'),
    path('auth/logout/', LogoutView.as_view(), name='logout'),
    path('auth/profile/', UserProfileView.as_view(), name='user-profile'),

    path('calculate-bbbee-points/', BBBEEPointsView.as_view(), name='calculate-bbbee-points'),

    # DRF browsable API authentication
    path('api-auth/', include('rest_framework.urls')),
]
