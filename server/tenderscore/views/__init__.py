# server/tenderscore/views/__init__.py

from .auth_views import LoginView, LogoutView, UserProfileView
from .vendor_views import MunicipalityViewSet, VendorViewSet
from .tender_views import (
    TenderViewSet, TenderRequirementViewSet, TenderScoringCriteriaViewSet, ScoringTemplateViewSet
)
from .submission_views import BidSubmissionViewSet, SubmissionDocumentViewSet
from .compliance_views import ComplianceRuleViewSet, ComplianceCheckViewSet
from .award_views import AwardViewSet
from .evaluation_views import BBBEEPointsView
from .notification_views import NotificationViewSet
from .audit_views import AuditLogViewSet
