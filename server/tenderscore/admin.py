# server/tenderscore/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import (
    User, Municipality, Vendor, VendorUser, Tender, TenderRequirement, TenderScoringCriteria,
    ScoringTemplate, ScoringTemplateCriteria,
    BidSubmission, SubmissionDocument, EvaluationScore, ComplianceRule, ComplianceCheck,
    AwardAcceptance, AuditLog, Notification
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Custom user admin"""
    list_display = ('username', 'email', 'role', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active', 'date_joined')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Extra Fields', {'fields': ('role',)}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Extra Fields', {'fields': ('role',)}),
    )


@admin.register(Municipality)
class MunicipalityAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'province', 'status')
    list_filter = ('province', 'status')
    search_fields = ('name', 'code')


class VendorUserInline(admin.TabularInline):
    model = VendorUser
    extra = 0


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ('company_name', 'registration_number', 'bbbee_level', 'status', 'debarment_status')
    list_filter = ('bbbee_level', 'status', 'debarment_status', 'municipality')
    search_fields = ('company_name', 'trading_name', 'registration_number', 'csd_id')
    inlines = [VendorUserInline]


class TenderRequirementInline(admin.TabularInline):
    model = TenderRequirement
    extra = 0


class TenderScoringCriteriaInline(admin.TabularInline):
    model = TenderScoringCriteria
    extra = 0


@admin.register(Tender)
class TenderAdmin(admin.ModelAdmin):
    """Tender admin"""
    list_display = ('tender_number', 'title', 'status', 'estimated_value', 'scoring_system', 'closing_date')
    list_filter = ('status', 'category', 'scoring_system', 'municipality')
    search_fields = ('title', 'tender_number', 'description')
    readonly_fields = ('tender_number', 'status', 'awarded_at', 'created_at', 'updated_at')
    inlines = [TenderRequirementInline, TenderScoringCriteriaInline]


class ScoringTemplateCriteriaInline(admin.TabularInline):
    model = ScoringTemplateCriteria
    extra = 1


@admin.register(ScoringTemplate)
class ScoringTemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'municipality', 'is_active', 'updated_at')
    list_filter = ('is_active', 'category', 'municipality')
    search_fields = ('name', 'description')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [ScoringTemplateCriteriaInline]


class SubmissionDocumentInline(admin.TabularInline):
    model = SubmissionDocument
    extra = 0


class EvaluationScoreInline(admin.TabularInline):
    model = EvaluationScore
    extra = 0
    readonly_fields = ('evaluated_at',)


@admin.register(BidSubmission)
class BidSubmissionAdmin(admin.ModelAdmin):
    """Bid submission admin"""
    list_display = ('tender', 'vendor', 'status', 'bid_amount', 'total_score', 'rank', 'compliance_result')
    list_filter = ('status', 'compliance_result', 'scoring_system')
    search_fields = ('tender__tender_number', 'vendor__company_name')
    readonly_fields = ('status', 'price_score', 'bbbee_points', 'technical_score', 'total_score', 'rank',
                       'submitted_at', 'awarded_at', 'rejected_at', 'created_at', 'updated_at')
    inlines = [SubmissionDocumentInline, EvaluationScoreInline]


@admin.register(ComplianceRule)
class ComplianceRuleAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'rule_type', 'operator', 'field', 'is_mandatory', 'is_active')
    list_filter = ('rule_type', 'severity', 'is_mandatory', 'is_active')
    search_fields = ('code', 'name')


@admin.register(ComplianceCheck)
class ComplianceCheckAdmin(admin.ModelAdmin):
    list_display = ('vendor', 'check_type', 'result', 'submission', 'performed_at')
    list_filter = ('result', 'check_type')
    readonly_fields = ('performed_at',)


@admin.register(AwardAcceptance)
class AwardAcceptanceAdmin(admin.ModelAdmin):
    list_display = ('tender', 'vendor', 'signing_status', 'signed_at', 'reminder_count')
    list_filter = ('signing_status',)
    readonly_fields = ('signing_status', 'signature_data', 'signed_by_name', 'signed_at', 'reminder_sent_at',
                       'created_at', 'updated_at')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Audit log admin"""
    list_display = ('user', 'action', 'entity_type', 'entity_id', 'ip_address', 'created_at')
    list_filter = ('action', 'entity_type', 'created_at')
    search_fields = ('user__username', 'action', 'entity_type')
    readonly_fields = ('user', 'action', 'entity_type', 'entity_id', 'details', 'ip_address', 'created_at')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'title', 'type', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')
    search_fields = ('title', 'message', 'user__username')
