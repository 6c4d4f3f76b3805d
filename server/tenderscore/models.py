from django.conf import settings
from django.db import models
from django.contrib.auth.models import AbstractUser
from django.contrib.auth.models import UserManager
from django.core.validators import MinValueValidator
from django.utils import timezone

from .scoring import BBBEE_LEVELS, ScoringSystem, select_scoring_system


class CustomUserManager(UserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', 'admin')

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self._create_user(username, email, password, **extra_fields)


class User(AbstractUser):
    """Platform user with a procurement role"""
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('staff', 'Procurement Staff'),
        ('vendor', 'Vendor'),
        ('evaluator', 'Evaluator'),
    ]

    role = models.CharField(max_length=50, choices=ROLE_CHOICES, default='staff')

    groups = models.ManyToManyField(
        'auth.Group',
        verbose_name='groups',
        blank=True,
        help_text='The groups this user belongs to.',
        related_name='tenderscore_user_set',
        related_query_name='tenderscore_user',
    )
    user_permissions = models.ManyToManyField(
        'auth.Permission',
        verbose_name='user permissions',
        blank=True,
        help_text='Specific permissions for this user.',
        related_name='tenderscore_user_set',
        related_query_name='tenderscore_user',
    )

    objects = CustomUserManager()

    class Meta:
        db_table = 'users'


class Municipality(models.Model):
    """Tenant that issues tenders"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    province = models.CharField(max_length=100)
    contact_email = models.EmailField(blank=True, null=True)
    contact_phone = models.CharField(max_length=20, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'municipalities'
        verbose_name_plural = 'Municipalities'
        ordering = ['name']

    def __str__(self):
        return f"{self.code} - {self.name}"


class Vendor(models.Model):
    """Registered supplier"""
    BBBEE_LEVEL_CHOICES = [(level, level) for level in BBBEE_LEVELS]
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('suspended', 'Suspended'),
        ('debarred', 'Debarred'),
    ]
    DEBARMENT_CHOICES = [
        ('clear', 'Clear'),
        ('debarred', 'Debarred'),
    ]

    company_name = models.CharField(max_length=255)
    trading_name = models.CharField(max_length=255, blank=True, null=True)
    registration_number = models.CharField(max_length=100)
    vat_number = models.CharField(max_length=50, blank=True, null=True)
    csd_id = models.CharField(max_length=50, blank=True, null=True)
    bbbee_level = models.CharField(max_length=20, choices=BBBEE_LEVEL_CHOICES, default='Non-Compliant')
    bbbee_certificate_expiry = models.DateField(null=True, blank=True)
    tax_clearance_expiry = models.DateField(null=True, blank=True)
    contact_person = models.CharField(max_length=255)
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=20)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    debarment_status = models.CharField(max_length=20, choices=DEBARMENT_CHOICES, default='clear')
    municipality = models.ForeignKey(
        Municipality, on_delete=models.SET_NULL, null=True, blank=True, related_name='vendors'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    users = models.ManyToManyField(User, through='VendorUser', related_name='vendors')

    class Meta:
        db_table = 'vendors'
        ordering = ['company_name']

    def __str__(self):
        return self.company_name


class VendorUser(models.Model):
    """Link between vendor users and vendors"""
    user = models.ForeignKey(User, on_delete=models.CASCADE)
    vendor = models.ForeignKey(Vendor, on_delete=models.CASCADE)

    class Meta:
        db_table = 'vendor_users'
        unique_together = ('user', 'vendor')


class Tender(models.Model):
    """Tender issued by a municipality"""
    STATUS_CHOICES = [
        ('open', 'Open'),
        ('closed', 'Closed'),
        ('under_review', 'Under Review'),
        ('awarded', 'Awarded'),
        ('cancelled', 'Cancelled'),
    ]
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]
    SCORING_SYSTEM_CHOICES = [(s.value, s.value) for s in ScoringSystem]

    tender_number = models.CharField(max_length=50, unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100)
    tender_type = models.CharField(max_length=100)
    closing_date = models.DateTimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='open')
    estimated_value = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    scoring_system = models.CharField(max_length=10, choices=SCORING_SYSTEM_CHOICES, blank=True, null=True)
    priority = models.CharField(max_length=20, choices=PRIORITY_CHOICES, default='medium')
    municipality = models.ForeignKey(
        Municipality, on_delete=models.SET_NULL, null=True, blank=True, related_name='tenders'
    )
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='created_tenders')
    awarded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenders'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.tender_number} - {self.title}"

    @property
    def active_scoring_system(self):
        """Explicit scale if set, otherwise derived from the estimated value"""
        if self.scoring_system:
            return ScoringSystem.parse(self.scoring_system)
        threshold = settings.PROCUREMENT_SETTINGS.get('PREFERENCE_THRESHOLD', 50000000)
        return select_scoring_system(self.estimated_value, threshold)


class TenderRequirement(models.Model):
    """Document a bidder has to supply"""
    tender = models.ForeignKey(Tender, on_delete=models.CASCADE, related_name='requirements')
    requirement_type = models.CharField(max_length=100)
    description = models.TextField()
    is_mandatory = models.BooleanField(default=True)
    max_age_days = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'tender_requirements'

    def __str__(self):
        return f"{self.tender.tender_number} - {self.requirement_type}"


class TenderScoringCriteria(models.Model):
    """Scoring criterion of a tender"""
    CATEGORY_CHOICES = [
        ('Price', 'Price'),
        ('BBBEE', 'B-BBEE'),
        ('Technical', 'Technical'),
        ('Experience', 'Experience'),
        ('Local Content', 'Local Content'),
        ('Quality', 'Quality'),
    ]

    tender = models.ForeignKey(Tender, on_delete=models.CASCADE, related_name='scoring_criteria')
    criteria_name = models.CharField(max_length=255)
    criteria_category = models.CharField(max_length=50, choices=CATEGORY_CHOICES, default='Technical')
    description = models.TextField(blank=True, null=True)
    max_score = models.DecimalField(max_digits=7, decimal_places=2, validators=[MinValueValidator(0)])
    weight = models.DecimalField(max_digits=7, decimal_places=2, default=1, validators=[MinValueValidator(0)])
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tender_scoring_criteria'
        verbose_name_plural = 'Tender Scoring Criteria'
        ordering = ['tender', 'sort_order', 'id']
        unique_together = ('tender', 'criteria_name')

    def __str__(self):
        return f"{self.tender.tender_number} - {self.criteria_name}"


class ScoringTemplate(models.Model):
    """Reusable set of scoring criteria"""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100, blank=True, null=True)
    municipality = models.ForeignKey(
        Municipality, on_delete=models.CASCADE, null=True, blank=True, related_name='scoring_templates'
    )
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'scoring_templates'
        ordering = ['name']

    def __str__(self):
        return self.name


class ScoringTemplateCriteria(models.Model):
    """Criterion copied onto a tender when its template is applied"""
    template = models.ForeignKey(ScoringTemplate, on_delete=models.CASCADE, related_name='criteria')
    criteria_name = models.CharField(max_length=255)
    criteria_category = models.CharField(
        max_length=50, choices=TenderScoringCriteria.CATEGORY_CHOICES, default='Technical'
    )
    description = models.TextField(blank=True, null=True)
    max_score = models.DecimalField(max_digits=7, decimal_places=2, validators=[MinValueValidator(0)])
    weight = models.DecimalField(max_digits=7, decimal_places=2, default=1, validators=[MinValueValidator(0)])
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'scoring_template_criteria'
        verbose_name_plural = 'Scoring Template Criteria'
        ordering = ['template', 'sort_order', 'id']
        unique_together = ('template', 'criteria_name')

    def __str__(self):
        return f"{self.template.name} - {self.criteria_name}"


class BidSubmission(models.Model):
    """A vendor's bid on a tender"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('submitted', 'Submitted'),
        ('passed', 'Passed Compliance'),
        ('disqualified', 'Disqualified'),
        ('manual_review', 'Manual Review'),
        ('scored', 'Scored'),
        ('awarded', 'Awarded'),
        ('rejected', 'Rejected'),
    ]
    COMPLIANCE_CHOICES = [
        ('pending', 'Pending'),
        ('passed', 'Passed'),
        ('failed', 'Failed'),
    ]

    tender = models.ForeignKey(Tender, on_delete=models.CASCADE, related_name='submissions')
    vendor = models.ForeignKey(Vendor, on_delete=models.CASCADE, related_name='submissions')
    submitted_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    submitted_at = models.DateTimeField(null=True, blank=True)
    bid_amount = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    scoring_system = models.CharField(max_length=10, blank=True, null=True)
    price_score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    bbbee_points = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    technical_score = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)
    total_score = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)
    rank = models.PositiveIntegerField(null=True, blank=True)
    compliance_result = models.CharField(max_length=20, choices=COMPLIANCE_CHOICES, default='pending')
    compliance_notes = models.TextField(blank=True, null=True)
    rejection_reasons = models.JSONField(blank=True, null=True)
    compliance_checked_at = models.DateTimeField(null=True, blank=True)
    awarded_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bid_submissions'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['tender', 'vendor'], name='one_bid_per_vendor_per_tender'),
        ]

    def __str__(self):
        return f"{self.tender.tender_number} - {self.vendor.company_name}"

    def save(self, *args, **kwargs):
        if self.status == 'submitted' and not self.submitted_at:
            self.submitted_at = timezone.now()
        super().save(*args, **kwargs)


class SubmissionDocument(models.Model):
    """Document uploaded with a bid"""
    VERIFICATION_CHOICES = [
        ('pending', 'Pending'),
        ('verified', 'Verified'),
        ('rejected', 'Rejected'),
    ]

    submission = models.ForeignKey(BidSubmission, on_delete=models.CASCADE, related_name='documents')
    requirement = models.ForeignKey(
        TenderRequirement, on_delete=models.SET_NULL, null=True, blank=True, related_name='documents'
    )
    document_name = models.CharField(max_length=255)
    document_type = models.CharField(max_length=100)
    document_date = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    verification_status = models.CharField(max_length=20, choices=VERIFICATION_CHOICES, default='pending')
    meets_requirement = models.BooleanField(null=True, blank=True)
    failure_reason = models.TextField(blank=True, null=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'submission_documents'

    def __str__(self):
        return f"{self.submission} - {self.document_name}"


class EvaluationScore(models.Model):
    """Score recorded against one criterion of a submission"""
    submission = models.ForeignKey(BidSubmission, on_delete=models.CASCADE, related_name='evaluation_scores')
    evaluator = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='evaluation_scores'
    )
    criteria_name = models.CharField(max_length=255)
    criteria_category = models.CharField(max_length=50)
    max_score = models.DecimalField(max_digits=7, decimal_places=2)
    score = models.DecimalField(max_digits=7, decimal_places=2, validators=[MinValueValidator(0)])
    weight = models.DecimalField(max_digits=7, decimal_places=2, default=1)
    comments = models.TextField(blank=True, null=True)
    evaluated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'evaluation_scores'
        ordering = ['submission', 'criteria_name']
        unique_together = ('submission', 'evaluator', 'criteria_name')

    def __str__(self):
        return f"{self.submission} - {self.criteria_name}: {self.score}/{self.max_score}"


class ComplianceRule(models.Model):
    """Configurable vendor compliance rule"""
    RULE_TYPE_CHOICES = [
        ('document_required', 'Document Required'),
        ('document_validity', 'Document Validity'),
        ('preferential_points', 'Preferential Points'),
        ('blacklist_check', 'Blacklist Check'),
        ('threshold_check', 'Threshold Check'),
        ('date_validation', 'Date Validation'),
        ('value_comparison', 'Value Comparison'),
        ('custom', 'Custom'),
    ]
    OPERATOR_CHOICES = [
        ('equals', 'Equals'),
        ('not_equals', 'Not Equals'),
        ('greater_than', 'Greater Than'),
        ('less_than', 'Less Than'),
        ('greater_or_equal', 'Greater Or Equal'),
        ('less_or_equal', 'Less Or Equal'),
        ('contains', 'Contains'),
        ('not_contains', 'Not Contains'),
        ('in_list', 'In List'),
        ('not_in_list', 'Not In List'),
        ('is_valid', 'Is Valid'),
        ('is_expired', 'Is Expired'),
        ('exists', 'Exists'),
        ('not_exists', 'Not Exists'),
    ]
    SEVERITY_CHOICES = [
        ('info', 'Info'),
        ('warning', 'Warning'),
        ('error', 'Error'),
        ('critical', 'Critical'),
    ]

    code = models.CharField(max_length=50)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100)
    rule_type = models.CharField(max_length=50, choices=RULE_TYPE_CHOICES)
    operator = models.CharField(max_length=30, choices=OPERATOR_CHOICES)
    field = models.CharField(max_length=100)
    value = models.CharField(max_length=255, blank=True, null=True)
    threshold = models.IntegerField(null=True, blank=True)
    severity = models.CharField(max_length=20, choices=SEVERITY_CHOICES, default='error')
    is_mandatory = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    error_message = models.TextField(blank=True, null=True)
    municipality = models.ForeignKey(
        Municipality, on_delete=models.CASCADE, null=True, blank=True, related_name='compliance_rules'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'compliance_rules'
        ordering = ['category', 'code']

    def __str__(self):
        return f"{self.code} - {self.name}"


class ComplianceCheck(models.Model):
    """Outcome of one compliance check against a vendor or submission"""
    RESULT_CHOICES = [
        ('passed', 'Passed'),
        ('failed', 'Failed'),
        ('pending', 'Pending'),
        ('flagged', 'Flagged'),
    ]

    vendor = models.ForeignKey(Vendor, on_delete=models.CASCADE, related_name='compliance_checks')
    tender = models.ForeignKey(
        Tender, on_delete=models.CASCADE, null=True, blank=True, related_name='compliance_checks'
    )
    submission = models.ForeignKey(
        BidSubmission, on_delete=models.CASCADE, null=True, blank=True, related_name='compliance_checks'
    )
    rule = models.ForeignKey(
        ComplianceRule, on_delete=models.SET_NULL, null=True, blank=True, related_name='checks'
    )
    check_type = models.CharField(max_length=100)
    result = models.CharField(max_length=20, choices=RESULT_CHOICES, default='pending')
    score = models.IntegerField(null=True, blank=True)
    notes = models.TextField(blank=True, null=True)
    details = models.JSONField(blank=True, null=True)
    performed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    performed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'compliance_checks'
        ordering = ['-performed_at']

    def __str__(self):
        return f"{self.vendor.company_name} - {self.check_type}: {self.result}"


class AwardAcceptance(models.Model):
    """Award letter and its signing by the winning vendor"""
    SIGNING_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('sla_review', 'SLA Review'),
        ('signed', 'Signed'),
        ('declined', 'Declined'),
    ]

    submission = models.OneToOneField(BidSubmission, on_delete=models.CASCADE, related_name='award')
    tender = models.ForeignKey(Tender, on_delete=models.CASCADE, related_name='awards')
    vendor = models.ForeignKey(Vendor, on_delete=models.CASCADE, related_name='awards')
    signing_status = models.CharField(max_length=20, choices=SIGNING_STATUS_CHOICES, default='pending')
    award_letter_content = models.TextField(blank=True, null=True)
    signature_data = models.TextField(blank=True, null=True)
    signed_by_name = models.CharField(max_length=255, blank=True, null=True)
    signed_at = models.DateTimeField(null=True, blank=True)
    declined_reason = models.TextField(blank=True, null=True)
    reminder_count = models.PositiveIntegerField(default=0)
    reminder_sent_at = models.DateTimeField(null=True, blank=True)
    awarded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'award_acceptances'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.tender.tender_number} - {self.vendor.company_name} ({self.signing_status})"


class AuditLog(models.Model):
    """Audit logs for tracking user actions"""
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=100)
    entity_type = models.CharField(max_length=50)
    entity_id = models.IntegerField()
    details = models.JSONField(blank=True, null=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.username if self.user else 'System'} - {self.action} - {self.entity_type}:{self.entity_id}"


class Notification(models.Model):
    """In-app notifications"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=255)
    message = models.TextField()
    type = models.CharField(max_length=50)
    is_read = models.BooleanField(default=False)
    related_entity_type = models.CharField(max_length=50, blank=True, null=True)
    related_entity_id = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.username} - {self.title}"
