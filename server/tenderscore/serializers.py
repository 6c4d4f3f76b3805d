from rest_framework import serializers

from .criteria import replace_template_criteria
from .exceptions import InvalidInputError
from .models import (
    User, Municipality, Vendor, VendorUser, Tender, TenderRequirement, TenderScoringCriteria,
    ScoringTemplate, ScoringTemplateCriteria,
    BidSubmission, SubmissionDocument, EvaluationScore, ComplianceRule, ComplianceCheck,
    AwardAcceptance, AuditLog, Notification
)
from .scoring import ScoringSystem


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model"""
    password = serializers.CharField(write_only=True, required=False)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'role', 'password', 'is_active', 'date_joined']
        read_only_fields = ['id', 'date_joined']

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)

    def update(self, instance, validated_data):
        if 'password' in validated_data:
            instance.set_password(validated_data.pop('password'))
        return super().update(instance, validated_data)


class MunicipalitySerializer(serializers.ModelSerializer):

    class Meta:
        model = Municipality
        fields = ['id', 'name', 'code', 'province', 'contact_email', 'contact_phone', 'status',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class VendorSerializer(serializers.ModelSerializer):
    """Serializer for Vendor model"""
    user_ids = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), many=True, write_only=True,
                                                  required=False)
    usernames = serializers.SerializerMethodField()
    submissions_count = serializers.SerializerMethodField()

    class Meta:
        model = Vendor
        fields = ['id', 'company_name', 'trading_name', 'registration_number', 'vat_number', 'csd_id',
                  'bbbee_level', 'bbbee_certificate_expiry', 'tax_clearance_expiry', 'contact_person',
                  'contact_email', 'contact_phone', 'status', 'debarment_status', 'municipality',
                  'user_ids', 'usernames', 'submissions_count', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_usernames(self, obj):
        return list(obj.users.values_list('username', flat=True))

    def get_submissions_count(self, obj):
        return obj.submissions.count()

    def _link_users(self, vendor, users):
        linked = set(VendorUser.objects.filter(vendor=vendor).values_list('user_id', flat=True))
        for user in users:
            if user.id in linked:
                continue
            VendorUser.objects.create(user=user, vendor=vendor)
            if user.role != 'vendor':
                user.role = 'vendor'
                user.save(update_fields=['role'])

    def create(self, validated_data):
        users = validated_data.pop('user_ids', [])
        vendor = Vendor.objects.create(**validated_data)
        self._link_users(vendor, users)
        return vendor

    def update(self, instance, validated_data):
        users = validated_data.pop('user_ids', None)
        instance = super().update(instance, validated_data)
        if users is not None:
            self._link_users(instance, users)
        return instance


class TenderRequirementSerializer(serializers.ModelSerializer):

    class Meta:
        model = TenderRequirement
        fields = ['id', 'tender', 'requirement_type', 'description', 'is_mandatory', 'max_age_days', 'created_at']
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {'tender': {'required': False}}


class TenderScoringCriteriaSerializer(serializers.ModelSerializer):
    """Serializer for a tender's scoring criteria"""

    class Meta:
        model = TenderScoringCriteria
        fields = ['id', 'tender', 'criteria_name', 'criteria_category', 'description', 'max_score', 'weight',
                  'sort_order', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_max_score(self, value):
        if value <= 0:
            raise serializers.ValidationError("max_score must be positive")
        return value

    def validate_weight(self, value):
        if value < 0:
            raise serializers.ValidationError("weight cannot be negative")
        return value


class ScoringTemplateCriteriaSerializer(serializers.ModelSerializer):

    class Meta:
        model = ScoringTemplateCriteria
        fields = ['id', 'criteria_name', 'criteria_category', 'description', 'max_score', 'weight', 'sort_order']
        read_only_fields = ['id']

    def validate_max_score(self, value):
        if value <= 0:
            raise serializers.ValidationError("max_score must be positive")
        return value

    def validate_weight(self, value):
        if value < 0:
            raise serializers.ValidationError("weight cannot be negative")
        return value


class ScoringTemplateSerializer(serializers.ModelSerializer):
    """Scoring template with its criteria written and read inline"""
    criteria = ScoringTemplateCriteriaSerializer(many=True, required=False)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = ScoringTemplate
        fields = ['id', 'name', 'description', 'category', 'municipality', 'is_active', 'criteria',
                  'created_by', 'created_by_username', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def validate_criteria(self, value):
        names = [row['criteria_name'] for row in value]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise serializers.ValidationError(f"Duplicate criteria: {', '.join(duplicates)}")
        return value

    def create(self, validated_data):
        criteria = validated_data.pop('criteria', [])
        template = ScoringTemplate.objects.create(**validated_data)
        return replace_template_criteria(template, criteria)

    def update(self, instance, validated_data):
        criteria = validated_data.pop('criteria', None)
        instance = super().update(instance, validated_data)
        if criteria is not None:
            replace_template_criteria(instance, criteria)
        return instance


class TenderSerializer(serializers.ModelSerializer):
    """Serializer for Tender model"""
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)
    municipality_name = serializers.CharField(source='municipality.name', read_only=True)
    active_scoring_system = serializers.SerializerMethodField()
    submissions_count = serializers.SerializerMethodField()

    class Meta:
        model = Tender
        fields = ['id', 'tender_number', 'title', 'description', 'category', 'tender_type', 'closing_date',
                  'status', 'estimated_value', 'scoring_system', 'active_scoring_system', 'priority',
                  'municipality', 'municipality_name', 'created_by', 'created_by_username', 'submissions_count',
                  'awarded_at', 'created_at', 'updated_at']
        read_only_fields = ['id', 'tender_number', 'status', 'created_by', 'awarded_at', 'created_at', 'updated_at']

    def get_active_scoring_system(self, obj):
        return obj.active_scoring_system.value

    def get_submissions_count(self, obj):
        return obj.submissions.count()

    def validate_scoring_system(self, value):
        if not value:
            return None
        try:
            return ScoringSystem.parse(value).value
        except InvalidInputError as exc:
            raise serializers.ValidationError(str(exc))


class TenderDetailSerializer(TenderSerializer):
    requirements = TenderRequirementSerializer(many=True, read_only=True)
    scoring_criteria = TenderScoringCriteriaSerializer(many=True, read_only=True)

    class Meta(TenderSerializer.Meta):
        fields = TenderSerializer.Meta.fields + ['requirements', 'scoring_criteria']


class SubmissionDocumentSerializer(serializers.ModelSerializer):

    class Meta:
        model = SubmissionDocument
        fields = ['id', 'submission', 'requirement', 'document_name', 'document_type', 'document_date',
                  'expiry_date', 'verification_status', 'meets_requirement', 'failure_reason', 'uploaded_at']
        read_only_fields = ['id', 'verification_status', 'meets_requirement', 'failure_reason', 'uploaded_at']


class BidSubmissionSerializer(serializers.ModelSerializer):
    """Serializer for BidSubmission model"""
    tender_number = serializers.CharField(source='tender.tender_number', read_only=True)
    vendor_name = serializers.CharField(source='vendor.company_name', read_only=True)
    bbbee_level = serializers.CharField(source='vendor.bbbee_level', read_only=True)

    class Meta:
        model = BidSubmission
        fields = ['id', 'tender', 'tender_number', 'vendor', 'vendor_name', 'bbbee_level', 'submitted_by',
                  'status', 'submitted_at', 'bid_amount', 'scoring_system', 'price_score', 'bbbee_points',
                  'technical_score', 'total_score', 'rank', 'compliance_result', 'compliance_notes',
                  'rejection_reasons', 'compliance_checked_at', 'awarded_at', 'rejected_at',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'submitted_by', 'status', 'submitted_at', 'scoring_system', 'price_score',
                            'bbbee_points', 'technical_score', 'total_score', 'rank', 'compliance_result',
                            'compliance_notes', 'rejection_reasons', 'compliance_checked_at', 'awarded_at',
                            'rejected_at', 'created_at', 'updated_at']

    def validate(self, data):
        tender = data.get('tender') or getattr(self.instance, 'tender', None)
        if self.instance is None and tender is not None and tender.status != 'open':
            raise serializers.ValidationError("Bids can only be submitted on open tenders")
        if self.instance is not None:
            if self.instance.status != 'draft':
                raise serializers.ValidationError("Only draft submissions can be changed")
            for name in ('tender', 'vendor'):
                if name in data and data[name] != getattr(self.instance, name):
                    raise serializers.ValidationError({name: "cannot be changed once the bid exists"})
        return data


class BidSubmissionDetailSerializer(BidSubmissionSerializer):
    documents = SubmissionDocumentSerializer(many=True, read_only=True)

    class Meta(BidSubmissionSerializer.Meta):
        fields = BidSubmissionSerializer.Meta.fields + ['documents']


class EvaluationScoreSerializer(serializers.ModelSerializer):
    """Serializer for EvaluationScore model"""
    evaluator_username = serializers.CharField(source='evaluator.username', read_only=True, default=None)

    class Meta:
        model = EvaluationScore
        fields = ['id', 'submission', 'evaluator', 'evaluator_username', 'criteria_name', 'criteria_category',
                  'max_score', 'score', 'weight', 'comments', 'evaluated_at']
        read_only_fields = fields


class ScoreInputSerializer(serializers.Serializer):
    criteria_id = serializers.IntegerField(required=False)
    criteria_name = serializers.CharField(required=False)
    score = serializers.DecimalField(max_digits=7, decimal_places=2)
    comments = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        if 'criteria_id' not in data and not data.get('criteria_name'):
            raise serializers.ValidationError("criteria_id or criteria_name is required")
        return data


class ComplianceRuleSerializer(serializers.ModelSerializer):

    class Meta:
        model = ComplianceRule
        fields = ['id', 'code', 'name', 'description', 'category', 'rule_type', 'operator', 'field', 'value',
                  'threshold', 'severity', 'is_mandatory', 'is_active', 'error_message', 'municipality',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class ComplianceCheckSerializer(serializers.ModelSerializer):
    rule_code = serializers.CharField(source='rule.code', read_only=True, default=None)
    vendor_name = serializers.CharField(source='vendor.company_name', read_only=True)

    class Meta:
        model = ComplianceCheck
        fields = ['id', 'vendor', 'vendor_name', 'tender', 'submission', 'rule', 'rule_code', 'check_type',
                  'result', 'score', 'notes', 'details', 'performed_by', 'performed_at']
        read_only_fields = fields


class AwardAcceptanceSerializer(serializers.ModelSerializer):
    """Serializer for AwardAcceptance model"""
    tender_number = serializers.CharField(source='tender.tender_number', read_only=True)
    vendor_name = serializers.CharField(source='vendor.company_name', read_only=True)
    awarded_by_username = serializers.CharField(source='awarded_by.username', read_only=True, default=None)

    class Meta:
        model = AwardAcceptance
        fields = ['id', 'submission', 'tender', 'tender_number', 'vendor', 'vendor_name', 'signing_status',
                  'award_letter_content', 'signed_by_name', 'signed_at', 'declined_reason', 'reminder_count',
                  'reminder_sent_at', 'awarded_by', 'awarded_by_username', 'created_at', 'updated_at']
        read_only_fields = fields


class AuditLogSerializer(serializers.ModelSerializer):
    """Serializer for AuditLog model"""
    user_username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_username', 'action', 'entity_type', 'entity_id',
                  'details', 'ip_address', 'created_at']
        read_only_fields = ['id', 'user', 'created_at']


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for Notification model"""

    class Meta:
        model = Notification
        fields = ['id', 'user', 'title', 'message', 'type', 'is_read',
                  'related_entity_type', 'related_entity_id', 'created_at']
        read_only_fields = ['id', 'user', 'created_at']
