# server/tenderscore/compliance.py

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from .exceptions import InvalidInputError
from .models import ComplianceCheck
from .workflow import transition_submission

logger = logging.getLogger('tenderscore')


def _as_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise InvalidInputError(f"not a date: {value!r}") from None


def find_matching_document(requirement, documents):
    """Prefer a document linked to the requirement, fall back to its type"""
    for document in documents:
        if document.requirement_id == requirement.id:
            return document
    for document in documents:
        if document.document_type == requirement.requirement_type:
            return document
    return None


def check_requirement(requirement, documents, today=None):
    """Check one tender requirement against the submitted documents"""
    today = today or timezone.localdate()
    document = find_matching_document(requirement, documents)
    result = {
        'requirement_id': requirement.id,
        'requirement_type': requirement.requirement_type,
        'is_mandatory': requirement.is_mandatory,
        'document_id': document.id if document else None,
    }

    if document is None:
        return {**result, 'passed': False, 'reason': f"Missing required document: {requirement.requirement_type}"}

    if requirement.max_age_days and document.document_date:
        age = (today - _as_date(document.document_date)).days
        if age > requirement.max_age_days:
            return {
                **result,
                'passed': False,
                'reason': f"Document is {age} days old, maximum allowed is {requirement.max_age_days} days",
            }

    if document.expiry_date and _as_date(document.expiry_date) < today:
        return {
            **result,
            'passed': False,
            'reason': f"Document expired on {_as_date(document.expiry_date):%Y-%m-%d}",
        }

    return {**result, 'passed': True, 'reason': 'Document meets requirement'}


def run_submission_compliance(submission, performed_by=None, today=None):
    """
    Check a submitted bid against every requirement of its tender.

    One ComplianceCheck row is stored per requirement. The bid passes when
    every mandatory requirement is met and is disqualified otherwise.
    """
    requirements = list(submission.tender.requirements.all())
    documents = list(submission.documents.all())

    with transaction.atomic():
        results = []
        for requirement in requirements:
            outcome = check_requirement(requirement, documents, today)
            results.append(outcome)

            ComplianceCheck.objects.create(
                vendor=submission.vendor,
                tender=submission.tender,
                submission=submission,
                check_type=requirement.requirement_type,
                result='passed' if outcome['passed'] else 'failed',
                notes=outcome['reason'],
                details={'requirement_id': requirement.id, 'document_id': outcome['document_id']},
                performed_by=performed_by,
            )

            document = next((d for d in documents if d.id == outcome['document_id']), None)
            if document is not None:
                document.meets_requirement = outcome['passed']
                document.verification_status = 'verified' if outcome['passed'] else 'rejected'
                document.failure_reason = None if outcome['passed'] else outcome['reason']
                document.save(update_fields=['meets_requirement', 'verification_status', 'failure_reason'])

        mandatory = [r for r in results if r['is_mandatory']]
        mandatory_passed = [r for r in mandatory if r['passed']]
        overall_passed = len(mandatory_passed) == len(mandatory)
        failed_reasons = [r['reason'] for r in results if not r['passed']]

        submission.compliance_result = 'passed' if overall_passed else 'failed'
        submission.compliance_notes = (
            '; '.join(failed_reasons) if failed_reasons else 'All requirements met'
        )
        submission.rejection_reasons = None if overall_passed else failed_reasons
        submission.compliance_checked_at = timezone.now()
        transition_submission(submission, 'passed' if overall_passed else 'disqualified', save=False)
        submission.save()

    logger.info(
        "Compliance check for submission %s: %d/%d requirements met, overall %s",
        submission.id, len(results) - len(failed_reasons), len(results),
        'passed' if overall_passed else 'failed',
    )

    return {
        'results': results,
        'summary': {
            'total_requirements': len(results),
            'passed_count': len(results) - len(failed_reasons),
            'failed_count': len(failed_reasons),
            'mandatory_total': len(mandatory),
            'mandatory_passed': len(mandatory_passed),
            'overall_passed': overall_passed,
        },
    }


def _as_number(value):
    if value is None or value == '':
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v).strip() for v in value]
    return [v.strip() for v in str(value).split(',') if v.strip()]


def _compare(fact, expected, compare):
    left, right = _as_number(fact), _as_number(expected)
    if left is None or right is None:
        return False
    return compare(left, right)


def _rule_expected(rule):
    if rule.value not in (None, ''):
        return rule.value
    return rule.threshold


def evaluate_rule(rule, facts, today=None):
    """Apply a compliance rule operator to the fact named by rule.field"""
    today = today or timezone.localdate()
    fact = facts.get(rule.field)
    expected = _rule_expected(rule)
    operator = rule.operator

    if operator == 'exists':
        return fact not in (None, '')
    if operator == 'not_exists':
        return fact in (None, '')
    if operator == 'is_valid':
        return fact is not None and _as_date(fact) >= today
    if operator == 'is_expired':
        return fact is not None and _as_date(fact) < today
    if operator == 'equals':
        return str(fact).strip().lower() == str(expected).strip().lower()
    if operator == 'not_equals':
        return str(fact).strip().lower() != str(expected).strip().lower()
    if operator == 'greater_than':
        return _compare(fact, expected, lambda a, b: a > b)
    if operator == 'less_than':
        return _compare(fact, expected, lambda a, b: a < b)
    if operator == 'greater_or_equal':
        return _compare(fact, expected, lambda a, b: a >= b)
    if operator == 'less_or_equal':
        return _compare(fact, expected, lambda a, b: a <= b)
    if operator == 'contains':
        return fact is not None and str(expected).lower() in str(fact).lower()
    if operator == 'not_contains':
        return fact is None or str(expected).lower() not in str(fact).lower()
    if operator == 'in_list':
        return str(fact).strip() in _as_list(expected)
    if operator == 'not_in_list':
        return str(fact).strip() not in _as_list(expected)

    raise InvalidInputError(f"unknown rule operator: {operator!r}")


def vendor_facts(vendor):
    """Vendor attributes that compliance rules can refer to"""
    level = vendor.bbbee_level or 'Non-Compliant'
    return {
        'bbbee_level': level,
        'bbbee_level_number': int(level.split()[-1]) if level.startswith('Level') else None,
        'bbbee_certificate_expiry': vendor.bbbee_certificate_expiry,
        'tax_clearance_expiry': vendor.tax_clearance_expiry,
        'status': vendor.status,
        'debarment_status': vendor.debarment_status,
        'csd_id': vendor.csd_id,
        'registration_number': vendor.registration_number,
        'vat_number': vendor.vat_number,
    }


def run_vendor_rules(vendor, rules, tender=None, performed_by=None, today=None):
    """Evaluate active rules against a vendor and store one check per rule"""
    facts = vendor_facts(vendor)
    checks = []

    with transaction.atomic():
        for rule in rules:
            if not rule.is_active:
                continue

            passed = evaluate_rule(rule, facts, today)
            if passed:
                result = 'passed'
            else:
                result = 'failed' if rule.is_mandatory else 'flagged'

            checks.append(ComplianceCheck.objects.create(
                vendor=vendor,
                tender=tender,
                rule=rule,
                check_type=rule.rule_type,
                result=result,
                notes=None if passed else (rule.error_message or f"Rule {rule.code} not satisfied"),
                details={
                    'code': rule.code,
                    'field': rule.field,
                    'operator': rule.operator,
                    'actual': str(facts.get(rule.field)) if facts.get(rule.field) is not None else None,
                },
                performed_by=performed_by,
            ))

    failed = [c for c in checks if c.result == 'failed']
    if failed:
        logger.warning(
            "Vendor %s failed %d mandatory compliance rules", vendor.company_name, len(failed)
        )
    return checks
