# server/tenderscore/tests/factories.py

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from tenderscore.models import (
    Vendor, VendorUser, Tender, TenderRequirement, TenderScoringCriteria, BidSubmission
)


def make_user(username, role='staff', **extra):
    return get_user_model().objects.create_user(
        username=username,
        password='testpass123',
        email=f'{username}@example.com',
        role=role,
        **extra
    )


def make_vendor(company_name, bbbee_level='Level 1', users=(), **extra):
    vendor = Vendor.objects.create(
        company_name=company_name,
        registration_number=f'REG-{company_name[:10].upper()}',
        contact_person=f'{company_name} Contact',
        contact_email='contact@example.com',
        contact_phone='0110000000',
        bbbee_level=bbbee_level,
        **extra
    )
    for user in users:
        VendorUser.objects.create(user=user, vendor=vendor)
    return vendor


def make_tender(tender_number='TND-20240501-0001', status='closed', estimated_value=Decimal('1000000'),
                **extra):
    return Tender.objects.create(
        tender_number=tender_number,
        title=f'Tender {tender_number}',
        category='Construction',
        tender_type='Open Tender',
        closing_date=extra.pop('closing_date', timezone.now() - timedelta(days=1)),
        status=status,
        estimated_value=estimated_value,
        **extra
    )


def add_criteria(tender, *rows):
    """rows of (name, category, max_score, weight)"""
    return [
        TenderScoringCriteria.objects.create(
            tender=tender,
            criteria_name=name,
            criteria_category=category,
            max_score=Decimal(str(max_score)),
            weight=Decimal(str(weight)),
            sort_order=position,
        )
        for position, (name, category, max_score, weight) in enumerate(rows)
    ]


def add_requirement(tender, requirement_type, is_mandatory=True, max_age_days=None):
    return TenderRequirement.objects.create(
        tender=tender,
        requirement_type=requirement_type,
        description=f'{requirement_type} document',
        is_mandatory=is_mandatory,
        max_age_days=max_age_days,
    )


def make_submission(tender, vendor, bid_amount, status='passed', compliance_result='passed', **extra):
    return BidSubmission.objects.create(
        tender=tender,
        vendor=vendor,
        bid_amount=Decimal(str(bid_amount)) if bid_amount is not None else None,
        status=status,
        compliance_result=compliance_result,
        submitted_at=extra.pop('submitted_at', timezone.now()),
        **extra
    )
