# server/tenderscore/awards.py

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .exceptions import InvalidInputError
from .models import AwardAcceptance
from .utils import create_notification, notify_users
from .workflow import award_workflow, transition_award, transition_submission, transition_tender

logger = logging.getLogger('tenderscore')


def default_award_letter(submission):
    tender = submission.tender
    return (
        f"Dear {submission.vendor.contact_person},\n\n"
        f"We are pleased to inform you that {submission.vendor.company_name} has been awarded "
        f"tender {tender.tender_number}: {tender.title}, at a bid amount of R{submission.bid_amount}.\n\n"
        f"Please review and sign this letter to accept the award."
    )


def award_submission(submission, user=None, letter=None):
    """
    Award a tender to a scored submission.

    The other scored submissions of the tender are rejected, the tender
    moves to awarded and the vendor's users are notified.
    """
    if submission.status != 'scored':
        raise InvalidInputError(
            f"only scored submissions can be awarded, submission {submission.id} is {submission.status}"
        )
    if AwardAcceptance.objects.filter(submission=submission).exists():
        raise InvalidInputError(f"submission {submission.id} has already been awarded")

    tender = submission.tender
    with transaction.atomic():
        award = AwardAcceptance.objects.create(
            submission=submission,
            tender=tender,
            vendor=submission.vendor,
            award_letter_content=letter or default_award_letter(submission),
            awarded_by=user if user is not None and user.is_authenticated else None,
        )
        transition_submission(submission, 'awarded')

        others = list(tender.submissions.filter(status='scored').exclude(id=submission.id))
        for other in others:
            transition_submission(other, 'rejected')

        if tender.status == 'closed':
            transition_tender(tender, 'under_review')
        transition_tender(tender, 'awarded')

    notify_users(
        submission.vendor.users.all(),
        'Tender Awarded to Your Company',
        f'Your bid for "{tender.title}" has been accepted. Please sign the award letter.',
        related_entity=award,
    )
    for other in others:
        notify_users(
            other.vendor.users.all(),
            'Tender Award Result',
            f'Your bid for "{tender.title}" was not selected.',
            related_entity=other,
        )

    logger.info(
        "Tender %s awarded to %s, %d other bids rejected",
        tender.tender_number, submission.vendor.company_name, len(others),
    )
    return award


def send_for_sla_review(award):
    transition_award(award, 'sla_review')
    award.save(update_fields=['signing_status', 'updated_at'])
    return award


def sign_award(award, signature_data, signed_by_name=None):
    """Record the vendor's signature on the award letter"""
    if not signature_data:
        raise InvalidInputError("signature_data is required")

    transition_award(award, 'signed')
    award.signature_data = signature_data
    award.signed_by_name = signed_by_name or award.vendor.contact_person
    award.save(update_fields=['signing_status', 'signed_at', 'signature_data', 'signed_by_name', 'updated_at'])

    if award.awarded_by is not None:
        create_notification(
            user=award.awarded_by,
            title='Award Signed',
            message=f'{award.vendor.company_name} signed the award for {award.tender.tender_number}.',
            notification_type='success',
            related_entity=award,
        )
    return award


def decline_award(award, reason):
    if not reason:
        raise InvalidInputError("a reason is required to decline an award")

    transition_award(award, 'declined')
    award.declined_reason = reason
    award.save(update_fields=['signing_status', 'declined_reason', 'updated_at'])

    if award.awarded_by is not None:
        create_notification(
            user=award.awarded_by,
            title='Award Declined',
            message=f'{award.vendor.company_name} declined the award for {award.tender.tender_number}: {reason}',
            notification_type='warning',
            related_entity=award,
        )
    logger.warning("Award %s for tender %s declined", award.id, award.tender.tender_number)
    return award


def remind(award):
    """Send the vendor's users a reminder to sign a pending award"""
    if award_workflow.is_terminal(award.signing_status):
        raise InvalidInputError(f"award {award.id} is already {award.signing_status}")

    limit = settings.PROCUREMENT_SETTINGS.get('AWARD_REMINDER_LIMIT')
    if limit is not None and award.reminder_count >= limit:
        raise InvalidInputError(f"reminder limit of {limit} reached for award {award.id}")

    notify_users(
        award.vendor.users.all(),
        'Award Signature Reminder',
        f'Your award for tender {award.tender.tender_number} is waiting for your signature.',
        related_entity=award,
    )
    award.reminder_count += 1
    award.reminder_sent_at = timezone.now()
    award.save(update_fields=['reminder_count', 'reminder_sent_at', 'updated_at'])
    return award
