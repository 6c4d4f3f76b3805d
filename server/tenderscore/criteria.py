# server/tenderscore/criteria.py

import logging

from django.db import transaction

from .exceptions import InvalidInputError
from .models import EvaluationScore, ScoringTemplateCriteria, TenderScoringCriteria

logger = logging.getLogger('tenderscore')

# Criteria are frozen once evaluation has started
CRITERIA_EDITABLE_STATUSES = ('open', 'closed')


def apply_scoring_template(tender, template):
    """
    Replace a tender's scoring criteria with a copy of a template's.

    The tender must still be open or closed and nobody may have scored it
    yet. The old criteria are deleted and the copies created atomically.
    """
    if tender.status not in CRITERIA_EDITABLE_STATUSES:
        raise InvalidInputError(
            f"criteria of tender {tender.tender_number} cannot be changed while it is {tender.status}"
        )
    if not template.is_active:
        raise InvalidInputError(f"scoring template {template.name} is inactive")
    if EvaluationScore.objects.filter(submission__tender=tender).exists():
        raise InvalidInputError(
            f"tender {tender.tender_number} already has evaluation scores, its criteria cannot be replaced"
        )

    template_criteria = list(template.criteria.all())
    if not template_criteria:
        raise InvalidInputError(f"scoring template {template.name} has no criteria")

    with transaction.atomic():
        removed, _ = tender.scoring_criteria.all().delete()
        for item in template_criteria:
            TenderScoringCriteria.objects.create(
                tender=tender,
                criteria_name=item.criteria_name,
                criteria_category=item.criteria_category,
                description=item.description,
                max_score=item.max_score,
                weight=item.weight,
                sort_order=item.sort_order,
            )

    logger.info(
        "Applied scoring template %s to tender %s: %d criteria replaced by %d",
        template.name, tender.tender_number, removed, len(template_criteria),
    )
    return list(tender.scoring_criteria.all())


def replace_template_criteria(template, rows):
    """Swap a template's criteria for validated serializer rows"""
    with transaction.atomic():
        template.criteria.all().delete()
        for position, row in enumerate(rows):
            ScoringTemplateCriteria.objects.create(
                template=template,
                sort_order=row.pop('sort_order', position),
                **row
            )
    return template
