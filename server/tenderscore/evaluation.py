# server/tenderscore/evaluation.py

import logging

from django.db import transaction

from . import scoring
from .exceptions import IncompleteDataError, InvalidInputError
from .models import EvaluationScore
from .workflow import transition_submission, transition_tender

logger = logging.getLogger('tenderscore')

EVALUABLE_STATUSES = ('passed', 'manual_review', 'scored')
RANKABLE_STATUSES = ('passed', 'manual_review', 'scored', 'disqualified')
SCOREABLE_TENDER_STATUSES = ('closed', 'under_review')


def criterion_from_model(criteria):
    return scoring.Criterion(
        name=criteria.criteria_name,
        max_score=criteria.max_score,
        weight=criteria.weight,
        category=criteria.criteria_category,
    )


def score_from_model(row):
    return scoring.CriterionScore(
        name=row.criteria_name,
        score=row.score,
        max_score=row.max_score,
        weight=row.weight,
        category=row.criteria_category,
        comments=row.comments or '',
    )


def is_computed_category(category):
    return scoring.is_price_category(category) or scoring.is_bbbee_category(category)


def _find_criteria(criteria_list, row):
    criteria_id = row.get('criteria_id')
    criteria_name = row.get('criteria_name')
    for criteria in criteria_list:
        if criteria_id is not None and str(criteria.id) == str(criteria_id):
            return criteria
        if criteria_id is None and criteria_name and criteria.criteria_name == criteria_name:
            return criteria
    raise InvalidInputError(f"unknown scoring criterion: {criteria_id or criteria_name!r}")


def record_scores(submission, evaluator, rows):
    """
    Store an evaluator's scores for a submission.

    Each row names a criterion (criteria_id or criteria_name) and carries a
    score and optional comments. Price and B-BBEE criteria are computed by
    score_tender and cannot be scored by hand.
    """
    if submission.status not in EVALUABLE_STATUSES:
        raise InvalidInputError(
            f"submission in status {submission.status} cannot be evaluated"
        )
    if not rows:
        raise InvalidInputError("no scores provided")

    criteria_list = list(submission.tender.scoring_criteria.all())
    validated = []
    for row in rows:
        criteria = _find_criteria(criteria_list, row)
        if is_computed_category(criteria.criteria_category):
            raise InvalidInputError(
                f"{criteria.criteria_name} is calculated from the bid and cannot be scored manually"
            )
        score = scoring.to_decimal(row.get('score'), f"score of {criteria.criteria_name}")
        scoring.validate_criterion(scoring.CriterionScore(
            name=criteria.criteria_name,
            score=score,
            max_score=criteria.max_score,
            weight=criteria.weight,
        ))
        validated.append((criteria, score, row.get('comments') or row.get('comment') or ''))

    saved = []
    with transaction.atomic():
        for criteria, score, comments in validated:
            evaluation, _ = EvaluationScore.objects.update_or_create(
                submission=submission,
                evaluator=evaluator,
                criteria_name=criteria.criteria_name,
                defaults={
                    'criteria_category': criteria.criteria_category,
                    'max_score': criteria.max_score,
                    'weight': criteria.weight,
                    'score': score,
                    'comments': comments,
                },
            )
            saved.append(evaluation)

        if submission.status == 'passed':
            transition_submission(submission, 'manual_review')

    logger.info(
        "Recorded %d scores for submission %s by %s",
        len(saved), submission.id, getattr(evaluator, 'username', 'system'),
    )
    return saved


def _submission_input(submission):
    eligible = submission.compliance_result != 'failed' and submission.status != 'disqualified'
    return scoring.SubmissionInput(
        submission_id=submission.id,
        bid_amount=submission.bid_amount,
        bbbee_level=submission.vendor.bbbee_level,
        scores=[score_from_model(row) for row in submission.evaluation_scores.all()],
        submitted_at=submission.submitted_at,
        eligible=eligible,
    )


def score_tender(tender):
    """
    Score and rank every compliance-checked submission of a tender.

    Price and B-BBEE criterion scores are written as system rows (no
    evaluator), totals and ranks are stored on the submissions and the
    tender moves to under review. Any scoring error rolls back every write.
    """
    if tender.status not in SCOREABLE_TENDER_STATUSES:
        raise InvalidInputError(f"tender {tender.tender_number} must be closed before scoring")

    criteria_models = list(tender.scoring_criteria.all())
    if not criteria_models:
        raise IncompleteDataError(f"no scoring criteria defined for tender {tender.tender_number}")
    criteria = [criterion_from_model(c) for c in criteria_models]

    submissions = list(
        tender.submissions
        .filter(status__in=RANKABLE_STATUSES)
        .select_related('vendor')
        .prefetch_related('evaluation_scores')
    )
    system = tender.active_scoring_system

    results = scoring.score_tender(
        [_submission_input(s) for s in submissions], criteria, system
    )
    by_id = {s.id: s for s in submissions}

    with transaction.atomic():
        for result in results:
            submission = by_id[result.submission_id]
            submission.scoring_system = system.value
            submission.price_score = result.price_score
            submission.bbbee_points = result.bbbee_points
            submission.technical_score = result.technical_score
            submission.total_score = result.total_score
            submission.rank = result.rank

            if result.eligible:
                for score in result.scores:
                    if not is_computed_category(score.category):
                        continue
                    EvaluationScore.objects.update_or_create(
                        submission=submission,
                        evaluator=None,
                        criteria_name=score.name,
                        defaults={
                            'criteria_category': score.category,
                            'max_score': score.max_score,
                            'weight': score.weight,
                            'score': score.score,
                            'comments': f"Calculated on the {system.value} scale",
                        },
                    )
                if submission.status in ('passed', 'manual_review'):
                    transition_submission(submission, 'scored', save=False)

            submission.save()

        if tender.status == 'closed':
            transition_tender(tender, 'under_review')

    logger.info(
        "Scored tender %s on the %s scale: %d ranked, %d excluded",
        tender.tender_number, system.value,
        sum(1 for r in results if r.rank is not None),
        sum(1 for r in results if not r.eligible),
    )
    return results


def submission_breakdown(submission):
    """Per-criterion averaged scores and weighted contributions"""
    criteria_list = list(submission.tender.scoring_criteria.all())
    rows = list(submission.evaluation_scores.select_related('evaluator'))
    panel = set(
        EvaluationScore.objects.filter(submission__tender_id=submission.tender_id, evaluator__isnull=False)
        .values_list('evaluator__username', flat=True)
    )
    scored_by = {r.evaluator.username for r in rows if r.evaluator is not None}

    criteria_rows = []
    for criteria in criteria_list:
        matching = [r for r in rows if r.criteria_name == criteria.criteria_name]
        average = None
        weighted = None
        if matching:
            average = scoring.quantize(sum((r.score for r in matching), scoring.ZERO) / len(matching))
            weighted = scoring.quantize(average * criteria.weight)

        criteria_rows.append({
            'criteria_id': criteria.id,
            'criteria_name': criteria.criteria_name,
            'criteria_category': criteria.criteria_category,
            'max_score': criteria.max_score,
            'weight': criteria.weight,
            'average_score': average,
            'weighted_score': weighted,
            'evaluator_count': len({r.evaluator_id for r in matching if r.evaluator_id is not None}),
            'scores': [
                {
                    'evaluator': r.evaluator.username if r.evaluator else 'system',
                    'score': r.score,
                    'comments': r.comments,
                }
                for r in matching
            ],
        })

    return {
        'submission_id': submission.id,
        'criteria': criteria_rows,
        'missing_criteria': [c['criteria_name'] for c in criteria_rows if c['average_score'] is None],
        'weighted_total': scoring.quantize(
            sum((c['weighted_score'] for c in criteria_rows if c['weighted_score'] is not None), scoring.ZERO)
        ),
        'maximum_total': scoring.quantize(scoring.maximum_total([criterion_from_model(c) for c in criteria_list])),
        # Calculated price and B-BBEE rows have no evaluator
        'evaluator_count': len(scored_by),
        'total_evaluators': len(panel),
        'pending_evaluators': sorted(panel - scored_by),
        'total_score': submission.total_score,
        'rank': submission.rank,
    }
