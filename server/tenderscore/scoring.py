# server/tenderscore/scoring.py

"""
Preferential procurement scoring.

Price points use Ps = S x (1 - (Pt - Pmin) / Pmin) on the 80/20 or 90/10
scale, preference points come from the B-BBEE level table, and the total of a
submission is the weighted sum of its criterion scores. Nothing in here
touches the database so it can be reused by the API, the admin and the
management commands alike.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

from .exceptions import IncompleteDataError, InvalidInputError

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0')
DEFAULT_PREFERENCE_THRESHOLD = Decimal('50000000')

PRICE_CATEGORY = 'Price'
BBBEE_CATEGORY = 'BBBEE'
NON_COMPLIANT = 'Non-Compliant'


class ScoringSystem(str, Enum):
    EIGHTY_TWENTY = '80/20'
    NINETY_TEN = '90/10'

    @property
    def price_points(self):
        return Decimal('80') if self is ScoringSystem.EIGHTY_TWENTY else Decimal('90')

    @property
    def preference_points(self):
        return Decimal('20') if self is ScoringSystem.EIGHTY_TWENTY else Decimal('10')

    @classmethod
    def parse(cls, value):
        """Accept a ScoringSystem or its '80/20' / '90/10' label"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            raise InvalidInputError(f"unknown scoring system: {value!r}") from None


# Points per B-BBEE status level under each scale
PREFERENCE_POINTS_TABLE = {
    'Level 1': {ScoringSystem.EIGHTY_TWENTY: 20, ScoringSystem.NINETY_TEN: 10},
    'Level 2': {ScoringSystem.EIGHTY_TWENTY: 18, ScoringSystem.NINETY_TEN: 9},
    'Level 3': {ScoringSystem.EIGHTY_TWENTY: 14, ScoringSystem.NINETY_TEN: 6},
    'Level 4': {ScoringSystem.EIGHTY_TWENTY: 12, ScoringSystem.NINETY_TEN: 5},
    'Level 5': {ScoringSystem.EIGHTY_TWENTY: 8, ScoringSystem.NINETY_TEN: 4},
    'Level 6': {ScoringSystem.EIGHTY_TWENTY: 6, ScoringSystem.NINETY_TEN: 3},
    'Level 7': {ScoringSystem.EIGHTY_TWENTY: 4, ScoringSystem.NINETY_TEN: 2},
    'Level 8': {ScoringSystem.EIGHTY_TWENTY: 2, ScoringSystem.NINETY_TEN: 1},
    NON_COMPLIANT: {ScoringSystem.EIGHTY_TWENTY: 0, ScoringSystem.NINETY_TEN: 0},
}

BBBEE_LEVELS = tuple(PREFERENCE_POINTS_TABLE)


@dataclass(frozen=True)
class Criterion:
    name: str
    max_score: Decimal
    weight: Decimal = Decimal('1')
    category: str = ''


@dataclass(frozen=True)
class CriterionScore:
    name: str
    score: Decimal
    max_score: Decimal
    weight: Decimal = Decimal('1')
    category: str = ''
    comments: str = ''


@dataclass(frozen=True)
class RankingEntry:
    submission_id: object
    total: Decimal
    bid_amount: Optional[Decimal] = None
    submitted_at: Optional[datetime] = None
    eligible: bool = True
    rank: Optional[int] = None


@dataclass
class SubmissionInput:
    submission_id: object
    bid_amount: Optional[Decimal]
    bbbee_level: Optional[str]
    scores: List[CriterionScore] = field(default_factory=list)
    submitted_at: Optional[datetime] = None
    eligible: bool = True


@dataclass
class RankedSubmission:
    submission_id: object
    price_score: Optional[Decimal]
    bbbee_points: Optional[Decimal]
    technical_score: Optional[Decimal]
    total_score: Optional[Decimal]
    rank: Optional[int]
    eligible: bool = True
    scores: List[CriterionScore] = field(default_factory=list)


def to_decimal(value, name='value'):
    """Convert numbers and numeric strings to finite Decimals"""
    if value is None or isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidInputError(f"{name} must be a number, got {value!r}") from None
    if not value.is_finite():
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}")
    return value


def quantize(value):
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def select_scoring_system(estimated_value, threshold=DEFAULT_PREFERENCE_THRESHOLD):
    """Pick 90/10 for contracts above the threshold, 80/20 otherwise"""
    if estimated_value is None:
        return ScoringSystem.EIGHTY_TWENTY
    value = to_decimal(estimated_value, 'estimated value')
    if value < 0:
        raise InvalidInputError(f"estimated value cannot be negative, got {value}")
    if value > to_decimal(threshold, 'threshold'):
        return ScoringSystem.NINETY_TEN
    return ScoringSystem.EIGHTY_TWENTY


def calculate_price_score(bid_amount, lowest_bid, scoring_system):
    """
    Price points for a single bid.

    Ps = S x (1 - (Pt - Pmin) / Pmin), clamped to [0, S]. The lowest bid
    always gets the full S points and a bid of twice the lowest gets none.
    """
    system = ScoringSystem.parse(scoring_system)
    pmin = to_decimal(lowest_bid, 'lowest bid')
    if pmin <= 0:
        raise InvalidInputError(f"lowest acceptable bid must be positive, got {pmin}")

    pt = to_decimal(bid_amount, 'bid amount')
    if pt < 0:
        raise InvalidInputError(f"bid amount cannot be negative, got {pt}")

    ceiling = system.price_points
    if pt <= pmin:
        return quantize(ceiling)

    score = ceiling * (1 - (pt - pmin) / pmin)
    return quantize(max(ZERO, min(score, ceiling)))


def lowest_acceptable_bid(amounts):
    """Smallest positive bid amount (Pmin)"""
    positive = [to_decimal(a, 'bid amount') for a in amounts if a is not None]
    positive = [a for a in positive if a > 0]
    if not positive:
        raise IncompleteDataError("no positive bid amounts to derive the lowest acceptable bid from")
    return min(positive)


def normalize_bbbee_level(level):
    """Map 'level 2', '2', 2 or 'Level 2' to the table key 'Level 2'"""
    if level is None:
        return NON_COMPLIANT
    text = str(level).strip()
    if not text:
        return NON_COMPLIANT

    lowered = text.lower().replace('_', ' ').replace('-', ' ')
    if lowered in ('non compliant', 'noncompliant'):
        return NON_COMPLIANT
    if lowered.startswith('level'):
        lowered = lowered[len('level'):].strip()
    if lowered.isdigit():
        key = f"Level {int(lowered)}"
        if key in PREFERENCE_POINTS_TABLE:
            return key

    raise InvalidInputError(f"unknown B-BBEE level: {level!r}")


def preference_points(bbbee_level, scoring_system):
    """Fixed B-BBEE preference points for a level under the given scale"""
    system = ScoringSystem.parse(scoring_system)
    key = normalize_bbbee_level(bbbee_level)
    return Decimal(PREFERENCE_POINTS_TABLE[key][system])


def validate_criterion(criterion):
    """Reject negative weights/scores and scores above the maximum"""
    weight = to_decimal(criterion.weight, f"weight of {criterion.name}")
    max_score = to_decimal(criterion.max_score, f"max score of {criterion.name}")
    if weight < 0:
        raise InvalidInputError(f"weight of {criterion.name} cannot be negative, got {weight}")
    if max_score < 0:
        raise InvalidInputError(f"max score of {criterion.name} cannot be negative, got {max_score}")

    score = getattr(criterion, 'score', None)
    if score is not None:
        score = to_decimal(score, f"score of {criterion.name}")
        if score < 0:
            raise InvalidInputError(f"score of {criterion.name} cannot be negative, got {score}")
        if score > max_score:
            raise InvalidInputError(
                f"score of {criterion.name} ({score}) exceeds its maximum of {max_score}"
            )
    return criterion


def average_criterion_scores(criteria, scores):
    """
    One averaged score per criterion.

    Several evaluators may score the same criterion; their scores are
    averaged before weighting. Every criterion needs at least one score.
    """
    if not criteria:
        raise IncompleteDataError("no scoring criteria defined")

    by_name = {}
    for score in scores:
        validate_criterion(score)
        by_name.setdefault(score.name, []).append(to_decimal(score.score))

    averaged = []
    missing = []
    for criterion in criteria:
        validate_criterion(criterion)
        values = by_name.get(criterion.name)
        if not values:
            missing.append(criterion.name)
            continue

        max_score = to_decimal(criterion.max_score)
        average = sum(values, ZERO) / len(values)
        if average > max_score:
            raise InvalidInputError(
                f"score of {criterion.name} ({average}) exceeds its maximum of {max_score}"
            )
        averaged.append(CriterionScore(
            name=criterion.name,
            score=average,
            max_score=max_score,
            weight=to_decimal(criterion.weight),
            category=criterion.category,
        ))

    if missing:
        raise IncompleteDataError(
            f"no evaluation scores for criteria: {', '.join(missing)}",
            missing=missing,
        )
    return averaged


def weighted_total(scores):
    return sum((to_decimal(s.score) * to_decimal(s.weight) for s in scores), ZERO)


def maximum_total(criteria):
    return sum((to_decimal(c.max_score) * to_decimal(c.weight) for c in criteria), ZERO)


def aggregate_scores(criteria, scores):
    """Weighted total of a submission: sum(score x weight) over the criteria"""
    return quantize(weighted_total(average_criterion_scores(criteria, scores)))


def _ranking_key(entry):
    return (
        -entry.total,
        entry.bid_amount is None,
        entry.bid_amount if entry.bid_amount is not None else ZERO,
        entry.submitted_at is None,
        entry.submitted_at if entry.submitted_at is not None else datetime.min,
        str(entry.submission_id),
    )


def rank_submissions(entries):
    """
    Rank eligible entries 1..n.

    Highest total first; ties go to the lower bid amount, then to the
    earlier submission. Ineligible entries are left out.
    """
    eligible = [e for e in entries if e.eligible]
    ordered = sorted(eligible, key=_ranking_key)
    return [replace(entry, rank=position) for position, entry in enumerate(ordered, start=1)]


def _category_key(category):
    return (category or '').strip().lower().replace('-', '').replace(' ', '')


def is_price_category(category):
    return _category_key(category) == _category_key(PRICE_CATEGORY)


def is_bbbee_category(category):
    return _category_key(category) == _category_key(BBBEE_CATEGORY)


def scale_points(points, ceiling, max_score):
    """Re-express points out of `ceiling` as points out of `max_score`"""
    if ceiling == 0:
        return ZERO
    return quantize(points / ceiling * to_decimal(max_score))


def _with_computed_scores(criteria, scores, price_score, bbbee_points, system):
    """Replace Price and BBBEE criterion scores with the computed values"""
    computed = [
        s for s in scores
        if not (is_price_category(s.category) or is_bbbee_category(s.category))
    ]
    for criterion in criteria:
        if is_price_category(criterion.category):
            value = scale_points(price_score, system.price_points, criterion.max_score)
        elif is_bbbee_category(criterion.category):
            value = scale_points(bbbee_points, system.preference_points, criterion.max_score)
        else:
            continue
        computed.append(CriterionScore(
            name=criterion.name,
            score=value,
            max_score=to_decimal(criterion.max_score),
            weight=to_decimal(criterion.weight),
            category=criterion.category,
        ))
    return computed


def score_tender(submissions, criteria, scoring_system):
    """
    Score and rank every submission of a tender.

    Pmin is the lowest positive bid among eligible submissions. Ineligible
    submissions are returned unscored with rank None after the ranked ones.
    """
    system = ScoringSystem.parse(scoring_system)
    eligible = [s for s in submissions if s.eligible]
    ineligible = [
        RankedSubmission(s.submission_id, None, None, None, None, None, eligible=False)
        for s in submissions if not s.eligible
    ]
    if not eligible:
        return ineligible

    for submission in eligible:
        if submission.bid_amount is None or to_decimal(submission.bid_amount, 'bid amount') <= 0:
            raise IncompleteDataError(
                f"submission {submission.submission_id} has no bid amount",
                missing=[submission.submission_id],
            )
    pmin = lowest_acceptable_bid(s.bid_amount for s in eligible)

    results = {}
    entries = []
    for submission in eligible:
        price_score = calculate_price_score(submission.bid_amount, pmin, system)
        bbbee_points = preference_points(submission.bbbee_level, system)

        scores = _with_computed_scores(criteria, submission.scores, price_score, bbbee_points, system)
        averaged = average_criterion_scores(criteria, scores)
        total = quantize(weighted_total(averaged))
        technical = quantize(weighted_total(
            s for s in averaged
            if not (is_price_category(s.category) or is_bbbee_category(s.category))
        ))

        results[submission.submission_id] = RankedSubmission(
            submission_id=submission.submission_id,
            price_score=price_score,
            bbbee_points=bbbee_points,
            technical_score=technical,
            total_score=total,
            rank=None,
            scores=averaged,
        )
        entries.append(RankingEntry(
            submission_id=submission.submission_id,
            total=total,
            bid_amount=to_decimal(submission.bid_amount),
            submitted_at=submission.submitted_at,
        ))

    ranked = []
    for entry in rank_submissions(entries):
        result = results[entry.submission_id]
        result.rank = entry.rank
        ranked.append(result)
    return ranked + ineligible
