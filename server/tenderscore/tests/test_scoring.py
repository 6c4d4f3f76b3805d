# server/tenderscore/tests/test_scoring.py

from datetime import datetime, timedelta
from decimal import Decimal

from django.test import SimpleTestCase

from tenderscore import scoring
from tenderscore.exceptions import IncompleteDataError, InvalidInputError
from tenderscore.scoring import Criterion, CriterionScore, RankingEntry, ScoringSystem, SubmissionInput


class PriceScoreTest(SimpleTestCase):
    def test_worked_example(self):
        """80/20 price points for a bid 2.3m above the lowest of 22.5m"""
        score = scoring.calculate_price_score(Decimal('24800000'), Decimal('22500000'), '80/20')
        self.assertEqual(score, Decimal('71.82'))

    def test_lowest_bid_gets_full_points(self):
        self.assertEqual(scoring.calculate_price_score(100, 100, ScoringSystem.EIGHTY_TWENTY), Decimal('80.00'))
        self.assertEqual(scoring.calculate_price_score(100, 100, ScoringSystem.NINETY_TEN), Decimal('90.00'))

    def test_bid_below_lowest_is_capped(self):
        self.assertEqual(scoring.calculate_price_score(90, 100, '80/20'), Decimal('80.00'))

    def test_score_decreases_as_bid_increases(self):
        scores = [scoring.calculate_price_score(bid, 100, '80/20') for bid in (100, 110, 150, 190)]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(len(set(scores)), len(scores))

    def test_score_is_clamped_at_zero(self):
        self.assertEqual(scoring.calculate_price_score(200, 100, '80/20'), Decimal('0.00'))
        self.assertEqual(scoring.calculate_price_score(350, 100, '90/10'), Decimal('0.00'))

    def test_non_positive_lowest_bid_is_rejected(self):
        for pmin in (0, -100):
            with self.assertRaises(InvalidInputError):
                scoring.calculate_price_score(100, pmin, '80/20')

    def test_negative_bid_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            scoring.calculate_price_score(-1, 100, '80/20')

    def test_non_numeric_bid_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            scoring.calculate_price_score('abc', 100, '80/20')

    def test_unknown_scoring_system_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            scoring.calculate_price_score(100, 100, '70/30')

    def test_non_finite_amounts_are_rejected(self):
        for value in ('NaN', 'Infinity', Decimal('-Infinity'), float('nan')):
            with self.assertRaises(InvalidInputError):
                scoring.calculate_price_score(value, 100, '80/20')
            with self.assertRaises(InvalidInputError):
                scoring.calculate_price_score(100, value, '80/20')
        with self.assertRaises(InvalidInputError):
            scoring.validate_criterion(CriterionScore(name='Quality', score=Decimal('NaN'), max_score=10))

    def test_lowest_acceptable_bid_ignores_missing_and_zero_bids(self):
        self.assertEqual(scoring.lowest_acceptable_bid([None, 0, 300, 250]), Decimal('250'))
        with self.assertRaises(IncompleteDataError):
            scoring.lowest_acceptable_bid([None, 0])


class PreferencePointsTest(SimpleTestCase):
    def test_points_under_80_20(self):
        self.assertEqual(scoring.preference_points('Level 1', '80/20'), 20)
        self.assertEqual(scoring.preference_points('Level 3', '80/20'), 14)
        self.assertEqual(scoring.preference_points('Non-Compliant', '80/20'), 0)

    def test_points_under_90_10(self):
        self.assertEqual(scoring.preference_points('Level 1', '90/10'), 10)
        self.assertEqual(scoring.preference_points('Level 4', '90/10'), 5)
        self.assertEqual(scoring.preference_points('Level 8', '90/10'), 1)

    def test_lookup_is_stable(self):
        first = scoring.preference_points('Level 2', ScoringSystem.EIGHTY_TWENTY)
        second = scoring.preference_points('Level 2', ScoringSystem.EIGHTY_TWENTY)
        self.assertEqual(first, second)

    def test_level_spellings(self):
        self.assertEqual(scoring.normalize_bbbee_level('level 2'), 'Level 2')
        self.assertEqual(scoring.normalize_bbbee_level(5), 'Level 5')
        self.assertEqual(scoring.normalize_bbbee_level('non_compliant'), 'Non-Compliant')
        self.assertEqual(scoring.normalize_bbbee_level(None), 'Non-Compliant')

    def test_unknown_level_is_rejected(self):
        for level in ('Level 9', 'gold', '0'):
            with self.assertRaises(InvalidInputError):
                scoring.normalize_bbbee_level(level)


class ScoringSystemSelectionTest(SimpleTestCase):
    def test_threshold(self):
        self.assertEqual(scoring.select_scoring_system(None), ScoringSystem.EIGHTY_TWENTY)
        self.assertEqual(scoring.select_scoring_system(Decimal('50000000')), ScoringSystem.EIGHTY_TWENTY)
        self.assertEqual(scoring.select_scoring_system(Decimal('50000000.01')), ScoringSystem.NINETY_TEN)

    def test_custom_threshold(self):
        self.assertEqual(scoring.select_scoring_system(1001, threshold=1000), ScoringSystem.NINETY_TEN)

    def test_negative_value_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            scoring.select_scoring_system(-1)


class AggregationTest(SimpleTestCase):
    def setUp(self):
        self.criteria = [
            Criterion('Methodology', Decimal('10'), Decimal('2'), 'Technical'),
            Criterion('Quality plan', Decimal('5'), Decimal('1'), 'Quality'),
        ]

    def test_weighted_total(self):
        scores = [
            CriterionScore('Methodology', Decimal('8'), Decimal('10'), Decimal('2')),
            CriterionScore('Quality plan', Decimal('4'), Decimal('5'), Decimal('1')),
        ]
        self.assertEqual(scoring.aggregate_scores(self.criteria, scores), Decimal('20.00'))

    def test_scores_from_several_evaluators_are_averaged(self):
        scores = [
            CriterionScore('Methodology', Decimal('6'), Decimal('10'), Decimal('2')),
            CriterionScore('Methodology', Decimal('8'), Decimal('10'), Decimal('2')),
            CriterionScore('Quality plan', Decimal('4'), Decimal('5'), Decimal('1')),
        ]
        self.assertEqual(scoring.aggregate_scores(self.criteria, scores), Decimal('18.00'))

    def test_total_never_exceeds_maximum(self):
        scores = [
            CriterionScore('Methodology', Decimal('10'), Decimal('10'), Decimal('2')),
            CriterionScore('Quality plan', Decimal('5'), Decimal('5'), Decimal('1')),
        ]
        total = scoring.aggregate_scores(self.criteria, scores)
        self.assertEqual(total, scoring.maximum_total(self.criteria))
        self.assertEqual(total, Decimal('25.00'))

    def test_missing_criterion_score(self):
        scores = [CriterionScore('Methodology', Decimal('8'), Decimal('10'), Decimal('2'))]
        with self.assertRaises(IncompleteDataError) as ctx:
            scoring.aggregate_scores(self.criteria, scores)
        self.assertEqual(ctx.exception.missing, ['Quality plan'])

    def test_no_criteria(self):
        with self.assertRaises(IncompleteDataError):
            scoring.aggregate_scores([], [])

    def test_score_above_maximum_is_rejected(self):
        scores = [
            CriterionScore('Methodology', Decimal('11'), Decimal('10'), Decimal('2')),
            CriterionScore('Quality plan', Decimal('4'), Decimal('5'), Decimal('1')),
        ]
        with self.assertRaises(InvalidInputError):
            scoring.aggregate_scores(self.criteria, scores)

    def test_negative_values_are_rejected(self):
        with self.assertRaises(InvalidInputError):
            scoring.validate_criterion(Criterion('Methodology', Decimal('10'), Decimal('-1')))
        with self.assertRaises(InvalidInputError):
            scoring.validate_criterion(CriterionScore('Methodology', Decimal('-2'), Decimal('10')))


class RankingTest(SimpleTestCase):
    def test_highest_total_ranks_first(self):
        ranked = scoring.rank_submissions([
            RankingEntry('a', Decimal('70'), Decimal('100')),
            RankingEntry('b', Decimal('90'), Decimal('120')),
            RankingEntry('c', Decimal('80'), Decimal('110')),
        ])
        self.assertEqual([(e.submission_id, e.rank) for e in ranked], [('b', 1), ('c', 2), ('a', 3)])

    def test_tie_goes_to_lower_bid_then_earlier_submission(self):
        start = datetime(2024, 5, 1, 9, 0)
        ranked = scoring.rank_submissions([
            RankingEntry('late', Decimal('85'), Decimal('100'), start + timedelta(hours=2)),
            RankingEntry('expensive', Decimal('85'), Decimal('150'), start),
            RankingEntry('early', Decimal('85'), Decimal('100'), start),
        ])
        self.assertEqual([e.submission_id for e in ranked], ['early', 'late', 'expensive'])

    def test_ineligible_entries_are_excluded(self):
        ranked = scoring.rank_submissions([
            RankingEntry('a', Decimal('95'), Decimal('100'), eligible=False),
            RankingEntry('b', Decimal('60'), Decimal('100')),
        ])
        self.assertEqual([(e.submission_id, e.rank) for e in ranked], [('b', 1)])


class ScoreTenderTest(SimpleTestCase):
    def setUp(self):
        self.criteria = [
            Criterion('Price', Decimal('80'), Decimal('1'), 'Price'),
            Criterion('B-BBEE', Decimal('20'), Decimal('1'), 'BBBEE'),
        ]

    def test_price_and_preference_make_up_the_total(self):
        results = scoring.score_tender([
            SubmissionInput(2, Decimal('24800000'), 'Level 3'),
            SubmissionInput(1, Decimal('22500000'), 'Level 1'),
            SubmissionInput(3, Decimal('20000000'), 'Level 1', eligible=False),
        ], self.criteria, '80/20')

        self.assertEqual([r.submission_id for r in results], [1, 2, 3])
        first, second, excluded = results
        self.assertEqual((first.rank, first.price_score, first.bbbee_points), (1, Decimal('80.00'), Decimal('20')))
        self.assertEqual(first.total_score, Decimal('100.00'))
        self.assertEqual(second.total_score, Decimal('85.82'))
        self.assertEqual(second.technical_score, Decimal('0.00'))
        self.assertIsNone(excluded.rank)
        self.assertIsNone(excluded.total_score)

    def test_ineligible_bids_do_not_set_the_lowest_price(self):
        results = scoring.score_tender([
            SubmissionInput(1, Decimal('100'), 'Level 1'),
            SubmissionInput(2, Decimal('50'), 'Level 1', eligible=False),
        ], self.criteria, '80/20')
        self.assertEqual(results[0].price_score, Decimal('80.00'))

    def test_computed_points_are_scaled_to_criterion_maximum(self):
        criteria = [
            Criterion('Price', Decimal('70'), Decimal('1'), 'Price'),
            Criterion('B-BBEE', Decimal('30'), Decimal('1'), 'BBBEE'),
        ]
        results = scoring.score_tender([
            SubmissionInput(1, Decimal('22500000'), 'Level 1'),
            SubmissionInput(2, Decimal('24800000'), 'Level 3'),
        ], criteria, '80/20')
        self.assertEqual(results[1].total_score, Decimal('83.84'))

    def test_technical_criteria_are_weighted(self):
        criteria = self.criteria + [Criterion('Experience', Decimal('10'), Decimal('2'), 'Experience')]
        results = scoring.score_tender([
            SubmissionInput(1, Decimal('100'), 'Level 1', [
                CriterionScore('Experience', Decimal('5'), Decimal('10'), Decimal('2'), 'Experience'),
            ]),
        ], criteria, '90/10')
        result = results[0]
        self.assertEqual(result.technical_score, Decimal('10.00'))
        # 80 for the cheapest price, 20 for Level 1, 5 x 2 technical
        self.assertEqual(result.total_score, Decimal('110.00'))

    def test_missing_bid_amount(self):
        with self.assertRaises(IncompleteDataError):
            scoring.score_tender([SubmissionInput(1, None, 'Level 1')], self.criteria, '80/20')

    def test_missing_technical_scores(self):
        criteria = self.criteria + [Criterion('Experience', Decimal('10'), Decimal('1'), 'Experience')]
        with self.assertRaises(IncompleteDataError) as ctx:
            scoring.score_tender([SubmissionInput(1, Decimal('100'), 'Level 1')], criteria, '80/20')
        self.assertEqual(ctx.exception.missing, ['Experience'])
