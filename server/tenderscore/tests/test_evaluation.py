# server/tenderscore/tests/test_evaluation.py

from decimal import Decimal

from django.test import TestCase

from tenderscore import evaluation
from tenderscore.exceptions import IncompleteDataError, InvalidInputError
from tenderscore.models import EvaluationScore

from .factories import add_criteria, make_submission, make_tender, make_user, make_vendor


class EvaluationTestCase(TestCase):
    def setUp(self):
        self.evaluator = make_user('eval1', role='evaluator')
        self.second_evaluator = make_user('eval2', role='evaluator')
        self.tender = make_tender()
        self.price, self.bbbee, self.experience = add_criteria(
            self.tender,
            ('Price', 'Price', 70, 1),
            ('B-BBEE', 'BBBEE', 20, 1),
            ('Experience', 'Experience', 10, 1),
        )
        self.first = make_submission(self.tender, make_vendor('Acme Civils', 'Level 1'), 22500000)
        self.second = make_submission(self.tender, make_vendor('Blue Crane', 'Level 3'), 24800000)
        self.disqualified = make_submission(
            self.tender, make_vendor('Cheap Works', 'Level 1'), 1000000,
            status='disqualified', compliance_result='failed'
        )


class RecordScoresTest(EvaluationTestCase):
    def test_scores_are_stored_and_bid_moves_to_review(self):
        saved = evaluation.record_scores(self.first, self.evaluator, [
            {'criteria_id': self.experience.id, 'score': '8', 'comments': 'Strong references'},
        ])

        self.assertEqual(len(saved), 1)
        self.assertEqual(saved[0].score, Decimal('8'))
        self.assertEqual(saved[0].max_score, Decimal('10'))
        self.first.refresh_from_db()
        self.assertEqual(self.first.status, 'manual_review')

    def test_scoring_again_replaces_the_evaluator_score(self):
        evaluation.record_scores(self.first, self.evaluator, [{'criteria_name': 'Experience', 'score': 5}])
        evaluation.record_scores(self.first, self.evaluator, [{'criteria_name': 'Experience', 'score': 9}])

        rows = EvaluationScore.objects.filter(submission=self.first, evaluator=self.evaluator)
        self.assertEqual(rows.count(), 1)
        self.assertEqual(rows.get().score, Decimal('9'))

    def test_score_above_maximum_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            evaluation.record_scores(self.first, self.evaluator, [{'criteria_id': self.experience.id, 'score': 11}])
        self.assertFalse(EvaluationScore.objects.exists())

    def test_unknown_criterion_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            evaluation.record_scores(self.first, self.evaluator, [{'criteria_name': 'Innovation', 'score': 3}])

    def test_price_cannot_be_scored_by_hand(self):
        with self.assertRaises(InvalidInputError):
            evaluation.record_scores(self.first, self.evaluator, [{'criteria_id': self.price.id, 'score': 50}])

    def test_disqualified_bid_cannot_be_evaluated(self):
        with self.assertRaises(InvalidInputError):
            evaluation.record_scores(
                self.disqualified, self.evaluator, [{'criteria_id': self.experience.id, 'score': 5}]
            )


class ScoreTenderTest(EvaluationTestCase):
    def score_experience(self):
        evaluation.record_scores(self.first, self.evaluator, [{'criteria_id': self.experience.id, 'score': 8}])
        evaluation.record_scores(self.first, self.second_evaluator, [{'criteria_id': self.experience.id, 'score': 6}])
        evaluation.record_scores(self.second, self.evaluator, [{'criteria_id': self.experience.id, 'score': 10}])

    def test_scores_and_ranks_eligible_bids(self):
        self.score_experience()

        results = evaluation.score_tender(self.tender)

        self.assertEqual([r.submission_id for r in results], [self.first.id, self.second.id, self.disqualified.id])
        for submission in (self.first, self.second, self.disqualified):
            submission.refresh_from_db()

        self.assertEqual(self.first.rank, 1)
        self.assertEqual(self.first.price_score, Decimal('80.00'))
        self.assertEqual(self.first.bbbee_points, Decimal('20.00'))
        self.assertEqual(self.first.technical_score, Decimal('7.00'))
        self.assertEqual(self.first.total_score, Decimal('97.00'))
        self.assertEqual(self.first.scoring_system, '80/20')
        self.assertEqual(self.first.status, 'scored')

        self.assertEqual(self.second.rank, 2)
        self.assertEqual(self.second.price_score, Decimal('71.82'))
        self.assertEqual(self.second.total_score, Decimal('86.84'))

        self.assertIsNone(self.disqualified.rank)
        self.assertIsNone(self.disqualified.total_score)
        self.assertEqual(self.disqualified.status, 'disqualified')

        self.tender.refresh_from_db()
        self.assertEqual(self.tender.status, 'under_review')

    def test_computed_scores_are_stored_as_system_rows(self):
        self.score_experience()
        evaluation.score_tender(self.tender)

        price_row = EvaluationScore.objects.get(submission=self.second, evaluator=None, criteria_name='Price')
        self.assertEqual(price_row.score, Decimal('62.84'))
        bbbee_row = EvaluationScore.objects.get(submission=self.second, evaluator=None, criteria_name='B-BBEE')
        self.assertEqual(bbbee_row.score, Decimal('14.00'))

    def test_rescoring_updates_system_rows(self):
        self.score_experience()
        evaluation.score_tender(self.tender)
        evaluation.score_tender(self.tender)

        self.assertEqual(
            EvaluationScore.objects.filter(submission=self.first, evaluator=None).count(), 2
        )

    def test_missing_scores_leave_everything_untouched(self):
        evaluation.record_scores(self.first, self.evaluator, [{'criteria_id': self.experience.id, 'score': 8}])

        with self.assertRaises(IncompleteDataError) as ctx:
            evaluation.score_tender(self.tender)

        self.assertEqual(ctx.exception.missing, ['Experience'])
        self.first.refresh_from_db()
        self.tender.refresh_from_db()
        self.assertIsNone(self.first.total_score)
        self.assertEqual(self.first.status, 'manual_review')
        self.assertEqual(self.tender.status, 'closed')
        self.assertFalse(EvaluationScore.objects.filter(evaluator=None).exists())

    def test_open_tender_cannot_be_scored(self):
        self.tender.status = 'open'
        self.tender.save()
        with self.assertRaises(InvalidInputError):
            evaluation.score_tender(self.tender)

    def test_tender_without_criteria(self):
        tender = make_tender('TND-20240501-0002')
        with self.assertRaises(IncompleteDataError):
            evaluation.score_tender(tender)

    def test_large_contract_uses_90_10(self):
        tender = make_tender('TND-20240501-0003', estimated_value=Decimal('60000000'))
        add_criteria(tender, ('Price', 'Price', 90, 1), ('B-BBEE', 'BBBEE', 10, 1))
        submission = make_submission(tender, make_vendor('Delta Build', 'Level 2'), 75000000)

        evaluation.score_tender(tender)

        submission.refresh_from_db()
        self.assertEqual(submission.scoring_system, '90/10')
        self.assertEqual(submission.price_score, Decimal('90.00'))
        self.assertEqual(submission.bbbee_points, Decimal('9.00'))
        self.assertEqual(submission.total_score, Decimal('99.00'))


class BreakdownTest(EvaluationTestCase):
    def test_breakdown_averages_evaluators(self):
        evaluation.record_scores(self.first, self.evaluator, [{'criteria_id': self.experience.id, 'score': 8}])
        evaluation.record_scores(self.first, self.second_evaluator, [{'criteria_id': self.experience.id, 'score': 6}])

        breakdown = evaluation.submission_breakdown(self.first)

        experience = next(c for c in breakdown['criteria'] if c['criteria_name'] == 'Experience')
        self.assertEqual(experience['average_score'], Decimal('7.00'))
        self.assertEqual(len(experience['scores']), 2)
        self.assertEqual(breakdown['missing_criteria'], ['Price', 'B-BBEE'])
        self.assertEqual(breakdown['weighted_total'], Decimal('7.00'))
        self.assertEqual(breakdown['maximum_total'], Decimal('100.00'))

    def test_breakdown_counts_evaluators(self):
        evaluation.record_scores(self.first, self.evaluator, [{'criteria_id': self.experience.id, 'score': 8}])
        evaluation.record_scores(self.second, self.evaluator, [{'criteria_id': self.experience.id, 'score': 7}])
        evaluation.record_scores(self.second, self.second_evaluator, [{'criteria_id': self.experience.id, 'score': 5}])

        breakdown = evaluation.submission_breakdown(self.first)
        self.assertEqual(breakdown['evaluator_count'], 1)
        self.assertEqual(breakdown['total_evaluators'], 2)
        self.assertEqual(breakdown['pending_evaluators'], ['eval2'])

        evaluation.score_tender(self.tender)
        self.first.refresh_from_db()
        breakdown = evaluation.submission_breakdown(self.first)
        price = next(c for c in breakdown['criteria'] if c['criteria_name'] == 'Price')
        self.assertEqual(price['evaluator_count'], 0)
        self.assertEqual(price['scores'][0]['evaluator'], 'system')
        self.assertEqual(breakdown['evaluator_count'], 1)
        self.assertEqual(breakdown['total_evaluators'], 2)
        self.assertEqual(evaluation.submission_breakdown(self.second)['pending_evaluators'], [])
