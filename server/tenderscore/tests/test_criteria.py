# server/tenderscore/tests/test_criteria.py

from decimal import Decimal

from django.test import TestCase

from tenderscore.criteria import apply_scoring_template, replace_template_criteria
from tenderscore.exceptions import InvalidInputError
from tenderscore.models import EvaluationScore, ScoringTemplate, TenderScoringCriteria

from .factories import add_criteria, make_submission, make_tender, make_vendor


class ScoringTemplateTestCase(TestCase):
    def setUp(self):
        self.template = ScoringTemplate.objects.create(name='Construction 80/20', category='Construction')
        replace_template_criteria(self.template, [
            {'criteria_name': 'Price', 'criteria_category': 'Price', 'max_score': Decimal('80')},
            {'criteria_name': 'B-BBEE', 'criteria_category': 'BBBEE', 'max_score': Decimal('20')},
            {'criteria_name': 'Methodology', 'criteria_category': 'Technical', 'max_score': Decimal('10'),
             'weight': Decimal('2')},
        ])
        self.tender = make_tender(status='open')
        add_criteria(self.tender, ('Quality', 'Quality', 15, 1))


class ReplaceTemplateCriteriaTest(ScoringTemplateTestCase):
    def test_rows_keep_their_position(self):
        names = list(self.template.criteria.values_list('criteria_name', 'sort_order'))
        self.assertEqual(names, [('Price', 0), ('B-BBEE', 1), ('Methodology', 2)])

    def test_replacing_drops_the_old_rows(self):
        replace_template_criteria(self.template, [
            {'criteria_name': 'Experience', 'criteria_category': 'Experience', 'max_score': Decimal('5'),
             'sort_order': 4},
        ])
        self.assertEqual(list(self.template.criteria.values_list('criteria_name', 'sort_order')), [('Experience', 4)])


class ApplyScoringTemplateTest(ScoringTemplateTestCase):
    def test_criteria_are_replaced_by_copies(self):
        criteria = apply_scoring_template(self.tender, self.template)

        self.assertEqual([c.criteria_name for c in criteria], ['Price', 'B-BBEE', 'Methodology'])
        self.assertFalse(self.tender.scoring_criteria.filter(criteria_name='Quality').exists())
        self.assertEqual(criteria[2].weight, Decimal('2'))

        # Later template edits do not reach the tender
        self.template.criteria.filter(criteria_name='Methodology').update(max_score=Decimal('50'))
        self.assertEqual(
            TenderScoringCriteria.objects.get(tender=self.tender, criteria_name='Methodology').max_score,
            Decimal('10')
        )

    def test_tender_under_review_is_frozen(self):
        self.tender.status = 'under_review'
        self.tender.save()
        with self.assertRaises(InvalidInputError):
            apply_scoring_template(self.tender, self.template)
        self.assertEqual(list(self.tender.scoring_criteria.values_list('criteria_name', flat=True)), ['Quality'])

    def test_scored_tender_is_frozen(self):
        self.tender.status = 'closed'
        self.tender.save()
        submission = make_submission(self.tender, make_vendor('Acme Civils'), 1000)
        EvaluationScore.objects.create(
            submission=submission, criteria_name='Quality', criteria_category='Quality',
            max_score=Decimal('15'), score=Decimal('12'),
        )
        with self.assertRaises(InvalidInputError):
            apply_scoring_template(self.tender, self.template)
        self.assertEqual(self.tender.scoring_criteria.count(), 1)

    def test_inactive_template(self):
        self.template.is_active = False
        self.template.save()
        with self.assertRaises(InvalidInputError):
            apply_scoring_template(self.tender, self.template)

    def test_empty_template(self):
        empty = ScoringTemplate.objects.create(name='Empty')
        with self.assertRaises(InvalidInputError):
            apply_scoring_template(self.tender, empty)
        self.assertEqual(self.tender.scoring_criteria.count(), 1)
