# server/tenderscore/tests/test_commands.py

from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.utils import timezone

from tenderscore.models import Notification

from .factories import add_criteria, make_submission, make_tender, make_user, make_vendor


class ScoreTenderCommandTest(TestCase):
    def test_prints_ranking(self):
        tender = make_tender()
        add_criteria(tender, ('Price', 'Price', 80, 1), ('B-BBEE', 'BBBEE', 20, 1))
        make_submission(tender, make_vendor('Acme Civils', 'Level 1'), 1000000)
        make_submission(tender, make_vendor('Blue Crane', 'Level 4'), 1100000)
        make_submission(
            tender, make_vendor('Cheap Works'), 500000, status='disqualified', compliance_result='failed'
        )

        out = StringIO()
        call_command('score_tender', tender.tender_number, stdout=out)

        output = out.getvalue()
        self.assertIn('scored on the 80/20 scale', output)
        self.assertIn('1. Acme Civils: total 100.00', output)
        self.assertIn('Cheap Works (not eligible)', output)
        self.assertIn('Scored 3 submissions', output)

    def test_unknown_tender(self):
        with self.assertRaises(CommandError):
            call_command('score_tender', 'TND-NOPE', stdout=StringIO())

    def test_scoring_error_is_reported(self):
        tender = make_tender(status='open')
        with self.assertRaises(CommandError) as ctx:
            call_command('score_tender', tender.tender_number, stdout=StringIO())
        self.assertIn(tender.tender_number, str(ctx.exception))


class CheckTenderDeadlinesCommandTest(TestCase):
    def test_closes_expired_tenders(self):
        staff = make_user('staff1')
        expired = make_tender('TND-20240501-0001', status='open')
        current = make_tender(
            'TND-20240501-0002', status='open', closing_date=timezone.now() + timedelta(days=3)
        )

        out = StringIO()
        call_command('check_tender_deadlines', stdout=out)

        expired.refresh_from_db()
        current.refresh_from_db()
        self.assertEqual(expired.status, 'closed')
        self.assertEqual(current.status, 'open')
        self.assertIn('Successfully closed 1 tenders', out.getvalue())
        self.assertTrue(Notification.objects.filter(user=staff).exists())

    def test_nothing_to_close(self):
        out = StringIO()
        call_command('check_tender_deadlines', stdout=out)
        self.assertIn('No tenders to close', out.getvalue())
