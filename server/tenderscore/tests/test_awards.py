# server/tenderscore/tests/test_awards.py

from django.test import TestCase, override_settings

from tenderscore import awards
from tenderscore.exceptions import InvalidInputError, InvalidTransitionError
from tenderscore.models import Notification

from .factories import make_submission, make_tender, make_user, make_vendor


class AwardTestCase(TestCase):
    def setUp(self):
        self.staff = make_user('staff1')
        self.vendor_user = make_user('acme', role='vendor')
        self.other_vendor_user = make_user('crane', role='vendor')
        self.tender = make_tender(status='under_review')
        self.winner = make_submission(
            self.tender, make_vendor('Acme Civils', users=[self.vendor_user]), 1000000, status='scored'
        )
        self.runner_up = make_submission(
            self.tender, make_vendor('Blue Crane', users=[self.other_vendor_user]), 1200000, status='scored'
        )


class AwardSubmissionTest(AwardTestCase):
    def test_award(self):
        award = awards.award_submission(self.winner, self.staff)

        self.winner.refresh_from_db()
        self.runner_up.refresh_from_db()
        self.tender.refresh_from_db()
        self.assertEqual(award.signing_status, 'pending')
        self.assertIn('Acme Civils', award.award_letter_content)
        self.assertEqual(award.awarded_by, self.staff)
        self.assertEqual(self.winner.status, 'awarded')
        self.assertIsNotNone(self.winner.awarded_at)
        self.assertEqual(self.runner_up.status, 'rejected')
        self.assertEqual(self.tender.status, 'awarded')
        self.assertIsNotNone(self.tender.awarded_at)

    def test_vendors_are_notified(self):
        awards.award_submission(self.winner, self.staff)

        self.assertEqual(
            Notification.objects.get(user=self.vendor_user).title, 'Tender Awarded to Your Company'
        )
        self.assertEqual(Notification.objects.get(user=self.other_vendor_user).title, 'Tender Award Result')

    def test_closed_tender_passes_through_review(self):
        self.tender.status = 'closed'
        self.tender.save()

        awards.award_submission(self.winner, self.staff, letter='Congratulations')

        self.tender.refresh_from_db()
        self.assertEqual(self.tender.status, 'awarded')

    def test_unscored_submission_cannot_be_awarded(self):
        self.winner.status = 'manual_review'
        self.winner.save()
        with self.assertRaises(InvalidInputError):
            awards.award_submission(self.winner, self.staff)

    def test_duplicate_award(self):
        awards.award_submission(self.winner, self.staff)
        with self.assertRaises(InvalidInputError):
            awards.award_submission(self.winner, self.staff)

    def test_cancelled_tender_cannot_be_awarded(self):
        self.tender.status = 'cancelled'
        self.tender.save()

        with self.assertRaises(InvalidTransitionError):
            awards.award_submission(self.winner, self.staff)
        self.winner.refresh_from_db()
        self.assertEqual(self.winner.status, 'scored')


class SigningTest(AwardTestCase):
    def setUp(self):
        super().setUp()
        self.award = awards.award_submission(self.winner, self.staff)

    def test_sign_after_review(self):
        awards.send_for_sla_review(self.award)
        awards.sign_award(self.award, 'data:image/png;base64,AAAA', 'Jane Dlamini')

        self.award.refresh_from_db()
        self.assertEqual(self.award.signing_status, 'signed')
        self.assertEqual(self.award.signed_by_name, 'Jane Dlamini')
        self.assertIsNotNone(self.award.signed_at)
        self.assertTrue(Notification.objects.filter(user=self.staff, title='Award Signed').exists())

    def test_signature_is_required(self):
        with self.assertRaises(InvalidInputError):
            awards.sign_award(self.award, '')

    def test_decline(self):
        awards.decline_award(self.award, 'Capacity committed elsewhere')

        self.award.refresh_from_db()
        self.assertEqual(self.award.signing_status, 'declined')
        self.assertEqual(self.award.declined_reason, 'Capacity committed elsewhere')
        with self.assertRaises(InvalidTransitionError):
            awards.sign_award(self.award, 'signature')

    def test_reminders(self):
        awards.remind(self.award)
        awards.remind(self.award)

        self.award.refresh_from_db()
        self.assertEqual(self.award.reminder_count, 2)
        self.assertIsNotNone(self.award.reminder_sent_at)
        self.assertEqual(
            Notification.objects.filter(user=self.vendor_user, title='Award Signature Reminder').count(), 2
        )

    def test_signed_award_cannot_be_reminded(self):
        awards.sign_award(self.award, 'signature')
        with self.assertRaises(InvalidInputError):
            awards.remind(self.award)

    @override_settings(PROCUREMENT_SETTINGS={'AWARD_REMINDER_LIMIT': 1})
    def test_reminder_limit(self):
        awards.remind(self.award)
        with self.assertRaises(InvalidInputError):
            awards.remind(self.award)
