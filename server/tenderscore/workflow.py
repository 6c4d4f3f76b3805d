# server/tenderscore/workflow.py

from typing import Mapping

from django.utils import timezone

from .exceptions import InvalidTransitionError


class StatusMachine:
    transitions: Mapping[str, tuple] = {}

    def can_transition(self, current: str, target: str) -> bool:
        allowed = self.transitions.get(current, ())
        return target in allowed

    def check(self, current: str, target: str) -> str:
        if not self.can_transition(current, target):
            raise InvalidTransitionError(current, target)
        return target

    def is_terminal(self, status: str) -> bool:
        return not self.transitions.get(status, ())


class SubmissionStateMachine(StatusMachine):
    transitions = {
        'draft': ('submitted',),
        'submitted': ('passed', 'disqualified'),
        'passed': ('manual_review', 'scored'),
        'disqualified': ('rejected',),
        'manual_review': ('scored', 'rejected'),
        'scored': ('awarded', 'rejected'),
        'awarded': (),
        'rejected': (),
    }


class TenderStateMachine(StatusMachine):
    transitions = {
        'open': ('closed', 'cancelled'),
        'closed': ('under_review', 'cancelled'),
        'under_review': ('awarded', 'cancelled'),
        'awarded': (),
        'cancelled': (),
    }


submission_workflow = SubmissionStateMachine()
tender_workflow = TenderStateMachine()


def transition_submission(submission, target, save=True):
    """Move a bid submission to `target`, stamping award/rejection times"""
    submission.status = submission_workflow.check(submission.status, target)
    update_fields = ['status', 'updated_at']

    if target == 'awarded':
        submission.awarded_at = timezone.now()
        update_fields.append('awarded_at')
    elif target == 'rejected':
        submission.rejected_at = timezone.now()
        update_fields.append('rejected_at')
    elif target == 'submitted' and not submission.submitted_at:
        submission.submitted_at = timezone.now()
        update_fields.append('submitted_at')

    if save:
        submission.save(update_fields=update_fields)
    return submission


def transition_tender(tender, target, save=True):
    """Move a tender to `target`"""
    tender.status = tender_workflow.check(tender.status, target)
    update_fields = ['status', 'updated_at']

    if target == 'awarded':
        tender.awarded_at = timezone.now()
        update_fields.append('awarded_at')

    if save:
        tender.save(update_fields=update_fields)
    return tender


class AwardSigningStateMachine(StatusMachine):
    transitions = {
        'pending': ('sla_review', 'signed', 'declined'),
        'sla_review': ('signed', 'declined'),
        'signed': (),
        'declined': (),
    }


award_workflow = AwardSigningStateMachine()


def transition_award(award, target):
    """Move an award to signing status `target`"""
    award.signing_status = award_workflow.check(award.signing_status, target)
    if target == 'signed':
        award.signed_at = timezone.now()
    return award
