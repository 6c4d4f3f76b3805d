# server/tenderscore/exceptions.py


class ScoringError(Exception):
    """Base class for errors raised while scoring or evaluating bids"""


class InvalidInputError(ScoringError, ValueError):
    """An input value is outside what the procurement formulas accept"""


class IncompleteDataError(ScoringError):
    """Required evaluation data is missing"""

    def __init__(self, message, missing=None):
        super().__init__(message)
        self.missing = list(missing or [])


class InvalidTransitionError(ScoringError):
    """A status change is not allowed by the workflow"""

    def __init__(self, current, target):
        super().__init__(f"invalid transition from {current} to {target}")
        self.current = current
        self.target = target
