"""
Failures raised by the election ledger.

Every failure is an ordinary, expected outcome: the ledger validates all
preconditions before touching state, so a raised error always means nothing
was applied.
"""


class LedgerError(Exception):
    """Base class for every ledger failure."""

    kind = "LedgerError"
    default_message = "The operation was rejected by the election ledger."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# --- Caller checks ---

class Unauthorized(LedgerError):
    kind = "Unauthorized"
    default_message = "Only the election administrator may perform this operation."


class NotAuthorized(LedgerError):
    kind = "NotAuthorized"
    default_message = "This voter is not authorized to vote in this election."


class InvalidAddress(LedgerError):
    kind = "InvalidAddress"
    default_message = "A valid principal identifier is required."


# --- Lifecycle checks ---

class ElectionClosed(LedgerError):
    kind = "ElectionClosed"
    default_message = "The election is not active."


class ElectionNotEnded(LedgerError):
    kind = "ElectionNotEnded"
    default_message = "The election has not ended yet."


class DurationNotSet(LedgerError):
    kind = "DurationNotSet"
    default_message = "The election has no end time."


class DurationNotExpired(LedgerError):
    kind = "DurationNotExpired"
    default_message = "The election end time has not passed yet."


class AlreadyEnded(LedgerError):
    kind = "AlreadyEnded"
    default_message = "The election has already ended."


# --- Ballot checks ---

class AlreadyVoted(LedgerError):
    kind = "AlreadyVoted"
    default_message = "This voter has already cast a ballot."


class InvalidCandidate(LedgerError):
    kind = "InvalidCandidate"
    default_message = "No candidate exists with this identifier."


class CandidateInactive(LedgerError):
    kind = "CandidateInactive"
    default_message = "This candidate has been deactivated."


class VoterHasNotVoted(LedgerError):
    kind = "VoterHasNotVoted"
    default_message = "This voter has no vote to remove."
