"""Election domain exception classes.

Every domain error carries a stable ``code`` so callers can render a precise
message without matching on exception text.
"""


class ElectionError(Exception):
    code: str = "ElectionError"


class ElectionValidationError(ElectionError):
    """Malformed input: empty fields, bad date ordering, unknown status values."""

    code = "ValidationError"


class NotAuthorizedError(ElectionError):
    code = "NotAuthorized"


class InvalidElectionStateError(ElectionError):
    """The operation is not allowed while the election is in its current status."""

    code = "InvalidElectionState"


class DuplicateCandidacyError(ElectionError):
    code = "DuplicateCandidacy"


class DuplicateVoteError(ElectionError):
    code = "DuplicateVote"


class InvalidTransitionError(ElectionError):
    code = "InvalidTransition"


class NotFoundError(ElectionError):
    code = "NotFound"


class CandidacyNotFoundError(NotFoundError):
    """The candidacy does not exist or belongs to a different election."""

    code = "CandidacyNotFound"


class StorageUnavailableError(RuntimeError):
    """The record store failed; not a domain error, so callers can tell the two apart."""

    code = "StorageUnavailable"


__all__ = [
    "CandidacyNotFoundError",
    "DuplicateCandidacyError",
    "DuplicateVoteError",
    "ElectionError",
    "ElectionValidationError",
    "InvalidElectionStateError",
    "InvalidTransitionError",
    "NotAuthorizedError",
    "NotFoundError",
    "StorageUnavailableError",
]
