"""Authorization gate: the single decision table for who may do what, and when.

``authorize`` only reads; services call it before writing and then re-check
uniqueness inside their own transaction.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

from elections.exceptions import (
    DuplicateCandidacyError,
    DuplicateVoteError,
    ElectionError,
    InvalidElectionStateError,
    NotAuthorizedError,
)
from elections.models import Ballot, Candidacy, Election, Identity


class Operation(enum.StrEnum):
    create_election = "create_election"
    transition_election = "transition_election"
    apply_as_candidate = "apply_as_candidate"
    cast_vote = "cast_vote"
    view_results = "view_results"


class DenialReason(enum.StrEnum):
    not_authorized = "NotAuthorized"
    invalid_election_state = "InvalidElectionState"
    duplicate_candidacy = "DuplicateCandidacy"
    duplicate_vote = "DuplicateVote"


_DENIAL_ERRORS: dict[DenialReason, type[ElectionError]] = {
    DenialReason.not_authorized: NotAuthorizedError,
    DenialReason.invalid_election_state: InvalidElectionStateError,
    DenialReason.duplicate_candidacy: DuplicateCandidacyError,
    DenialReason.duplicate_vote: DuplicateVoteError,
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenialReason | None = None
    message: str = ""

    @classmethod
    def allow(cls) -> Decision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason, message: str) -> Decision:
        return cls(allowed=False, reason=reason, message=message)

    def raise_for_denial(self) -> None:
        if self.allowed:
            return
        assert self.reason is not None
        raise _DENIAL_ERRORS[self.reason](self.message)


@dataclass(frozen=True)
class OperationRule:
    # None means any authenticated identity.
    roles: frozenset[str] | None
    label: str
    election_status: str | None = None
    status_message: str = ""


RULES: dict[Operation, OperationRule] = {
    Operation.create_election: OperationRule(
        roles=frozenset({Identity.Role.admin}),
        label="create elections",
    ),
    Operation.transition_election: OperationRule(
        roles=frozenset({Identity.Role.admin}),
        label="change election status",
    ),
    Operation.apply_as_candidate: OperationRule(
        roles=frozenset({Identity.Role.candidate}),
        label="apply as a candidate",
        election_status=Election.Status.upcoming,
        status_message="Applications are only accepted while the election is upcoming.",
    ),
    Operation.cast_vote: OperationRule(
        roles=frozenset({Identity.Role.voter}),
        label="vote",
        election_status=Election.Status.active,
        status_message="This election is not currently active for voting.",
    ),
    Operation.view_results: OperationRule(
        roles=None,
        label="view results",
        election_status=Election.Status.completed,
        status_message="Results are published once the election is completed.",
    ),
}


def _has_candidacy(identity: Identity, election: Election) -> bool:
    return Candidacy.objects.filter(election=election, identity=identity).exists()


def _has_ballot(identity: Identity, election: Election) -> bool:
    return Ballot.objects.filter(election=election, voter=identity).exists()


_DUPLICATE_CHECKS: dict[Operation, tuple[DenialReason, str, Callable[[Identity, Election], bool]]] = {
    Operation.apply_as_candidate: (
        DenialReason.duplicate_candidacy,
        "You have already applied for this election.",
        _has_candidacy,
    ),
    Operation.cast_vote: (
        DenialReason.duplicate_vote,
        "You have already voted in this election.",
        _has_ballot,
    ),
}


def authorize(*, identity: Identity | None, operation: Operation, election: Election | None = None) -> Decision:
    rule = RULES[operation]

    if identity is None:
        return Decision.deny(DenialReason.not_authorized, "Authentication required.")

    if rule.roles is not None and identity.role not in rule.roles:
        allowed_roles = ", ".join(sorted(str(role) for role in rule.roles))
        return Decision.deny(
            DenialReason.not_authorized,
            f"Only {allowed_roles} accounts may {rule.label}.",
        )

    if rule.election_status is not None:
        if election is None:
            raise ValueError(f"{operation} requires an election")
        if election.status != rule.election_status:
            return Decision.deny(DenialReason.invalid_election_state, rule.status_message)

    duplicate_check = _DUPLICATE_CHECKS.get(operation)
    if duplicate_check is not None and election is not None:
        reason, message, exists = duplicate_check
        if exists(identity, election):
            return Decision.deny(reason, message)

    return Decision.allow()


def permitted_operations(*, identity: Identity | None, election: Election | None = None) -> frozenset[Operation]:
    """Operations the identity may invoke right now, optionally against one election."""
    permitted: set[Operation] = set()
    for operation, rule in RULES.items():
        if rule.election_status is not None and election is None:
            continue
        if authorize(identity=identity, operation=operation, election=election).allowed:
            permitted.add(operation)
    return frozenset(permitted)
