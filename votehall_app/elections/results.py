"""Results tabulation and tally reconciliation.

``tabulate`` works for any status and is meant for internal use; only
``published_results`` is exposed to end users and requires a completed
election. Ties rank by application time, then candidacy id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count

from elections.authorization import Operation, authorize
from elections.identity import get_identity
from elections.lifecycle import get_election
from elections.models import Candidacy, Election
from elections.storage import storage_boundary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultEntry:
    candidacy_id: int
    name: str
    position: str
    vote_count: int
    percentage: int


@dataclass(frozen=True)
class ElectionResults:
    election_id: int
    total_votes: int
    entries: tuple[ResultEntry, ...]

    @property
    def winner(self) -> ResultEntry | None:
        # A tie for first is not flagged; the first ranked entry is reported.
        return self.entries[0] if self.entries else None


@dataclass(frozen=True)
class TallyDiscrepancy:
    candidacy_id: int
    vote_count: int
    ballot_count: int


def vote_percentage(vote_count: int, total_votes: int) -> int:
    if total_votes <= 0:
        return 0
    share = Decimal(vote_count) * 100 / Decimal(total_votes)
    return int(share.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@storage_boundary("tabulate")
def tabulate(*, election: Election) -> ElectionResults:
    candidacies = list(
        Candidacy.objects.filter(election=election)
        .select_related("identity")
        .order_by("-vote_count", "created_at", "id")
    )
    total_votes = sum(c.vote_count for c in candidacies)

    entries = tuple(
        ResultEntry(
            candidacy_id=c.pk,
            name=c.identity.name,
            position=c.position,
            vote_count=c.vote_count,
            percentage=vote_percentage(c.vote_count, total_votes),
        )
        for c in candidacies
    )
    return ElectionResults(election_id=election.pk, total_votes=total_votes, entries=entries)


@storage_boundary("published_results")
def published_results(*, election_id: int, viewer_id: int | None) -> ElectionResults:
    election = get_election(election_id)
    viewer = get_identity(viewer_id) if viewer_id is not None else None
    authorize(identity=viewer, operation=Operation.view_results, election=election).raise_for_denial()
    return tabulate(election=election)


@storage_boundary("tally_discrepancies")
def tally_discrepancies(*, election: Election) -> list[TallyDiscrepancy]:
    """Candidacies whose stored tally disagrees with their ballot count."""
    rows = (
        Candidacy.objects.filter(election=election)
        .annotate(ballot_count=Count("ballots"))
        .order_by("id")
        .values_list("id", "vote_count", "ballot_count")
    )
    discrepancies = [
        TallyDiscrepancy(candidacy_id=cid, vote_count=int(vote_count), ballot_count=int(ballot_count))
        for cid, vote_count, ballot_count in rows
        if int(vote_count) != int(ballot_count)
    ]
    if discrepancies:
        logger.error(
            "Tally mismatch in election=%s for candidacies %s",
            election.pk,
            [d.candidacy_id for d in discrepancies],
        )
    return discrepancies
