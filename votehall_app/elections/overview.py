"""Read-side views of elections for dashboards and detail pages.

Vote counts stay hidden until an election is completed, since tallies are
still moving before then.
"""

from __future__ import annotations

from django.db.models import Count

from elections.authorization import Operation, permitted_operations
from elections.models import Ballot, Candidacy, Election, Identity
from elections.storage import storage_boundary


def election_payload(election: Election) -> dict[str, object]:
    return {
        "id": election.pk,
        "title": election.title,
        "description": election.description,
        "status": election.status,
        "start_datetime": election.start_datetime.isoformat(),
        "end_datetime": election.end_datetime.isoformat(),
        "candidacy_ids": list(election.candidacy_ids or []),
    }


@storage_boundary("election_status_counts")
def election_status_counts() -> dict[str, int]:
    counts = {status: 0 for status in Election.Status.values}
    for row in Election.objects.order_by().values("status").annotate(n=Count("id")):
        counts[str(row["status"])] = int(row["n"])
    counts["total"] = sum(counts.values())
    return counts


@storage_boundary("list_elections")
def list_elections(*, status: str | None = None) -> list[Election]:
    qs = Election.objects.all()
    if status:
        qs = qs.with_status(status)
    return list(qs)


@storage_boundary("election_detail")
def election_detail(*, election: Election, viewer: Identity | None) -> dict[str, object]:
    show_votes = election.status == Election.Status.completed

    candidates: list[dict[str, object]] = []
    for candidacy in Candidacy.objects.filter(election=election).select_related("identity"):
        entry: dict[str, object] = {
            "id": candidacy.pk,
            "name": candidacy.identity.name,
            "position": candidacy.position,
        }
        if show_votes:
            entry["vote_count"] = candidacy.vote_count
        candidates.append(entry)

    operations = permitted_operations(identity=viewer, election=election)
    has_voted = bool(
        viewer is not None and Ballot.objects.filter(election=election, voter=viewer).exists()
    )

    return {
        **election_payload(election),
        "candidates": candidates,
        "has_voted": has_voted,
        # Voting needs something to vote for.
        "can_vote": Operation.cast_vote in operations and bool(candidates),
        "can_apply": Operation.apply_as_candidate in operations,
        "can_view_results": Operation.view_results in operations,
    }


@storage_boundary("candidate_applications")
def candidate_applications(*, identity: Identity) -> list[dict[str, object]]:
    applications: list[dict[str, object]] = []
    for candidacy in Candidacy.objects.filter(identity=identity).select_related("election").order_by("-created_at", "-id"):
        election = candidacy.election
        entry: dict[str, object] = {
            "id": candidacy.pk,
            "election_id": election.pk,
            "election_title": election.title,
            "election_status": election.status,
            "position": candidacy.position,
            "applied_at": candidacy.created_at.isoformat(),
        }
        if election.status == Election.Status.completed:
            entry["vote_count"] = candidacy.vote_count
        applications.append(entry)
    return applications
