"""Election JSON endpoints: listing, lifecycle, candidacy, voting and results."""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from elections import ballots, candidacy, lifecycle, overview, results
from elections.exceptions import ElectionValidationError
from elections.forms import CandidacyApplicationForm, ElectionCreateForm, ElectionStatusForm, VoteForm
from elections.identity import current_identity
from elections.models import Election
from elections.views_utils import identity_required, json_errors, parse_json_body


def _identity_id(request: HttpRequest) -> int:
    identity = current_identity(request)
    assert identity is not None
    return identity.pk


@require_http_methods(["GET", "POST"])
@json_errors
def election_list(request: HttpRequest) -> JsonResponse:
    if request.method == "POST":
        return _election_create(request)

    status = str(request.GET.get("status") or "").strip() or None
    if status is not None and status not in Election.Status.values:
        raise ElectionValidationError(f"Invalid status. Must be one of: {', '.join(Election.Status.values)}.")

    return JsonResponse(
        {"ok": True, "elections": [overview.election_payload(e) for e in overview.list_elections(status=status)]}
    )


@identity_required
def _election_create(request: HttpRequest) -> JsonResponse:
    data = ElectionCreateForm(data=parse_json_body(request)).cleaned_or_raise()
    election = lifecycle.create_election(
        title=str(data["title"]),
        description=str(data["description"]),
        start_datetime=data["start_datetime"],
        end_datetime=data["end_datetime"],
        creator_id=_identity_id(request),
    )
    return JsonResponse({"ok": True, "election": overview.election_payload(election)}, status=201)


@require_GET
@json_errors
def election_summary(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"ok": True, "counts": overview.election_status_counts()})


@require_GET
@json_errors
def election_detail(request: HttpRequest, election_id: int) -> JsonResponse:
    election = lifecycle.get_election(election_id)
    payload = overview.election_detail(election=election, viewer=current_identity(request))
    return JsonResponse({"ok": True, "election": payload})


@require_POST
@json_errors
@identity_required
def election_transition(request: HttpRequest, election_id: int) -> JsonResponse:
    data = ElectionStatusForm(data=parse_json_body(request)).cleaned_or_raise()
    election = lifecycle.transition_election(
        election_id=election_id,
        new_status=str(data["status"]).strip(),
        actor_id=_identity_id(request),
    )
    return JsonResponse(
        {
            "ok": True,
            "election": overview.election_payload(election),
            "message": f"Election status updated to {election.status}",
        }
    )


@require_POST
@json_errors
@identity_required
def election_apply(request: HttpRequest, election_id: int) -> JsonResponse:
    data = CandidacyApplicationForm(data=parse_json_body(request)).cleaned_or_raise()
    created = candidacy.apply_for_election(
        identity_id=_identity_id(request),
        election_id=election_id,
        position=str(data["position"]),
    )
    return JsonResponse(
        {
            "ok": True,
            "candidacy": {
                "id": created.pk,
                "election_id": created.election_id,
                "position": created.position,
            },
        },
        status=201,
    )


@require_POST
@json_errors
@identity_required
def election_vote(request: HttpRequest, election_id: int) -> JsonResponse:
    data = VoteForm(data=parse_json_body(request)).cleaned_or_raise()
    ballot = ballots.cast_vote(
        election_id=election_id,
        candidacy_id=int(data["candidacy_id"]),
        voter_id=_identity_id(request),
    )
    # Echo only the caller's own ballot.
    return JsonResponse(
        {
            "ok": True,
            "ballot": {
                "id": ballot.pk,
                "election_id": ballot.election_id,
                "candidacy_id": ballot.candidacy_id,
                "cast_at": ballot.created_at.isoformat(),
            },
        },
        status=201,
    )


@require_GET
@json_errors
@identity_required
def election_has_voted(request: HttpRequest, election_id: int) -> JsonResponse:
    lifecycle.get_election(election_id)
    voted = ballots.has_voted(election_id=election_id, voter_id=_identity_id(request))
    return JsonResponse({"ok": True, "has_voted": voted})


@require_GET
@json_errors
@identity_required
def election_results(request: HttpRequest, election_id: int) -> JsonResponse:
    outcome = results.published_results(election_id=election_id, viewer_id=_identity_id(request))
    winner = outcome.winner
    return JsonResponse(
        {
            "ok": True,
            "election_id": outcome.election_id,
            "total_votes": outcome.total_votes,
            "results": [
                {
                    "rank": rank,
                    "candidacy_id": entry.candidacy_id,
                    "name": entry.name,
                    "position": entry.position,
                    "vote_count": entry.vote_count,
                    "percentage": entry.percentage,
                }
                for rank, entry in enumerate(outcome.entries, start=1)
            ],
            "winner": winner.candidacy_id if winner is not None else None,
        }
    )


@require_GET
@json_errors
@identity_required
def my_applications(request: HttpRequest) -> JsonResponse:
    identity = current_identity(request)
    assert identity is not None
    return JsonResponse({"ok": True, "applications": overview.candidate_applications(identity=identity)})
