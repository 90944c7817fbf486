"""Ballot ledger: one ballot per voter per election, tallied by atomic increment."""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from elections.audit import record_event
from elections.authorization import Operation, authorize
from elections.exceptions import CandidacyNotFoundError, DuplicateVoteError
from elections.identity import get_identity
from elections.lifecycle import get_election
from elections.models import Ballot, Candidacy
from elections.storage import storage_boundary

logger = logging.getLogger(__name__)


@storage_boundary("cast_vote")
@transaction.atomic
def cast_vote(*, election_id: int, candidacy_id: int, voter_id: int) -> Ballot:
    # Lock the election row so an admin completing the election cannot
    # interleave with the status check below.
    election = get_election(election_id, for_update=True)
    voter = get_identity(voter_id)

    authorize(identity=voter, operation=Operation.cast_vote, election=election).raise_for_denial()

    candidacy = Candidacy.objects.filter(pk=candidacy_id, election=election).only("id").first()
    if candidacy is None:
        raise CandidacyNotFoundError("Candidate does not belong to this election.")

    # Check-and-insert is the unique constraint on (election, voter); two
    # racing requests from one voter cannot both get past it.
    try:
        with transaction.atomic():
            ballot = Ballot.objects.create(election=election, candidacy=candidacy, voter=voter)
    except IntegrityError as exc:
        if not Ballot.objects.filter(election=election, voter=voter).exists():
            raise
        logger.warning("Duplicate vote refused election=%s voter=%s", election.pk, voter.pk)
        raise DuplicateVoteError("You have already voted in this election.") from exc

    # Never read-modify-write the tally.
    Candidacy.objects.filter(pk=candidacy.pk).update(vote_count=F("vote_count") + 1)

    record_event(
        election=election,
        event_type="ballot_cast",
        payload={"ballot_id": ballot.pk},
    )
    logger.info("Ballot id=%s cast in election=%s", ballot.pk, election.pk)
    return ballot


@storage_boundary("has_voted")
def has_voted(*, election_id: int, voter_id: int) -> bool:
    return Ballot.objects.filter(election_id=election_id, voter_id=voter_id).exists()
