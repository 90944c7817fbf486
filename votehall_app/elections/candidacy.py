"""Candidacy registry: admits candidates into an election, one per identity."""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from elections.audit import record_event
from elections.authorization import Operation, authorize
from elections.exceptions import DuplicateCandidacyError, ElectionValidationError
from elections.identity import get_identity
from elections.lifecycle import get_election
from elections.models import Candidacy
from elections.storage import storage_boundary

logger = logging.getLogger(__name__)


@storage_boundary("apply_for_election")
@transaction.atomic
def apply_for_election(*, identity_id: int, election_id: int, position: str) -> Candidacy:
    position = str(position or "").strip()
    if not position:
        raise ElectionValidationError("Position is required.")

    # The row lock holds the status check and the candidate list append together.
    election = get_election(election_id, for_update=True)
    identity = get_identity(identity_id)

    authorize(identity=identity, operation=Operation.apply_as_candidate, election=election).raise_for_denial()

    # The gate's duplicate check is advisory; the unique constraint decides.
    try:
        with transaction.atomic():
            candidacy = Candidacy.objects.create(
                election=election,
                identity=identity,
                position=position,
            )
    except IntegrityError as exc:
        if not Candidacy.objects.filter(election=election, identity=identity).exists():
            raise
        logger.warning("Duplicate candidacy refused election=%s identity=%s", election.pk, identity.pk)
        raise DuplicateCandidacyError("You have already applied for this election.") from exc

    election.candidacy_ids = [*(election.candidacy_ids or []), candidacy.pk]
    election.save(update_fields=["candidacy_ids", "updated_at"])

    record_event(
        election=election,
        event_type="candidacy_submitted",
        payload={"candidacy_id": candidacy.pk, "position": position},
        actor_id=identity.pk,
    )
    logger.info("Candidacy id=%s created election=%s identity=%s", candidacy.pk, election.pk, identity.pk)
    return candidacy
