"""Election lifecycle: creation and operator-driven status transitions.

Status moves one step at a time, ``upcoming -> active -> completed``. Skipping
a step or moving backwards raises ``InvalidTransitionError``. Wall-clock time
never changes status on its own.
"""

from __future__ import annotations

import datetime
import logging

from django.db import transaction
from django.utils import timezone

from elections.audit import record_event
from elections.authorization import Operation, authorize
from elections.exceptions import (
    ElectionValidationError,
    InvalidTransitionError,
    NotFoundError,
)
from elections.identity import get_identity
from elections.models import Election
from elections.storage import storage_boundary

logger = logging.getLogger(__name__)

NEXT_STATUS: dict[str, str] = {
    Election.Status.upcoming: Election.Status.active,
    Election.Status.active: Election.Status.completed,
}


@storage_boundary("get_election")
def get_election(election_id: int, *, for_update: bool = False) -> Election:
    """Load an election by PK; ``for_update`` locks the row for the current transaction."""
    qs = Election.objects.select_for_update() if for_update else Election.objects.all()
    election = qs.filter(pk=election_id).first()
    if election is None:
        raise NotFoundError(f"Election {election_id} not found.")
    return election


def _aware(value: datetime.datetime) -> datetime.datetime:
    if timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


@storage_boundary("create_election")
@transaction.atomic
def create_election(
    *,
    title: str,
    description: str,
    start_datetime: datetime.datetime | None,
    end_datetime: datetime.datetime | None,
    creator_id: int,
    now: datetime.datetime | None = None,
) -> Election:
    creator = get_identity(creator_id)
    authorize(identity=creator, operation=Operation.create_election).raise_for_denial()

    title = str(title or "").strip()
    description = str(description or "").strip()
    if not title or not description or start_datetime is None or end_datetime is None:
        raise ElectionValidationError("All fields are required.")

    start_datetime = _aware(start_datetime)
    end_datetime = _aware(end_datetime)
    now = now or timezone.now()

    if start_datetime <= now:
        raise ElectionValidationError("Start date cannot be in the past.")
    if end_datetime <= start_datetime:
        raise ElectionValidationError("End date must be after start date.")

    election = Election.objects.create(
        title=title,
        description=description,
        status=Election.Status.upcoming,
        start_datetime=start_datetime,
        end_datetime=end_datetime,
        created_by=creator,
    )

    record_event(
        election=election,
        event_type="election_created",
        payload={
            "start_datetime": start_datetime.isoformat(),
            "end_datetime": end_datetime.isoformat(),
        },
        actor_id=creator.pk,
    )
    logger.info("Election created id=%s by identity=%s", election.pk, creator.pk)
    return election


@storage_boundary("transition_election")
@transaction.atomic
def transition_election(*, election_id: int, new_status: str, actor_id: int) -> Election:
    # Lock so a concurrent vote or application sees either the old or the new
    # status, never a half-applied transition.
    election = get_election(election_id, for_update=True)

    actor = get_identity(actor_id)
    authorize(identity=actor, operation=Operation.transition_election, election=election).raise_for_denial()

    if new_status not in Election.Status.values:
        raise ElectionValidationError(
            f"Invalid status. Must be one of: {', '.join(Election.Status.values)}."
        )

    previous_status = election.status
    if NEXT_STATUS.get(previous_status) != new_status:
        raise InvalidTransitionError(f"Cannot move election from {previous_status} to {new_status}.")

    election.status = new_status
    election.save(update_fields=["status", "updated_at"])

    record_event(
        election=election,
        event_type="election_status_changed",
        payload={"from": previous_status, "to": new_status},
        actor_id=actor.pk,
    )
    logger.info("Election id=%s status %s -> %s by identity=%s", election.pk, previous_status, new_status, actor.pk)
    return election
