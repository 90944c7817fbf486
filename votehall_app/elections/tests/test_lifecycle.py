from __future__ import annotations

import datetime
from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase
from django.utils import timezone

from elections.exceptions import (
    ElectionValidationError,
    InvalidTransitionError,
    NotAuthorizedError,
    NotFoundError,
    StorageUnavailableError,
)
from elections.lifecycle import create_election, get_election, transition_election
from elections.models import AuditLogEntry, Election, Identity
from elections.tests.utils_test_data import make_election, make_identity


class CreateElectionTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_identity("admin1", Identity.Role.admin)
        self.now = timezone.now()

    def _create(self, **overrides):
        kwargs = {
            "title": "Student council",
            "description": "Annual vote",
            "start_datetime": self.now + datetime.timedelta(days=1),
            "end_datetime": self.now + datetime.timedelta(days=2),
            "creator_id": self.admin.pk,
            "now": self.now,
        }
        kwargs.update(overrides)
        return create_election(**kwargs)

    def test_creates_upcoming_election_with_no_candidates(self) -> None:
        election = self._create()

        self.assertEqual(election.status, Election.Status.upcoming)
        self.assertEqual(election.candidacy_ids, [])
        self.assertEqual(election.created_by_id, self.admin.pk)
        self.assertTrue(
            AuditLogEntry.objects.filter(election=election, event_type="election_created").exists()
        )

    def test_missing_fields_are_rejected(self) -> None:
        for overrides in ({"title": ""}, {"description": "   "}, {"start_datetime": None}, {"end_datetime": None}):
            with self.subTest(overrides=overrides):
                with self.assertRaisesMessage(ElectionValidationError, "All fields are required."):
                    self._create(**overrides)
        self.assertFalse(Election.objects.exists())

    def test_start_in_the_past_is_rejected(self) -> None:
        with self.assertRaisesMessage(ElectionValidationError, "Start date cannot be in the past."):
            self._create(start_datetime=self.now - datetime.timedelta(minutes=1))

    def test_end_must_follow_start(self) -> None:
        start = self.now + datetime.timedelta(days=1)
        for end in (start, start - datetime.timedelta(hours=1)):
            with self.subTest(end=end):
                with self.assertRaisesMessage(ElectionValidationError, "End date must be after start date."):
                    self._create(start_datetime=start, end_datetime=end)

    def test_naive_datetimes_are_interpreted_in_the_current_timezone(self) -> None:
        start = timezone.make_naive(self.now + datetime.timedelta(days=1))
        end = timezone.make_naive(self.now + datetime.timedelta(days=2))

        election = self._create(start_datetime=start, end_datetime=end)

        self.assertTrue(timezone.is_aware(election.start_datetime))

    def test_non_admin_cannot_create(self) -> None:
        voter = make_identity("voter1", Identity.Role.voter)

        with self.assertRaises(NotAuthorizedError):
            self._create(creator_id=voter.pk)
        self.assertFalse(Election.objects.exists())

    def test_unknown_creator_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self._create(creator_id=self.admin.pk + 1000)

    def test_storage_failure_is_not_a_domain_error(self) -> None:
        with patch.object(Election.objects, "create", side_effect=OperationalError("db down")):
            with self.assertRaises(StorageUnavailableError):
                self._create()


class TransitionElectionTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_identity("admin1", Identity.Role.admin)

    def test_walks_forward_one_step_at_a_time(self) -> None:
        election = make_election()

        election = transition_election(
            election_id=election.pk, new_status=Election.Status.active, actor_id=self.admin.pk
        )
        self.assertEqual(election.status, Election.Status.active)

        election = transition_election(
            election_id=election.pk, new_status=Election.Status.completed, actor_id=self.admin.pk
        )
        self.assertEqual(election.status, Election.Status.completed)

        events = list(
            AuditLogEntry.objects.filter(election=election, event_type="election_status_changed")
            .order_by("id")
            .values_list("payload", flat=True)
        )
        self.assertEqual([(e["from"], e["to"]) for e in events], [("upcoming", "active"), ("active", "completed")])

    def test_completed_election_cannot_be_reopened(self) -> None:
        election = make_election(status=Election.Status.completed)

        with self.assertRaises(InvalidTransitionError):
            transition_election(election_id=election.pk, new_status=Election.Status.active, actor_id=self.admin.pk)

        election.refresh_from_db()
        self.assertEqual(election.status, Election.Status.completed)

    def test_skipping_active_is_rejected(self) -> None:
        election = make_election()

        with self.assertRaises(InvalidTransitionError):
            transition_election(
                election_id=election.pk, new_status=Election.Status.completed, actor_id=self.admin.pk
            )
        self.assertEqual(get_election(election.pk).status, Election.Status.upcoming)

    def test_same_status_is_rejected(self) -> None:
        election = make_election(status=Election.Status.active)

        with self.assertRaises(InvalidTransitionError):
            transition_election(election_id=election.pk, new_status=Election.Status.active, actor_id=self.admin.pk)

    def test_unknown_status_is_a_validation_error(self) -> None:
        election = make_election()

        with self.assertRaises(ElectionValidationError):
            transition_election(election_id=election.pk, new_status="paused", actor_id=self.admin.pk)

    def test_role_denial_precedes_status_validation(self) -> None:
        election = make_election()
        voter = make_identity("voter1", Identity.Role.voter)

        with self.assertRaises(NotAuthorizedError):
            transition_election(election_id=election.pk, new_status="paused", actor_id=voter.pk)

    def test_only_admin_may_transition(self) -> None:
        election = make_election()
        candidate = make_identity("cand1", Identity.Role.candidate)

        with self.assertRaises(NotAuthorizedError):
            transition_election(election_id=election.pk, new_status=Election.Status.active, actor_id=candidate.pk)
        self.assertEqual(get_election(election.pk).status, Election.Status.upcoming)

    def test_missing_election_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            transition_election(election_id=999, new_status=Election.Status.active, actor_id=self.admin.pk)

    def test_lock_failure_surfaces_as_storage_unavailable(self) -> None:
        election = make_election()

        with patch("elections.lifecycle.get_election", side_effect=OperationalError("lock timeout")):
            with self.assertRaises(StorageUnavailableError):
                transition_election(
                    election_id=election.pk, new_status=Election.Status.active, actor_id=self.admin.pk
                )
