from __future__ import annotations

from unittest.mock import patch

from django.test import TestCase

from elections.authorization import Decision
from elections.candidacy import apply_for_election
from elections.exceptions import (
    DuplicateCandidacyError,
    ElectionValidationError,
    InvalidElectionStateError,
    NotAuthorizedError,
    NotFoundError,
)
from elections.models import AuditLogEntry, Candidacy, Election, Identity
from elections.tests.utils_test_data import make_candidacy, make_election, make_identity


class ApplyForElectionTests(TestCase):
    def setUp(self) -> None:
        self.candidate = make_identity("cand1", Identity.Role.candidate, name="Ada Lovelace")
        self.election = make_election()

    def test_application_registers_candidacy_with_zero_votes(self) -> None:
        candidacy = apply_for_election(
            identity_id=self.candidate.pk, election_id=self.election.pk, position="  President "
        )

        self.assertEqual(candidacy.vote_count, 0)
        self.assertEqual(candidacy.position, "President")
        self.election.refresh_from_db()
        self.assertEqual(self.election.candidacy_ids, [candidacy.pk])
        self.assertTrue(
            AuditLogEntry.objects.filter(election=self.election, event_type="candidacy_submitted").exists()
        )

    def test_candidate_list_keeps_application_order(self) -> None:
        second = make_identity("cand2", Identity.Role.candidate)

        first_c = apply_for_election(identity_id=self.candidate.pk, election_id=self.election.pk, position="Chair")
        second_c = apply_for_election(identity_id=second.pk, election_id=self.election.pk, position="Chair")

        self.election.refresh_from_db()
        self.assertEqual(self.election.candidacy_ids, [first_c.pk, second_c.pk])

    def test_second_application_is_a_duplicate(self) -> None:
        apply_for_election(identity_id=self.candidate.pk, election_id=self.election.pk, position="President")

        with self.assertRaises(DuplicateCandidacyError):
            apply_for_election(identity_id=self.candidate.pk, election_id=self.election.pk, position="Treasurer")

        self.assertEqual(Candidacy.objects.filter(election=self.election).count(), 1)
        self.election.refresh_from_db()
        self.assertEqual(len(self.election.candidacy_ids), 1)

    def test_racing_application_is_caught_by_unique_constraint(self) -> None:
        # The gate already said yes to both requests; the row from the other
        # request lands before this insert.
        make_candidacy(election=self.election, identity=self.candidate)

        with patch("elections.candidacy.authorize", return_value=Decision.allow()):
            with self.assertRaises(DuplicateCandidacyError):
                apply_for_election(identity_id=self.candidate.pk, election_id=self.election.pk, position="President")

        self.assertEqual(Candidacy.objects.filter(election=self.election).count(), 1)

    def test_applications_close_once_election_starts(self) -> None:
        for status in (Election.Status.active, Election.Status.completed):
            election = make_election(status=status)
            with self.subTest(status=status):
                with self.assertRaises(InvalidElectionStateError):
                    apply_for_election(identity_id=self.candidate.pk, election_id=election.pk, position="President")
        self.assertFalse(Candidacy.objects.exists())

    def test_only_candidates_may_apply(self) -> None:
        voter = make_identity("voter1", Identity.Role.voter)

        with self.assertRaises(NotAuthorizedError):
            apply_for_election(identity_id=voter.pk, election_id=self.election.pk, position="President")

    def test_position_is_required(self) -> None:
        with self.assertRaisesMessage(ElectionValidationError, "Position is required."):
            apply_for_election(identity_id=self.candidate.pk, election_id=self.election.pk, position="   ")

    def test_missing_election_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            apply_for_election(identity_id=self.candidate.pk, election_id=self.election.pk + 100, position="President")
