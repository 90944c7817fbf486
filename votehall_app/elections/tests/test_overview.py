from __future__ import annotations

from django.test import TestCase

from elections.models import Ballot, Election, Identity
from elections.overview import candidate_applications, election_detail, election_status_counts, list_elections
from elections.tests.utils_test_data import make_candidacy, make_election, make_identity


class StatusCountsTests(TestCase):
    def test_counts_every_status_including_empty_ones(self) -> None:
        make_election()
        make_election()
        make_election(status=Election.Status.completed)

        self.assertEqual(
            election_status_counts(),
            {"upcoming": 2, "active": 0, "completed": 1, "total": 3},
        )

    def test_list_filters_by_status(self) -> None:
        upcoming = make_election()
        make_election(status=Election.Status.active)

        self.assertEqual(list_elections(status=Election.Status.upcoming), [upcoming])
        self.assertEqual(len(list_elections()), 2)


class ElectionDetailTests(TestCase):
    def setUp(self) -> None:
        self.voter = make_identity("voter1", Identity.Role.voter)
        self.candidate = make_identity("cand1", Identity.Role.candidate)

    def test_vote_counts_hidden_before_completion(self) -> None:
        election = make_election(status=Election.Status.active)
        make_candidacy(election=election, identity=self.candidate, vote_count=3)

        detail = election_detail(election=election, viewer=self.voter)

        self.assertNotIn("vote_count", detail["candidates"][0])
        self.assertTrue(detail["can_vote"])
        self.assertFalse(detail["has_voted"])
        self.assertFalse(detail["can_view_results"])

    def test_vote_counts_shown_once_completed(self) -> None:
        election = make_election(status=Election.Status.completed)
        make_candidacy(election=election, identity=self.candidate, vote_count=3)

        detail = election_detail(election=election, viewer=self.voter)

        self.assertEqual(detail["candidates"][0]["vote_count"], 3)
        self.assertTrue(detail["can_view_results"])

    def test_cannot_vote_without_candidates(self) -> None:
        election = make_election(status=Election.Status.active)

        detail = election_detail(election=election, viewer=self.voter)

        self.assertFalse(detail["can_vote"])

    def test_voter_who_already_voted(self) -> None:
        election = make_election(status=Election.Status.active)
        candidacy = make_candidacy(election=election, identity=self.candidate)
        Ballot.objects.create(election=election, candidacy=candidacy, voter=self.voter)

        detail = election_detail(election=election, viewer=self.voter)

        self.assertTrue(detail["has_voted"])
        self.assertFalse(detail["can_vote"])

    def test_candidate_may_apply_to_upcoming(self) -> None:
        election = make_election()

        self.assertTrue(election_detail(election=election, viewer=self.candidate)["can_apply"])
        self.assertFalse(election_detail(election=election, viewer=None)["can_apply"])


class CandidateApplicationsTests(TestCase):
    def test_lists_own_applications_with_votes_only_when_completed(self) -> None:
        candidate = make_identity("cand1", Identity.Role.candidate)
        active = make_election(status=Election.Status.active, title="Active one")
        done = make_election(status=Election.Status.completed, title="Done one")
        make_candidacy(election=active, identity=candidate, vote_count=2)
        make_candidacy(election=done, identity=candidate, vote_count=7)
        make_candidacy(election=done, identity=make_identity("cand2", Identity.Role.candidate))

        applications = candidate_applications(identity=candidate)

        by_title = {a["election_title"]: a for a in applications}
        self.assertEqual(set(by_title), {"Active one", "Done one"})
        self.assertNotIn("vote_count", by_title["Active one"])
        self.assertEqual(by_title["Done one"]["vote_count"], 7)
