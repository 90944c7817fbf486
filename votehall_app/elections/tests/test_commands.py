from __future__ import annotations

import datetime
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.utils import timezone

from elections.models import Ballot, Election, Identity
from elections.tests.utils_test_data import make_candidacy, make_election, make_identity


class IntegrityCheckCommandTests(TestCase):
    def setUp(self) -> None:
        self.election = make_election(status=Election.Status.active)
        self.voter = make_identity("voter1", Identity.Role.voter)
        self.candidacy = make_candidacy(
            election=self.election, identity=make_identity("cand1", Identity.Role.candidate), vote_count=1
        )
        Ballot.objects.create(election=self.election, candidacy=self.candidacy, voter=self.voter)

    def test_clean_tallies(self) -> None:
        out = StringIO()

        call_command("elections_integrity_check", stdout=out)

        self.assertIn("All tallies match recorded ballots.", out.getvalue())

    def test_mismatch_fails_the_command(self) -> None:
        make_candidacy(election=self.election, identity=make_identity("cand2", Identity.Role.candidate), vote_count=4)
        out = StringIO()

        with self.assertLogs("elections.results", level="ERROR"):
            with self.assertRaises(CommandError):
                call_command("elections_integrity_check", "--election", str(self.election.pk), stdout=out)

        self.assertIn("vote_count=4 ballots=0", out.getvalue())

    def test_reports_overdue_active_elections(self) -> None:
        Election.objects.filter(pk=self.election.pk).update(
            start_datetime=timezone.now() - datetime.timedelta(days=2),
            end_datetime=timezone.now() - datetime.timedelta(days=1),
        )
        out = StringIO()

        call_command("elections_integrity_check", stdout=out)

        self.assertIn("still active after its end", out.getvalue())

    def test_unknown_election(self) -> None:
        with self.assertRaises(CommandError):
            call_command("elections_integrity_check", "--election", "9999", stdout=StringIO())


class CreateAdminCommandTests(TestCase):
    def test_creates_admin_identity(self) -> None:
        out = StringIO()

        call_command(
            "elections_create_admin",
            "--username", "root",
            "--email", "root@example.org",
            "--name", "Returning Officer",
            "--password", "correct-horse-battery",
            stdout=out,
        )

        identity = Identity.objects.get(user__username="root")
        self.assertEqual(identity.role, Identity.Role.admin)
        self.assertIn("Created admin identity", out.getvalue())

    def test_validation_errors_become_command_errors(self) -> None:
        with self.assertRaises(CommandError):
            call_command(
                "elections_create_admin",
                "--username", "root",
                "--email", "root@example.org",
                "--name", "Returning Officer",
                "--password", "short",
                stdout=StringIO(),
            )
