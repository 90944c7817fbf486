from typing import override

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from elections.models import Election
from elections.results import tally_discrepancies


class Command(BaseCommand):
    help = "Check that candidate tallies match recorded ballots and report overdue active elections."

    @override
    def add_arguments(self, parser) -> None:
        parser.add_argument(
            "--election",
            type=int,
            help="Only check this election ID.",
        )

    @override
    def handle(self, *args, **options) -> None:
        election_id: int | None = options.get("election")

        elections = Election.objects.order_by("id")
        if election_id is not None:
            elections = elections.filter(pk=election_id)
            if not elections.exists():
                raise CommandError(f"Election {election_id} not found.")

        mismatched = 0
        for election in elections:
            for discrepancy in tally_discrepancies(election=election):
                mismatched += 1
                self.stdout.write(
                    f"election={election.pk} candidacy={discrepancy.candidacy_id} "
                    f"vote_count={discrepancy.vote_count} ballots={discrepancy.ballot_count}"
                )

        # Report only: status changes stay with the operators.
        for election in elections.overdue(now=timezone.now()):
            self.stdout.write(
                f"election={election.pk} is still active after its end ({election.end_datetime.isoformat()})"
            )

        if mismatched:
            raise CommandError(f"{mismatched} candidacy tally mismatch(es) found.")

        self.stdout.write("All tallies match recorded ballots.")
