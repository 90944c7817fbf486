from typing import override

from django.core.management.base import BaseCommand, CommandError

from elections.exceptions import ElectionError
from elections.identity import register_identity
from elections.models import Identity


class Command(BaseCommand):
    help = "Create an election administrator account (admins cannot self-register)."

    @override
    def add_arguments(self, parser) -> None:
        parser.add_argument("--username", required=True)
        parser.add_argument("--email", required=True)
        parser.add_argument("--name", required=True)
        parser.add_argument(
            "--password",
            required=True,
            help="Initial password; the administrator should change it after first login.",
        )

    @override
    def handle(self, *args, **options) -> None:
        try:
            identity = register_identity(
                username=str(options["username"]),
                email=str(options["email"]),
                password=str(options["password"]),
                name=str(options["name"]),
                role=Identity.Role.admin,
                allow_admin=True,
            )
        except ElectionError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(f"Created admin identity {identity.pk} ({identity.user.get_username()}).")
