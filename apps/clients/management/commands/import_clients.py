"""Import clients from a caseload CSV export onto a case manager's caseload."""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from apps.clients.importing import (
    STRATEGIES,
    CSVImportError,
    bulk_import,
    deduplicate,
    deduplicate_by_program,
    parse_client_rows,
)


class Command(BaseCommand):
    help = "Import clients from a CSV file and assign them to a case manager."

    def add_arguments(self, parser):
        parser.add_argument("csv_path", help="Path to the CSV export.")
        parser.add_argument(
            "--user",
            required=True,
            help="Username of the case manager the clients are assigned to.",
        )
        parser.add_argument(
            "--strategy",
            choices=STRATEGIES,
            default="first",
            help="Duplicate handling when --no-program-priority is set.",
        )
        parser.add_argument(
            "--no-program-priority",
            action="store_true",
            help="Ignore the Plan Program column and deduplicate by --strategy.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Parse and deduplicate without writing anything.",
        )

    def handle(self, *args, **options):
        User = get_user_model()
        try:
            user = User.objects.get(username=options["user"])
        except User.DoesNotExist:
            raise CommandError(f"No user with username {options['user']!r}.")

        try:
            with open(options["csv_path"], encoding="utf-8-sig") as handle:
                text = handle.read()
        except OSError as exc:
            raise CommandError(f"Cannot read {options['csv_path']}: {exc}")

        try:
            rows, errors = parse_client_rows(text)
        except CSVImportError as exc:
            raise CommandError(str(exc))

        for message in errors:
            self.stdout.write(self.style.WARNING(message))

        use_priority = not options["no_program_priority"]
        if options["dry_run"]:
            unique = deduplicate_by_program(rows) if use_priority else deduplicate(rows, options["strategy"])
            self.stdout.write(
                f"[DRY RUN] Would import {len(unique)} client(s) from {len(rows)} row(s)."
            )
            return

        try:
            result = bulk_import(
                user, rows, program_priority=use_priority, strategy=options["strategy"],
            )
        except CSVImportError as exc:
            raise CommandError(str(exc))

        for message in result.errors:
            self.stdout.write(self.style.ERROR(message))
        self.stdout.write(self.style.SUCCESS(
            f"Imported {len(result.clients)} client(s) for {user.username}: "
            f"{result.created} created, {result.skipped} duplicate row(s) skipped."
        ))
