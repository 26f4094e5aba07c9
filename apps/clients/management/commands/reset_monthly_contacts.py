"""Clear every client's monthly contact checkboxes. Run on the 1st of each month."""
from django.core.management.base import BaseCommand
from django.db.models import Q

from apps.clients.models import Client
from apps.clients.services import reset_monthly_contacts


class Command(BaseCommand):
    help = "Reset first/second contact completion for all clients (monthly cron)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show how many clients would be reset without making changes.",
        )

    def handle(self, *args, **options):
        if options.get("dry_run", False):
            count = Client.objects.filter(
                Q(first_contact_completed=True) | Q(second_contact_completed=True),
            ).count()
            self.stdout.write(f"[DRY RUN] Would reset contacts for {count} client(s).")
            return

        count = reset_monthly_contacts()
        self.stdout.write(self.style.SUCCESS(f"Reset monthly contacts for {count} client(s)."))
