from datetime import date

from django.core.management.base import BaseCommand

from obligations.utils import mark_overdue_obligations


class Command(BaseCommand):
    help = "Flag unpaid monthly dues and standing obligations past their due date as Overdue"

    def add_arguments(self, parser):
        parser.add_argument("--grace-days", type=int, default=0)
        parser.add_argument("--today", type=date.fromisoformat, default=None)

    def handle(self, *args, **options):
        flagged = mark_overdue_obligations(
            today=options["today"], grace_days=options["grace_days"]
        )
        self.stdout.write(self.style.SUCCESS(f"Flagged {flagged} obligations as overdue."))
