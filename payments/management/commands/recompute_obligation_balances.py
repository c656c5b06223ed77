from django.core.management.base import BaseCommand
from django.db import transaction

from obligations.models import OBLIGATION_MODELS
from payments.allocations import recompute_obligation


class Command(BaseCommand):
    help = "Rebuild paid and remaining amounts of every obligation from its payments and credit usages"

    def add_arguments(self, parser):
        parser.add_argument("--member", type=str, default=None, help="Only this member number")

    def handle(self, *args, **options):
        changed = 0
        total = 0
        for kind, model in OBLIGATION_MODELS.items():
            queryset = model.objects.all()
            if options["member"]:
                queryset = queryset.filter(member__member_no=options["member"])
            for obligation in queryset.iterator():
                with transaction.atomic():
                    obligation = model.objects.select_for_update().get(pk=obligation.pk)
                    before = (obligation.amount_paid, obligation.amount_remaining, obligation.status)
                    recompute_obligation(obligation)
                    if before != (obligation.amount_paid, obligation.amount_remaining, obligation.status):
                        changed += 1
                        self.stdout.write(f"{kind} {obligation.reference}: {before[0]} -> {obligation.amount_paid}")
                total += 1
        self.stdout.write(self.style.SUCCESS(f"Recomputed {total} obligations, {changed} changed."))
