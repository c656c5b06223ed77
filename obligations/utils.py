import logging
from datetime import date
from itertools import chain

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from duetypes.models import DueType
from obligations.models import (
    OBLIGATION_MODELS,
    MonthlyDue,
    Obligation,
    StandingObligation,
)
from obligations.money import to_money

logger = logging.getLogger(__name__)

User = get_user_model()


def outstanding_obligations(member):
    """
    Every obligation the member still owes on, in allocation order:
    initial debts, monthly dues, assistance charges, standing obligations,
    each oldest first.
    """
    return list(
        chain.from_iterable(
            model.outstanding_for(member) for model in OBLIGATION_MODELS.values()
        )
    )


def get_member_obligation(member, kind, obligation_id):
    """
    Load one obligation of ``kind`` owned by ``member``, locked for update.
    Returns None when it does not exist.
    """
    model = OBLIGATION_MODELS.get(kind)
    if model is None:
        return None
    return (
        model.objects.select_for_update()
        .filter(member=member, pk=obligation_id)
        .first()
    )


def assistance_amount_for(assistance_type):
    amounts = getattr(settings, "ASSISTANCE_CHARGE_AMOUNTS", {})
    fallback = getattr(settings, "DEFAULT_ASSISTANCE_CHARGE_AMOUNT", "50.00")
    return to_money(amounts.get(assistance_type, fallback))


def parse_period(period):
    """'2025-01' -> date(2025, 1, 1)"""
    try:
        year, month = period.split("-")
        return date(int(year), int(month), 1)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid period {period!r}, expected YYYY-MM")


def generate_monthly_dues(start_period, months=1, due_types=None, members=None, created_by=None):
    """
    Create monthly dues for every active member and active due type.
    Rows that already exist for a member, type and period are left alone.
    """
    first_month = parse_period(start_period)
    if due_types is None:
        due_types = DueType.objects.filter(is_active=True)
    if members is None:
        members = User.objects.filter(is_member=True, is_active=True)
    due_day = getattr(settings, "MONTHLY_DUE_DAY", 15)

    created = []
    with transaction.atomic():
        for offset in range(months):
            month_start = first_month + relativedelta(months=offset)
            period = month_start.strftime("%Y-%m")
            due_date = month_start + relativedelta(day=due_day)
            for member in members:
                for due_type in due_types:
                    if MonthlyDue.objects.filter(
                        member=member, due_type=due_type, period=period
                    ).exists():
                        continue
                    created.append(
                        MonthlyDue.objects.create(
                            member=member,
                            due_type=due_type,
                            period=period,
                            due_date=due_date,
                            amount_due=due_type.standard_amount,
                            description=f"{due_type.name} - {period}",
                            created_by=created_by,
                        )
                    )
    logger.info(f"Generated {len(created)} monthly dues from {start_period} over {months} month(s)")
    return created


def mark_overdue_obligations(today=None, grace_days=0):
    """
    Flag unpaid monthly dues and standing obligations whose due date has passed.
    Only untouched rows move to Overdue; partially paid rows keep their status.
    """
    today = today or date.today()
    cutoff = today - relativedelta(days=grace_days)
    flagged = 0
    for model in (MonthlyDue, StandingObligation):
        flagged += model.objects.filter(
            status=Obligation.STATUS_PENDING,
            amount_remaining__gt=0,
            due_date__lt=cutoff,
        ).update(status=Obligation.STATUS_OVERDUE)
    logger.info(f"Flagged {flagged} obligations as overdue (cutoff {cutoff})")
    return flagged

