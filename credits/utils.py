import logging

from django.db.models import Sum

from credits.models import Credit, CreditUsage
from obligations.models import InitialDebt
from obligations.money import ZERO, to_money

logger = logging.getLogger(__name__)


def available_credits(member):
    return (
        Credit.objects.select_for_update()
        .filter(member=member, status=Credit.AVAILABLE, amount_remaining__gt=0)
        .order_by("created_at", "id")
    )


def available_credit_total(member):
    total = Credit.objects.filter(
        member=member, status=Credit.AVAILABLE, amount_remaining__gt=0
    ).aggregate(total=Sum("amount_remaining"))["total"]
    return total or ZERO


def apply_credits(member, amount_owed, obligation):
    """
    Consume the member's available credits, oldest first, against ``obligation``.
    Returns what is still owed once credits are exhausted or the debt is covered.
    Only credits and credit usages are written; the caller updates the obligation.
    """
    still_owed = to_money(amount_owed)
    if still_owed <= ZERO:
        return ZERO

    for credit in available_credits(member):
        if still_owed <= ZERO:
            break
        consumed = credit.consume(still_owed)
        if consumed <= ZERO:
            continue
        usage = CreditUsage(
            credit=credit,
            amount_consumed=consumed,
            description=f"Automatic use against {obligation}",
        )
        usage.link_obligation(obligation)
        usage.save()
        still_owed -= consumed
        logger.info(
            f"Credit {credit.reference} used {consumed} on {obligation.KIND} {obligation.reference}"
        )

    return still_owed


def settle_with_credits(member, obligation):
    """
    Apply credits to the obligation's remaining balance and book what they
    covered as paid. Returns the amount still owed afterwards.
    """
    owed = obligation.amount_remaining
    still_owed = apply_credits(member, owed, obligation)
    if owed - still_owed > ZERO:
        obligation.apply_amount(owed - still_owed)
    return still_owed


def sweep_credits_to_initial_debts(member):
    """
    Push available credit onto the member's initial debts, oldest year first.
    Returns the total absorbed.
    """
    absorbed_total = ZERO
    for debt in InitialDebt.outstanding_for(member).select_for_update():
        before = debt.amount_remaining
        after = settle_with_credits(member, debt)
        absorbed = before - after
        if absorbed > ZERO:
            debt.save()
            absorbed_total += absorbed
        if after > ZERO:
            # Credits ran out before this debt was covered
            break

    if absorbed_total > ZERO:
        logger.info(f"Swept {absorbed_total} of credit onto initial debts of {member.member_no}")
    return absorbed_total


def create_credit(member, amount, payment=None, description=None):
    """Open a new credit for an excess and sweep it onto initial debts."""
    credit = Credit.objects.create(
        member=member,
        amount=amount,
        payment=payment,
        description=description or f"Credit from payment excess of {to_money(amount)}",
    )
    absorbed = sweep_credits_to_initial_debts(member)
    credit.refresh_from_db()
    return credit, absorbed


def reconcile_payment_credit(payment, excess):
    """
    Bring the credit born from ``payment`` in line with its recomputed excess.
    Returns the (possibly new, possibly deleted -> None) credit and the amount
    swept onto initial debts.
    """
    excess = to_money(excess)
    credit = Credit.objects.select_for_update().filter(payment=payment).first()

    if credit is None:
        if excess > ZERO:
            return create_credit(payment.member, excess, payment=payment)
        return None, ZERO

    if excess > ZERO:
        credit.resize(excess)
    elif credit.amount_used <= ZERO:
        logger.info(f"Deleting unused credit {credit.reference} after edit of payment {payment.reference}")
        credit.delete()
        return None, ZERO
    else:
        # Only the consumed part survives
        credit.resize(ZERO)

    absorbed = ZERO
    if credit.amount_remaining > ZERO:
        absorbed = sweep_credits_to_initial_debts(payment.member)
        credit.refresh_from_db()
    return credit, absorbed
