"""
Payment allocation engine.

Every public function returns the same envelope:
    {"success": True, "message": ..., "data": ...}
    {"success": False, "error": ...}
and runs its writes in a single transaction holding the member row lock,
so two payments for the same member never interleave.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Sum

from accounts.permissions import has_operation_permission
from credits.models import CreditUsage
from credits.serializers import CreditSerializer
from credits.utils import (
    available_credit_total,
    create_credit,
    reconcile_payment_credit,
    settle_with_credits,
)
from obligations.models import (
    OBLIGATION_MODELS,
    AssistanceCharge,
    InitialDebt,
    obligation_filter,
)
from obligations.money import ZERO, clamp, to_money
from obligations.serializers import serialize_obligation
from obligations.utils import get_member_obligation, outstanding_obligations
from payments.exceptions import (
    PaymentAuthorizationError,
    PaymentError,
    PaymentNotFoundError,
    PaymentValidationError,
)
from payments.models import Payment
from payments.serializers import PaymentSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def _success(message, data=None):
    return {"success": True, "message": message, "data": data}


def _failure(error):
    return {"success": False, "error": error}


def ensure_authorized(actor, operation, member=None):
    if not has_operation_permission(actor, operation, member):
        raise PaymentAuthorizationError()


def validate_tender(amount, payment_method, proof_of_transfer=None):
    """Check an incoming amount and method. Returns the amount as money."""
    try:
        amount = to_money(amount)
    except ValueError:
        raise PaymentValidationError("The amount must be a valid number")
    if amount <= ZERO:
        raise PaymentValidationError("The amount must be greater than 0")
    if payment_method not in dict(Payment.PAYMENT_METHOD_CHOICES):
        raise PaymentValidationError(f"Unknown payment method: {payment_method}")
    if payment_method == Payment.BANK_TRANSFER and not (proof_of_transfer or "").strip():
        raise PaymentValidationError("A proof of transfer is required for bank transfers")
    return amount


def _get_member(member, lock=False):
    queryset = User.objects.select_for_update() if lock else User.objects.all()
    try:
        return queryset.get(pk=getattr(member, "pk", member))
    except (User.DoesNotExist, DjangoValidationError, ValueError):
        raise PaymentNotFoundError("Member not found")


def _load_obligation(member, obligation_kind, obligation_id):
    if obligation_kind not in OBLIGATION_MODELS:
        raise PaymentValidationError(f"Unknown obligation kind: {obligation_kind}")
    if not obligation_id:
        raise PaymentValidationError("An obligation id is required with an obligation kind")
    try:
        obligation = get_member_obligation(member, obligation_kind, obligation_id)
    except (DjangoValidationError, ValueError):
        obligation = None
    if obligation is None:
        raise PaymentNotFoundError("Obligation not found for this member")
    return obligation


def _record(member, amount, obligation, recorded_by, **fields):
    """
    Settle ``obligation`` with credits first, then with ``amount``.
    One payment row is written for the full amount; whatever the obligation
    could not take becomes a credit.
    """
    excess = amount
    if obligation is not None:
        remaining_after_credits = settle_with_credits(member, obligation)
        applied = obligation.apply_amount(min(amount, remaining_after_credits))
        obligation.save()
        excess = amount - applied

    payment = Payment(member=member, amount=amount, recorded_by=recorded_by, **fields)
    payment.link_obligation(obligation)
    payment.save()

    credit, absorbed = None, ZERO
    if excess > ZERO:
        credit, absorbed = create_credit(
            member,
            excess,
            payment=payment,
            description=f"Excess of payment {payment.identity}",
        )
    return payment, credit, absorbed


def _credit_message(credit, absorbed):
    if credit is None:
        return ""
    message = f" A credit of {credit.amount} was created."
    if absorbed > ZERO:
        message += f" {absorbed} of available credit was applied to initial debts."
    return message


def _tender_fields(payment_method, payment_date, payment_reference, proof_of_transfer):
    fields = {
        "payment_method": payment_method,
        "payment_reference": payment_reference or None,
        "proof_of_transfer": proof_of_transfer or None,
    }
    if payment_date is not None:
        fields["payment_date"] = payment_date
    return fields


def record_payment(
    actor,
    member,
    amount,
    payment_method,
    payment_date=None,
    payment_reference=None,
    proof_of_transfer=None,
    description=None,
    obligation_kind=None,
    obligation_id=None,
):
    """
    Record a payment against one obligation, or against none.
    Credits are consumed before the new money; any excess becomes a credit
    which is immediately swept onto outstanding initial debts.
    """
    try:
        ensure_authorized(actor, "record_payment")
        amount = validate_tender(amount, payment_method, proof_of_transfer)
        fields = _tender_fields(payment_method, payment_date, payment_reference, proof_of_transfer)
        fields["description"] = description or None

        with transaction.atomic():
            member = _get_member(member, lock=True)
            obligation = None
            if obligation_kind or obligation_id:
                obligation = _load_obligation(member, obligation_kind, obligation_id)

            payment, credit, absorbed = _record(member, amount, obligation, actor, **fields)

        logger.info(
            f"Payment {payment.identity} of {amount} recorded for {member.member_no} by {actor.member_no}"
        )
        return _success(
            f"Payment of {amount} recorded successfully." + _credit_message(credit, absorbed),
            {
                "payment": PaymentSerializer(payment).data,
                "credit": CreditSerializer(credit).data if credit is not None else None,
                "absorbed_by_initial_debts": absorbed,
            },
        )
    except PaymentError as e:
        logger.warning(f"Payment rejected: {e}")
        return _failure(str(e))
    except Exception as e:
        logger.exception(f"Error recording payment: {e}")
        return _failure("Error while recording the payment")


def record_general_payment(
    actor,
    member,
    amount,
    payment_method,
    payment_date=None,
    payment_reference=None,
    proof_of_transfer=None,
    description=None,
):
    """
    Spread one amount over everything the member owes: initial debts, then
    monthly dues, then assistance charges, then standing obligations, each
    oldest first. Credits settle each obligation before new money does.
    A payment row is written per obligation funded; the rest is recorded as
    an unlinked payment and becomes a credit.
    """
    try:
        ensure_authorized(actor, "record_general_payment")
        amount = validate_tender(amount, payment_method, proof_of_transfer)
        fields = _tender_fields(payment_method, payment_date, payment_reference, proof_of_transfer)

        with transaction.atomic():
            member = _get_member(member, lock=True)
            funds_left = amount
            payments = []

            for obligation in outstanding_obligations(member):
                if funds_left <= ZERO:
                    break
                remaining_after_credits = settle_with_credits(member, obligation)
                if remaining_after_credits <= ZERO:
                    obligation.save()
                    continue

                applied = obligation.apply_amount(min(funds_left, remaining_after_credits))
                obligation.save()

                payment = Payment(
                    member=member,
                    amount=applied,
                    recorded_by=actor,
                    description=description or f"General payment on {obligation}",
                    **fields,
                )
                payment.link_obligation(obligation)
                payment.save()
                payments.append(payment)
                funds_left -= applied

            credit, absorbed = None, ZERO
            if funds_left > ZERO:
                payment, credit, absorbed = _record(
                    member,
                    funds_left,
                    None,
                    actor,
                    description=description or "General payment remainder",
                    **fields,
                )
                payments.append(payment)

        distributed = len([p for p in payments if p.obligation is not None])
        logger.info(
            f"General payment of {amount} for {member.member_no} spread over {distributed} obligation(s)"
        )
        return _success(
            f"Payment of {amount} distributed over {distributed} obligation(s)."
            + _credit_message(credit, absorbed),
            {
                "payments": PaymentSerializer(payments, many=True).data,
                "credit": CreditSerializer(credit).data if credit is not None else None,
                "absorbed_by_initial_debts": absorbed,
            },
        )
    except PaymentError as e:
        logger.warning(f"General payment rejected: {e}")
        return _failure(str(e))
    except Exception as e:
        logger.exception(f"Error recording general payment: {e}")
        return _failure("Error while recording the payment")


def recompute_obligation(obligation):
    """
    Derive the paid total of ``obligation`` from what is linked to it:
    credit usages first, then valid payments in recording order, each
    capped by what was still owed. Returns {payment pk: amount attributed}.
    """
    link = obligation_filter(obligation)
    credited = (
        CreditUsage.objects.filter(**link).aggregate(total=Sum("amount_consumed"))["total"]
        or ZERO
    )
    room = clamp(obligation.amount_due - credited)

    attributed = {}
    for payment in Payment.objects.valid().filter(**link).order_by("created_at", "id"):
        portion = min(payment.amount, room)
        attributed[payment.pk] = portion
        room -= portion

    obligation.set_paid_total(credited + sum(attributed.values(), ZERO))
    obligation.save()
    return attributed


def edit_payment(
    actor,
    payment,
    amount,
    payment_method,
    payment_date=None,
    payment_reference=None,
    proof_of_transfer=None,
    description=None,
):
    """
    Change a recorded payment and bring its obligation and credits in line.
    Every payment on the obligation has its credit resized to whatever its
    attributed share leaves over, so the money stays accounted for and the
    result matches having recorded the final amounts in the first place.

    ``proof_of_transfer=None`` keeps the stored proof; an empty string
    clears it.
    """
    try:
        ensure_authorized(actor, "edit_payment")

        with transaction.atomic():
            try:
                payment = Payment.objects.select_for_update().get(pk=getattr(payment, "pk", payment))
            except (Payment.DoesNotExist, DjangoValidationError, ValueError):
                raise PaymentNotFoundError("Payment not found")
            _get_member(payment.member_id, lock=True)

            proof = payment.proof_of_transfer if proof_of_transfer is None else proof_of_transfer
            amount = validate_tender(amount, payment_method, proof)

            payment.amount = amount
            payment.payment_method = payment_method
            payment.proof_of_transfer = proof or None
            if payment_date is not None:
                payment.payment_date = payment_date
            if payment_reference is not None:
                payment.payment_reference = payment_reference or None
            if description is not None:
                payment.description = description or None
            payment.save()

            absorbed = ZERO
            attributed = {}
            obligation = payment.obligation
            if obligation is not None:
                obligation = type(obligation).objects.select_for_update().get(pk=obligation.pk)
                attributed = recompute_obligation(obligation)

                # Other payments on the obligation may gain or lose room
                siblings = (
                    Payment.objects.valid()
                    .filter(**obligation_filter(obligation))
                    .exclude(pk=payment.pk)
                    .order_by("created_at", "id")
                )
                for sibling in siblings:
                    _, swept = reconcile_payment_credit(
                        sibling, sibling.amount - attributed.get(sibling.pk, ZERO)
                    )
                    absorbed += swept

            credit, swept = reconcile_payment_credit(payment, amount - attributed.get(payment.pk, ZERO))
            absorbed += swept
            payment.refresh_from_db()

        logger.info(f"Payment {payment.identity} edited by {actor.member_no}, new amount {amount}")
        return _success(
            "Payment updated successfully.",
            {
                "payment": PaymentSerializer(payment).data,
                "credit": CreditSerializer(credit).data if credit is not None else None,
                "absorbed_by_initial_debts": absorbed,
            },
        )
    except PaymentError as e:
        logger.warning(f"Payment edit rejected: {e}")
        return _failure(str(e))
    except Exception as e:
        logger.exception(f"Error editing payment: {e}")
        return _failure("Error while updating the payment")


def get_member_balance(actor, member):
    """What a member still owes, per obligation kind, net of available credit."""
    try:
        ensure_authorized(actor, "view_balance", member)
        member = _get_member(member)

        outstanding = outstanding_obligations(member)
        by_kind = {kind: ZERO for kind in OBLIGATION_MODELS}
        for obligation in outstanding:
            by_kind[obligation.KIND] += obligation.amount_remaining

        total_owed = sum(by_kind.values(), ZERO)
        credit = available_credit_total(member)
        return _success(
            f"Balance for {member.member_no}",
            {
                "member": member.member_no,
                "owed_by_kind": by_kind,
                "total_owed": total_owed,
                "available_credit": credit,
                "net_balance": clamp(total_owed - credit),
                "obligations": [serialize_obligation(o) for o in outstanding],
            },
        )
    except PaymentError as e:
        return _failure(str(e))
    except Exception as e:
        logger.exception(f"Error computing member balance: {e}")
        return _failure("Error while computing the balance")


def get_financial_stats(actor):
    """Association-wide totals for the admin finance overview."""
    try:
        ensure_authorized(actor, "view_financial_stats")

        debts = InitialDebt.objects.all()
        payments = Payment.objects.valid()
        pending_charges = AssistanceCharge.objects.filter(status=AssistanceCharge.STATUS_PENDING)

        def total(queryset, field):
            return to_money(queryset.aggregate(total=Sum(field))["total"] or ZERO)

        return _success(
            "Financial statistics",
            {
                "total_initial_debts_outstanding": total(debts, "amount_remaining"),
                "total_payments": total(payments, "amount"),
                "total_pending_assistance": total(pending_charges, "amount_remaining"),
                "members_with_initial_debt": debts.order_by().values("member").distinct().count(),
                "initial_debt_count": debts.count(),
                "payment_count": payments.count(),
                "pending_assistance_count": pending_charges.count(),
            },
        )
    except PaymentError as e:
        return _failure(str(e))
    except Exception as e:
        logger.exception(f"Error computing financial statistics: {e}")
        return _failure("Error while computing the statistics")
