from datetime import date
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import override_settings
from rest_framework.test import APITestCase
from rest_framework import status

from activitylogs.models import ActivityLog
from credits.models import Credit, CreditUsage
from duetypes.models import DueType
from obligations.models import AssistanceCharge, InitialDebt, MonthlyDue, StandingObligation
from payments.allocations import (
    edit_payment,
    get_financial_stats,
    get_member_balance,
    record_general_payment,
    record_payment,
)
from payments.models import Payment
from payments.utils import send_general_payment_confirmation_email

User = get_user_model()


class AllocationTestCase(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            password="password", first_name="Admin", last_name="User", is_system_admin=True, is_member=False
        )
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")
        self.due_type = DueType.objects.create(name="Membership", standard_amount=Decimal("50.00"))

    def make_due(self, amount, period="2025-01", **extra):
        year, month = period.split("-")
        return MonthlyDue.objects.create(
            member=self.member,
            due_type=self.due_type,
            period=period,
            due_date=date(int(year), int(month), 15),
            amount_due=Decimal(amount),
            **extra,
        )

    def pay(self, amount, obligation=None, method=Payment.CASH, **extra):
        kwargs = {}
        if obligation is not None:
            kwargs = {"obligation_kind": obligation.KIND, "obligation_id": obligation.pk}
        return record_payment(self.admin, self.member, amount, method, **kwargs, **extra)


class RecordPaymentTests(AllocationTestCase):
    def test_exact_payment_settles_obligation(self):
        due = self.make_due("50.00")

        result = self.pay("50.00", due)

        self.assertTrue(result["success"])
        due.refresh_from_db()
        self.assertEqual(due.status, MonthlyDue.STATUS_PAID)
        self.assertEqual(due.amount_remaining, Decimal("0.00"))
        self.assertFalse(Credit.objects.exists())
        self.assertEqual(result["data"]["payment"]["amount"], Decimal("50.00"))

    def test_overpayment_becomes_credit(self):
        due = self.make_due("50.00")

        result = self.pay("60.00", due)

        self.assertTrue(result["success"])
        payment = Payment.objects.get()
        self.assertEqual(payment.amount, Decimal("60.00"))
        self.assertEqual(payment.monthly_due, due)
        credit = Credit.objects.get()
        self.assertEqual(credit.payment, payment)
        self.assertEqual(credit.amount, Decimal("10.00"))
        self.assertEqual(credit.amount_remaining, Decimal("10.00"))
        self.assertIn("credit of 10.00", result["message"])

    def test_partial_payment(self):
        due = self.make_due("50.00")

        self.pay("20.00", due)

        due.refresh_from_db()
        self.assertEqual(due.amount_paid, Decimal("20.00"))
        self.assertEqual(due.amount_remaining, Decimal("30.00"))
        self.assertEqual(due.status, MonthlyDue.STATUS_PARTIALLY_PAID)

    def test_existing_credit_is_used_before_new_money(self):
        first = self.make_due("50.00", "2025-01")
        second = self.make_due("70.00", "2025-02")

        self.pay("60.00", first)
        result = self.pay("60.00", second)

        self.assertTrue(result["success"])
        second.refresh_from_db()
        self.assertEqual(second.status, MonthlyDue.STATUS_PAID)
        self.assertEqual(second.amount_paid, Decimal("70.00"))
        credit = Credit.objects.get()
        self.assertEqual(credit.status, Credit.USED)
        self.assertEqual(credit.amount_remaining, Decimal("0.00"))
        usage = CreditUsage.objects.get()
        self.assertEqual(usage.monthly_due, second)
        self.assertEqual(usage.amount_consumed, Decimal("10.00"))
        # No second credit: the new money exactly covered what credit did not
        self.assertEqual(Credit.objects.count(), 1)

    def test_two_payments_on_initial_debt(self):
        debt = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("100.00"))

        self.pay("60.00", debt)
        debt.refresh_from_db()
        self.assertEqual(debt.amount_paid, Decimal("60.00"))
        self.assertEqual(debt.amount_remaining, Decimal("40.00"))
        self.assertEqual(debt.status, InitialDebt.STATUS_PARTIALLY_PAID)
        self.assertFalse(Credit.objects.exists())

        self.pay("70.00", debt)
        debt.refresh_from_db()
        self.assertEqual(debt.amount_paid, Decimal("100.00"))
        self.assertEqual(debt.amount_remaining, Decimal("0.00"))
        self.assertEqual(debt.status, InitialDebt.STATUS_PAID)
        credit = Credit.objects.get()
        self.assertEqual(credit.amount, Decimal("30.00"))
        self.assertEqual(credit.amount_remaining, Decimal("30.00"))

    def test_excess_on_settled_obligation_is_swept_onto_initial_debt(self):
        due = self.make_due("50.00", amount_paid=Decimal("50.00"))
        debt = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("25.00"))

        result = self.pay("100.00", due)

        self.assertTrue(result["success"])
        credit = Credit.objects.get()
        self.assertEqual(credit.amount, Decimal("100.00"))
        self.assertEqual(credit.amount_remaining, Decimal("75.00"))
        debt.refresh_from_db()
        self.assertEqual(debt.amount_remaining, Decimal("0.00"))
        self.assertEqual(debt.status, InitialDebt.STATUS_PAID)
        self.assertEqual(result["data"]["absorbed_by_initial_debts"], Decimal("25.00"))

    def test_unlinked_payment_becomes_credit(self):
        result = self.pay("30.00")

        self.assertTrue(result["success"])
        payment = Payment.objects.get()
        self.assertIsNone(payment.obligation)
        self.assertEqual(Credit.objects.get().amount, Decimal("30.00"))

    def test_overdue_obligation_moves_to_partially_paid(self):
        due = self.make_due("50.00")
        MonthlyDue.objects.filter(pk=due.pk).update(status=MonthlyDue.STATUS_OVERDUE)

        self.pay("10.00", due)

        due.refresh_from_db()
        self.assertEqual(due.status, MonthlyDue.STATUS_PARTIALLY_PAID)

    def test_bank_transfer_requires_proof(self):
        due = self.make_due("50.00")

        result = self.pay("50.00", due, method=Payment.BANK_TRANSFER)

        self.assertFalse(result["success"])
        self.assertIn("proof of transfer", result["error"])
        self.assertFalse(Payment.objects.exists())
        due.refresh_from_db()
        self.assertEqual(due.amount_paid, Decimal("0.00"))

    def test_bank_transfer_with_proof(self):
        due = self.make_due("50.00")

        result = self.pay(
            "50.00", due, method=Payment.BANK_TRANSFER, proof_of_transfer="https://files.example.com/proof.pdf"
        )

        self.assertTrue(result["success"])
        self.assertEqual(Payment.objects.get().proof_of_transfer, "https://files.example.com/proof.pdf")

    def test_non_positive_amount_is_rejected(self):
        due = self.make_due("50.00")

        for amount in ("0", "-5.00", "abc"):
            result = self.pay(amount, due)
            self.assertFalse(result["success"])

        self.assertFalse(Payment.objects.exists())

    def test_unknown_obligation_is_rejected(self):
        other = User.objects.create_user(password="password", first_name="Other", last_name="Member")
        foreign_due = MonthlyDue.objects.create(
            member=other,
            due_type=self.due_type,
            period="2025-01",
            due_date=date(2025, 1, 15),
            amount_due=Decimal("50.00"),
        )

        result = self.pay("50.00", foreign_due)

        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "Obligation not found for this member")
        self.assertFalse(Payment.objects.exists())

    def test_member_cannot_record_payments(self):
        due = self.make_due("50.00")

        result = record_payment(
            self.member, self.member, "50.00", Payment.CASH,
            obligation_kind=due.KIND, obligation_id=due.pk,
        )

        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "Unauthorized")
        self.assertFalse(Payment.objects.exists())

    def test_activity_log_failure_does_not_block_payment(self):
        due = self.make_due("50.00")

        with patch.object(ActivityLog.objects, "create", side_effect=Exception("audit store down")):
            result = self.pay("60.00", due)

        self.assertTrue(result["success"])
        self.assertEqual(Payment.objects.count(), 1)
        self.assertEqual(Credit.objects.count(), 1)
        self.assertFalse(ActivityLog.objects.exists())

    def test_payment_is_audited(self):
        due = self.make_due("50.00")

        self.pay("60.00", due)

        payment = Payment.objects.get()
        log = ActivityLog.objects.get(source_model="Payment", source_id=str(payment.pk))
        self.assertEqual(log.action, "Payment Recorded")
        self.assertEqual(log.actor, self.admin)
        self.assertTrue(ActivityLog.objects.filter(source_model="Credit", action="Credit Created").exists())


class GeneralPaymentTests(AllocationTestCase):
    def setUp(self):
        super().setUp()
        self.debt = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("20.00"))
        self.due = self.make_due("35.00")

    def general(self, amount):
        return record_general_payment(self.admin, self.member, amount, Payment.CASH)

    def test_exact_amount_covers_everything_in_priority_order(self):
        result = self.general("55.00")

        self.assertTrue(result["success"])
        self.debt.refresh_from_db()
        self.due.refresh_from_db()
        self.assertEqual(self.debt.status, InitialDebt.STATUS_PAID)
        self.assertEqual(self.due.status, MonthlyDue.STATUS_PAID)
        self.assertEqual(Payment.objects.count(), 2)
        self.assertEqual(Payment.objects.get(initial_debt=self.debt).amount, Decimal("20.00"))
        self.assertEqual(Payment.objects.get(monthly_due=self.due).amount, Decimal("35.00"))
        self.assertFalse(Credit.objects.exists())
        self.assertIn("2 obligation(s)", result["message"])

    def test_short_amount_leaves_last_obligation_partial(self):
        self.general("50.00")

        self.debt.refresh_from_db()
        self.due.refresh_from_db()
        self.assertEqual(self.debt.status, InitialDebt.STATUS_PAID)
        self.assertEqual(self.due.amount_paid, Decimal("30.00"))
        self.assertEqual(self.due.amount_remaining, Decimal("5.00"))
        self.assertEqual(self.due.status, MonthlyDue.STATUS_PARTIALLY_PAID)

    def test_priority_runs_through_all_kinds(self):
        charge = AssistanceCharge.objects.create(
            member=self.member, amount_due=Decimal("50.00"), event_date=date(2025, 2, 1)
        )
        pledge = StandingObligation.objects.create(
            member=self.member, label="Building fund", amount_due=Decimal("100.00"), due_date=date(2025, 1, 31)
        )

        self.general("120.00")

        charge.refresh_from_db()
        pledge.refresh_from_db()
        self.assertEqual(charge.status, AssistanceCharge.STATUS_PAID)
        self.assertEqual(pledge.amount_paid, Decimal("15.00"))

    def test_allocated_assistance_charge_is_skipped(self):
        charge = AssistanceCharge.objects.create(
            member=self.member,
            amount_due=Decimal("50.00"),
            event_date=date(2025, 2, 1),
            status=AssistanceCharge.STATUS_ALLOCATED,
        )

        self.general("105.00")

        charge.refresh_from_db()
        self.assertEqual(charge.amount_paid, Decimal("0.00"))
        self.assertEqual(charge.status, AssistanceCharge.STATUS_ALLOCATED)
        self.assertEqual(Credit.objects.get().amount, Decimal("50.00"))

    def test_leftover_is_recorded_and_credited(self):
        result = self.general("80.00")

        self.assertTrue(result["success"])
        self.assertEqual(len(result["data"]["payments"]), 3)
        remainder = Payment.objects.get(initial_debt=None, monthly_due=None)
        self.assertEqual(remainder.amount, Decimal("25.00"))
        credit = Credit.objects.get()
        self.assertEqual(credit.payment, remainder)
        self.assertEqual(credit.amount, Decimal("25.00"))
        total = sum(p.amount for p in Payment.objects.all())
        self.assertEqual(total, Decimal("80.00"))

    def test_credits_settle_obligations_before_new_money(self):
        Credit.objects.create(member=self.member, amount=Decimal("30.00"))

        result = self.general("25.00")

        self.assertTrue(result["success"])
        self.debt.refresh_from_db()
        self.due.refresh_from_db()
        self.assertEqual(self.debt.status, InitialDebt.STATUS_PAID)
        self.assertEqual(self.due.status, MonthlyDue.STATUS_PAID)
        # 20 of credit on the debt, 10 of credit and 25 of money on the due
        self.assertEqual(Payment.objects.count(), 1)
        self.assertEqual(Payment.objects.get().amount, Decimal("25.00"))


class EditPaymentTests(AllocationTestCase):
    def setUp(self):
        super().setUp()
        self.due = self.make_due("50.00")
        self.pay("60.00", self.due)
        self.payment = Payment.objects.get()

    def edit(self, amount, **extra):
        return edit_payment(self.admin, self.payment, amount, Payment.CASH, **extra)

    def test_increasing_amount_grows_credit(self):
        result = self.edit("80.00")

        self.assertTrue(result["success"])
        self.due.refresh_from_db()
        self.assertEqual(self.due.amount_paid, Decimal("50.00"))
        self.assertEqual(Credit.objects.get().amount, Decimal("30.00"))

    def test_same_edit_twice_gives_same_state(self):
        self.edit("80.00")
        self.edit("80.00")

        self.due.refresh_from_db()
        self.assertEqual(self.due.amount_paid, Decimal("50.00"))
        self.assertEqual(self.due.status, MonthlyDue.STATUS_PAID)
        credit = Credit.objects.get()
        self.assertEqual(credit.amount, Decimal("30.00"))
        self.assertEqual(credit.amount_remaining, Decimal("30.00"))

    def test_decreasing_below_due_removes_unused_credit(self):
        result = self.edit("40.00")

        self.assertTrue(result["success"])
        self.due.refresh_from_db()
        self.assertEqual(self.due.amount_paid, Decimal("40.00"))
        self.assertEqual(self.due.amount_remaining, Decimal("10.00"))
        self.assertEqual(self.due.status, MonthlyDue.STATUS_PARTIALLY_PAID)
        self.assertFalse(Credit.objects.exists())
        self.assertIsNone(result["data"]["credit"])

    def test_consumed_credit_is_kept_when_excess_disappears(self):
        other_due = self.make_due("30.00", "2025-02")
        self.pay("20.00", other_due)

        self.edit("50.00")

        credit = Credit.objects.get(payment=self.payment)
        self.assertEqual(credit.amount, Decimal("10.00"))
        self.assertEqual(credit.amount_used, Decimal("10.00"))
        self.assertEqual(credit.amount_remaining, Decimal("0.00"))
        self.assertEqual(credit.status, Credit.USED)

    def test_credit_usage_on_obligation_is_counted_first(self):
        # Second obligation settled partly by the credit of the first payment
        other_due = self.make_due("30.00", "2025-02")
        self.pay("20.00", other_due)
        second_payment = Payment.objects.get(monthly_due=other_due)

        result = edit_payment(self.admin, second_payment, "25.00", Payment.CASH)

        self.assertTrue(result["success"])
        other_due.refresh_from_db()
        self.assertEqual(other_due.amount_paid, Decimal("30.00"))
        self.assertEqual(Credit.objects.get(payment=second_payment).amount, Decimal("5.00"))

    def test_new_excess_is_swept_onto_initial_debt(self):
        debt = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("15.00"))

        self.edit("80.00")

        debt.refresh_from_db()
        self.assertEqual(debt.status, InitialDebt.STATUS_PAID)
        credit = Credit.objects.get()
        self.assertEqual(credit.amount, Decimal("30.00"))
        self.assertEqual(credit.amount_remaining, Decimal("15.00"))

    def test_switch_to_bank_transfer_requires_proof(self):
        result = edit_payment(self.admin, self.payment, "60.00", Payment.BANK_TRANSFER)

        self.assertFalse(result["success"])
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.payment_method, Payment.CASH)

    def test_member_cannot_edit(self):
        result = edit_payment(self.member, self.payment, "10.00", Payment.CASH)

        self.assertEqual(result, {"success": False, "error": "Unauthorized"})
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.amount, Decimal("60.00"))

    def test_edits_back_to_original_amount_restore_recorded_state(self):
        self.due.refresh_from_db()
        recorded = (self.due.amount_paid, self.due.amount_remaining, self.due.status)

        for amount in ("80.00", "20.00", "45.00", "120.00", "60.00"):
            self.assertTrue(self.edit(amount)["success"])

        self.due.refresh_from_db()
        self.assertEqual((self.due.amount_paid, self.due.amount_remaining, self.due.status), recorded)
        credit = Credit.objects.get()
        self.assertEqual(credit.payment, self.payment)
        self.assertEqual(credit.amount, Decimal("10.00"))
        self.assertEqual(credit.amount_remaining, Decimal("10.00"))
        self.assertEqual(credit.status, Credit.AVAILABLE)
        self.assertFalse(CreditUsage.objects.exists())

    def test_empty_proof_clears_it_and_missing_proof_keeps_it(self):
        proof = "https://files.example.com/proof.pdf"
        edit_payment(self.admin, self.payment, "60.00", Payment.BANK_TRANSFER, proof_of_transfer=proof)

        result = edit_payment(self.admin, self.payment, "60.00", Payment.BANK_TRANSFER)
        self.assertTrue(result["success"])
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.proof_of_transfer, proof)

        result = edit_payment(self.admin, self.payment, "60.00", Payment.BANK_TRANSFER, proof_of_transfer="")
        self.assertFalse(result["success"])

        result = edit_payment(self.admin, self.payment, "60.00", Payment.CASH, proof_of_transfer="")
        self.assertTrue(result["success"])
        self.payment.refresh_from_db()
        self.assertIsNone(self.payment.proof_of_transfer)
        self.assertEqual(self.payment.payment_method, Payment.CASH)


class EditSharedObligationTests(AllocationTestCase):
    """Two payments on one initial debt, the second one overpaying it."""

    def setUp(self):
        super().setUp()
        self.debt = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("100.00"))
        self.pay("60.00", self.debt)
        self.first = Payment.objects.get()
        self.pay("70.00", self.debt)
        self.second = Payment.objects.exclude(pk=self.first.pk).get()

    def assertMoneyAccountedFor(self):
        self.debt.refresh_from_db()
        credited = sum((c.amount for c in Credit.objects.all()), Decimal("0.00"))
        tendered = sum((p.amount for p in Payment.objects.all()), Decimal("0.00"))
        self.assertEqual(self.debt.amount_paid + credited, tendered)

    def test_growing_earlier_payment_moves_excess_to_later_payment(self):
        result = edit_payment(self.admin, self.first, "100.00", Payment.CASH)

        self.assertTrue(result["success"])
        self.assertIsNone(result["data"]["credit"])
        self.assertMoneyAccountedFor()
        self.assertEqual(self.debt.amount_paid, Decimal("100.00"))
        self.assertFalse(Credit.objects.filter(payment=self.first).exists())
        credit = Credit.objects.get(payment=self.second)
        self.assertEqual(credit.amount, Decimal("70.00"))
        self.assertEqual(credit.amount_remaining, Decimal("70.00"))

    def test_shrinking_earlier_payment_lets_later_payment_absorb_its_credit(self):
        result = edit_payment(self.admin, self.first, "20.00", Payment.CASH)

        self.assertTrue(result["success"])
        self.assertMoneyAccountedFor()
        self.assertEqual(self.debt.amount_paid, Decimal("90.00"))
        self.assertEqual(self.debt.amount_remaining, Decimal("10.00"))
        self.assertEqual(self.debt.status, InitialDebt.STATUS_PARTIALLY_PAID)
        self.assertFalse(Credit.objects.exists())

    def test_round_trip_restores_recorded_state(self):
        for amount in ("100.00", "10.00", "60.00"):
            self.assertTrue(edit_payment(self.admin, self.first, amount, Payment.CASH)["success"])
            self.assertMoneyAccountedFor()

        self.assertEqual(self.debt.amount_paid, Decimal("100.00"))
        self.assertFalse(Credit.objects.filter(payment=self.first).exists())
        credit = Credit.objects.get(payment=self.second)
        self.assertEqual(credit.amount, Decimal("30.00"))
        self.assertEqual(credit.amount_remaining, Decimal("30.00"))


class MemberBalanceTests(AllocationTestCase):
    def test_balance_is_net_of_credit(self):
        InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("20.00"))
        self.make_due("35.00")
        Credit.objects.create(member=self.member, amount=Decimal("5.00"))

        result = get_member_balance(self.admin, self.member)

        self.assertTrue(result["success"])
        data = result["data"]
        self.assertEqual(data["owed_by_kind"]["initial_debt"], Decimal("20.00"))
        self.assertEqual(data["owed_by_kind"]["monthly_due"], Decimal("35.00"))
        self.assertEqual(data["total_owed"], Decimal("55.00"))
        self.assertEqual(data["available_credit"], Decimal("5.00"))
        self.assertEqual(data["net_balance"], Decimal("50.00"))

    def test_member_reads_own_balance_only(self):
        other = User.objects.create_user(password="password", first_name="Other", last_name="Member")

        self.assertTrue(get_member_balance(self.member, self.member)["success"])
        self.assertEqual(get_member_balance(self.member, other)["error"], "Unauthorized")

    def test_unknown_member_is_refused_before_lookup(self):
        self.assertEqual(get_member_balance(self.member, uuid4())["error"], "Unauthorized")
        self.assertEqual(get_member_balance(self.admin, uuid4())["error"], "Member not found")
        self.assertTrue(get_member_balance(self.member, self.member.pk)["success"])


class FinancialStatsTests(AllocationTestCase):
    def setUp(self):
        super().setUp()
        other = User.objects.create_user(password="password", first_name="Other", last_name="Member")
        self.old_debt = InitialDebt.objects.create(member=self.member, year=2023, amount_due=Decimal("30.00"))
        InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("100.00"))
        InitialDebt.objects.create(member=other, year=2024, amount_due=Decimal("50.00"))
        AssistanceCharge.objects.create(member=self.member, amount_due=Decimal("50.00"), event_date=date(2025, 2, 1))
        AssistanceCharge.objects.create(
            member=other,
            amount_due=Decimal("50.00"),
            event_date=date(2025, 2, 1),
            status=AssistanceCharge.STATUS_ALLOCATED,
        )

    def test_totals_and_counts(self):
        # 30 settles the 2023 debt, the 10 of excess is swept onto 2024
        self.pay("40.00", self.old_debt)
        Payment.objects.create(member=self.member, amount=Decimal("999.00"), payment_method=Payment.BANK_TRANSFER)

        result = get_financial_stats(self.admin)

        self.assertTrue(result["success"])
        self.assertEqual(
            result["data"],
            {
                "total_initial_debts_outstanding": Decimal("140.00"),
                "total_payments": Decimal("40.00"),
                "total_pending_assistance": Decimal("50.00"),
                "members_with_initial_debt": 2,
                "initial_debt_count": 3,
                "payment_count": 1,
                "pending_assistance_count": 1,
            },
        )

    def test_members_are_refused(self):
        self.assertEqual(get_financial_stats(self.member), {"success": False, "error": "Unauthorized"})


class PaymentIdentityTests(AllocationTestCase):
    def test_identity_already_taken_is_skipped(self):
        prefix = f"PAY{date.today():%Y%m%d}"
        self.pay("10.00")
        Payment.objects.create(member=self.member, amount=Decimal("5.00"), identity=f"{prefix}0003")

        result = self.pay("20.00")

        self.assertTrue(result["success"])
        self.assertEqual(result["data"]["payment"]["identity"], f"{prefix}0004")
        self.assertEqual(Payment.objects.filter(identity__startswith=prefix).count(), 3)


class RecomputeCommandTests(AllocationTestCase):
    def test_rebuilds_drifted_balances(self):
        due = self.make_due("50.00")
        self.pay("30.00", due)
        MonthlyDue.objects.filter(pk=due.pk).update(
            amount_paid=Decimal("0.00"), amount_remaining=Decimal("50.00"), status=MonthlyDue.STATUS_PENDING
        )

        call_command("recompute_obligation_balances")

        due.refresh_from_db()
        self.assertEqual(due.amount_paid, Decimal("30.00"))
        self.assertEqual(due.status, MonthlyDue.STATUS_PARTIALLY_PAID)


class PaymentApiTests(AllocationTestCase):
    def setUp(self):
        super().setUp()
        self.due = self.make_due("50.00")

    @patch("payments.views.send_payment_confirmation_email")
    def test_admin_records_payment(self, mock_email):
        self.client.force_authenticate(user=self.admin)
        data = {
            "member": self.member.member_no,
            "amount": "60.00",
            "payment_method": "Cash",
            "obligation_kind": "monthly_due",
            "obligation_id": str(self.due.pk),
        }
        response = self.client.post("/api/v1/payments/record/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["data"]["credit"]["amount"], Decimal("10.00"))
        mock_email.assert_called_once()

    @patch("payments.views.upload_payment_proof", return_value="https://res.cloudinary.com/demo/proof.pdf")
    def test_bank_transfer_proof_file_is_uploaded(self, mock_upload):
        self.client.force_authenticate(user=self.admin)
        proof = SimpleUploadedFile("proof.pdf", b"%PDF-1.4 proof", content_type="application/pdf")
        data = {
            "member": self.member.member_no,
            "amount": "50.00",
            "payment_method": "Bank Transfer",
            "obligation_kind": "monthly_due",
            "obligation_id": str(self.due.pk),
            "proof": proof,
        }
        response = self.client.post("/api/v1/payments/record/", data, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        mock_upload.assert_called_once()
        self.assertEqual(Payment.objects.get().proof_of_transfer, "https://res.cloudinary.com/demo/proof.pdf")

    def test_bank_transfer_without_proof_is_400(self):
        self.client.force_authenticate(user=self.admin)
        data = {"member": self.member.member_no, "amount": "50.00", "payment_method": "Bank Transfer"}
        response = self.client.post("/api/v1/payments/record/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

    def test_member_cannot_record(self):
        self.client.force_authenticate(user=self.member)
        data = {"member": self.member.member_no, "amount": "50.00", "payment_method": "Cash"}
        response = self.client.post("/api/v1/payments/record/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_general_payment_endpoint(self):
        self.client.force_authenticate(user=self.admin)
        data = {"member": self.member.member_no, "amount": "50.00", "payment_method": "Cash"}
        response = self.client.post("/api/v1/payments/general/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.due.refresh_from_db()
        self.assertEqual(self.due.status, MonthlyDue.STATUS_PAID)

    def test_edit_through_patch(self):
        self.pay("60.00", self.due)
        payment = Payment.objects.get()
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(
            f"/api/v1/payments/{payment.reference}/", {"amount": "45.00"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.due.refresh_from_db()
        self.assertEqual(self.due.amount_paid, Decimal("45.00"))
        self.assertFalse(Credit.objects.exists())

    def test_member_cannot_edit_through_patch(self):
        self.pay("60.00", self.due)
        payment = Payment.objects.get()
        self.client.force_authenticate(user=self.member)

        response = self.client.patch(
            f"/api/v1/payments/{payment.reference}/", {"amount": "45.00"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_member_lists_own_payments_and_balance(self):
        self.pay("20.00", self.due)
        self.client.force_authenticate(user=self.member)

        response = self.client.get("/api/v1/payments/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get(f"/api/v1/payments/balance/{self.member.member_no}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["total_owed"], Decimal("30.00"))

    def test_member_cannot_read_other_balance(self):
        other = User.objects.create_user(password="password", first_name="Other", last_name="Member")
        self.client.force_authenticate(user=self.member)

        response = self.client.get(f"/api/v1/payments/balance/{other.member_no}/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @patch("payments.views.send_general_payment_confirmation_email")
    def test_general_payment_sends_one_summary_email(self, mock_email):
        InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("20.00"))
        self.client.force_authenticate(user=self.admin)
        data = {"member": self.member.member_no, "amount": "90.00", "payment_method": "Cash"}

        response = self.client.post("/api/v1/payments/general/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Payment.objects.count(), 3)
        mock_email.assert_called_once()
        member, amount, payments, credit = mock_email.call_args.args
        self.assertEqual(member, self.member)
        self.assertEqual(amount, Decimal("90.00"))
        self.assertEqual(len(payments), 3)
        self.assertEqual(credit["amount"], Decimal("20.00"))

    def test_patch_with_empty_proof_clears_it(self):
        self.pay("50.00", self.due, method=Payment.BANK_TRANSFER, proof_of_transfer="https://files.example.com/p.pdf")
        payment = Payment.objects.get()
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(
            f"/api/v1/payments/{payment.reference}/",
            {"payment_method": "Cash", "proof_of_transfer": ""},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payment.refresh_from_db()
        self.assertIsNone(payment.proof_of_transfer)

    def test_stats_endpoint_is_admin_only(self):
        self.pay("20.00", self.due)

        self.client.force_authenticate(user=self.member)
        response = self.client.get("/api/v1/payments/stats/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/payments/stats/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["total_payments"], Decimal("20.00"))
        self.assertEqual(response.data["data"]["payment_count"], 1)


@override_settings(PAYMENT_NOTIFICATIONS_ENABLED=True, PAYMENT_NOTIFICATIONS_FROM="Association <finance@example.com>")
class GeneralPaymentEmailTests(AllocationTestCase):
    @patch("payments.utils.resend.Emails.send", return_value={"id": "email-1"})
    def test_summary_lists_every_row(self, mock_send):
        self.member.email = "awa@example.com"
        self.member.save()
        self.make_due("35.00")
        result = record_general_payment(self.admin, self.member, "50.00", Payment.CASH)
        payments = result["data"]["payments"]

        send_general_payment_confirmation_email(self.member, Decimal("50.00"), payments, result["data"]["credit"])

        mock_send.assert_called_once()
        params = mock_send.call_args.args[0]
        self.assertEqual(params["to"], ["awa@example.com"])
        for payment in payments:
            self.assertIn(payment["identity"], params["html"])
        self.assertIn("A credit of 15.00", params["html"])
