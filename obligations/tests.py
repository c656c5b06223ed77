from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework.test import APITestCase
from rest_framework import status

from duetypes.models import DueType
from obligations.models import AssistanceCharge, InitialDebt, MonthlyDue, StandingObligation
from obligations.money import to_money
from obligations.utils import (
    assistance_amount_for,
    generate_monthly_dues,
    mark_overdue_obligations,
    outstanding_obligations,
)

User = get_user_model()


class MoneyTests(TestCase):
    def test_rounds_half_up_to_cents(self):
        self.assertEqual(to_money("10.005"), Decimal("10.01"))
        self.assertEqual(to_money(0.1), Decimal("0.10"))
        self.assertEqual(to_money(7), Decimal("7.00"))

    def test_rejects_garbage(self):
        for value in ("ten", None, "NaN", "Infinity"):
            with self.assertRaises(ValueError):
                to_money(value)


class ObligationBalanceTests(TestCase):
    def setUp(self):
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")
        self.due_type = DueType.objects.create(name="Membership", standard_amount=Decimal("15.00"))

    def make_due(self, amount="50.00", due_date=date(2025, 1, 15), period="2025-01"):
        return MonthlyDue.objects.create(
            member=self.member,
            due_type=self.due_type,
            period=period,
            due_date=due_date,
            amount_due=Decimal(amount),
        )

    def test_new_obligation_is_pending_with_full_balance(self):
        due = self.make_due()
        self.assertEqual(due.status, MonthlyDue.STATUS_PENDING)
        self.assertEqual(due.amount_paid, Decimal("0.00"))
        self.assertEqual(due.amount_remaining, Decimal("50.00"))

    def test_apply_amount_is_capped(self):
        due = self.make_due()

        applied = due.apply_amount(Decimal("80.00"))

        self.assertEqual(applied, Decimal("50.00"))
        self.assertEqual(due.amount_paid, Decimal("50.00"))
        self.assertEqual(due.amount_remaining, Decimal("0.00"))
        self.assertEqual(due.status, MonthlyDue.STATUS_PAID)

    def test_negative_amounts_are_clamped(self):
        due = self.make_due()

        self.assertEqual(due.apply_amount(Decimal("-5.00")), Decimal("0.00"))
        due.set_paid_total(Decimal("-20.00"))

        self.assertEqual(due.amount_paid, Decimal("0.00"))
        self.assertEqual(due.amount_remaining, Decimal("50.00"))

    def test_overdue_is_kept_until_money_arrives(self):
        due = self.make_due()
        due.status = MonthlyDue.STATUS_OVERDUE

        due.apply_amount(Decimal("0.00"))
        self.assertEqual(due.status, MonthlyDue.STATUS_OVERDUE)

        due.apply_amount(Decimal("5.00"))
        self.assertEqual(due.status, MonthlyDue.STATUS_PARTIALLY_PAID)

    def test_allocated_assistance_charge_keeps_status_while_partly_paid(self):
        charge = AssistanceCharge.objects.create(
            member=self.member,
            amount_due=Decimal("50.00"),
            event_date=date(2025, 3, 1),
            status=AssistanceCharge.STATUS_ALLOCATED,
        )

        charge.apply_amount(Decimal("20.00"))
        self.assertEqual(charge.status, AssistanceCharge.STATUS_ALLOCATED)

        charge.apply_amount(Decimal("30.00"))
        self.assertEqual(charge.status, AssistanceCharge.STATUS_PAID)

    def test_outstanding_obligations_follow_priority(self):
        pledge = StandingObligation.objects.create(
            member=self.member, label="Building fund", amount_due=Decimal("10.00"), due_date=date(2024, 1, 1)
        )
        charge = AssistanceCharge.objects.create(
            member=self.member, amount_due=Decimal("50.00"), event_date=date(2024, 6, 1)
        )
        later_due = self.make_due(due_date=date(2025, 2, 15), period="2025-02")
        earlier_due = self.make_due()
        debt_2024 = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("10.00"))
        debt_2023 = InitialDebt.objects.create(member=self.member, year=2023, amount_due=Decimal("10.00"))
        self.make_due(amount="0.00", due_date=date(2025, 3, 15), period="2025-03")

        self.assertEqual(
            outstanding_obligations(self.member),
            [debt_2023, debt_2024, earlier_due, later_due, charge, pledge],
        )


class MonthlyDueGenerationTests(TestCase):
    def setUp(self):
        self.members = [
            User.objects.create_user(password="password", first_name="Awa", last_name="Diallo"),
            User.objects.create_user(password="password", first_name="Moussa", last_name="Traore"),
        ]
        User.objects.create_user(password="password", first_name="Former", last_name="Member", is_active=False)
        self.due_type = DueType.objects.create(name="Membership", standard_amount=Decimal("15.00"))
        DueType.objects.create(name="Retired fund", standard_amount=Decimal("5.00"), is_active=False)

    def test_creates_one_due_per_member_type_and_month(self):
        created = generate_monthly_dues("2025-01", months=2)

        self.assertEqual(len(created), 4)
        january = MonthlyDue.objects.get(member=self.members[0], period="2025-01")
        self.assertEqual(january.due_date, date(2025, 1, 15))
        self.assertEqual(january.amount_due, Decimal("15.00"))
        self.assertEqual(january.status, MonthlyDue.STATUS_PENDING)

    def test_running_twice_creates_nothing_new(self):
        generate_monthly_dues("2025-01")
        self.assertEqual(generate_monthly_dues("2025-01"), [])
        self.assertEqual(MonthlyDue.objects.count(), 2)

    @override_settings(MONTHLY_DUE_DAY=31)
    def test_due_day_is_clamped_to_month_end(self):
        generate_monthly_dues("2025-02", members=self.members[:1])
        self.assertEqual(MonthlyDue.objects.get().due_date, date(2025, 2, 28))

    def test_bad_period_is_rejected(self):
        with self.assertRaises(ValueError):
            generate_monthly_dues("January")


class OverdueTests(TestCase):
    def setUp(self):
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")
        due_type = DueType.objects.create(name="Membership", standard_amount=Decimal("15.00"))
        self.late = MonthlyDue.objects.create(
            member=self.member, due_type=due_type, period="2025-01", due_date=date(2025, 1, 15),
            amount_due=Decimal("15.00"),
        )
        self.partly_paid = MonthlyDue.objects.create(
            member=self.member, due_type=due_type, period="2025-02", due_date=date(2025, 2, 15),
            amount_due=Decimal("15.00"), amount_paid=Decimal("5.00"),
        )
        self.not_yet_due = MonthlyDue.objects.create(
            member=self.member, due_type=due_type, period="2025-03", due_date=date(2025, 3, 15),
            amount_due=Decimal("15.00"),
        )

    def test_only_untouched_past_due_rows_are_flagged(self):
        flagged = mark_overdue_obligations(today=date(2025, 3, 1))

        self.assertEqual(flagged, 1)
        self.late.refresh_from_db()
        self.partly_paid.refresh_from_db()
        self.not_yet_due.refresh_from_db()
        self.assertEqual(self.late.status, MonthlyDue.STATUS_OVERDUE)
        self.assertEqual(self.partly_paid.status, MonthlyDue.STATUS_PARTIALLY_PAID)
        self.assertEqual(self.not_yet_due.status, MonthlyDue.STATUS_PENDING)

    def test_grace_days_through_command(self):
        call_command("mark_overdue_obligations", "--today", "2025-01-20", "--grace-days", "10")

        self.late.refresh_from_db()
        self.assertEqual(self.late.status, MonthlyDue.STATUS_PENDING)


class ObligationApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            password="password", first_name="Admin", last_name="User", is_system_admin=True, is_member=False
        )
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")

    def test_assistance_charge_defaults_its_amount(self):
        self.client.force_authenticate(user=self.admin)
        data = {
            "member": self.member.member_no,
            "assistance_type": "Family Bereavement",
            "event_date": "2025-03-01",
        }
        response = self.client.post("/api/v1/obligations/assistance-charges/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(AssistanceCharge.objects.get().amount_due, assistance_amount_for("Family Bereavement"))
        self.assertEqual(response.data["amount_remaining"], Decimal("50.00"))

    def test_one_initial_debt_per_year(self):
        InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("30.00"))
        self.client.force_authenticate(user=self.admin)
        data = {"member": self.member.member_no, "year": 2024, "amount_due": "10.00"}

        response = self.client.post("/api/v1/obligations/initial-debts/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("year", response.data)

    def test_member_cannot_create_obligations(self):
        self.client.force_authenticate(user=self.member)
        data = {"member": self.member.member_no, "year": 2024, "amount_due": "10.00"}

        response = self.client.post("/api/v1/obligations/initial-debts/", data, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_generate_endpoint(self):
        DueType.objects.create(name="Membership", standard_amount=Decimal("15.00"))
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/obligations/monthly-dues/generate/", {"period": "2025-01", "months": 3}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["created_count"], 3)
        self.assertEqual(MonthlyDue.objects.filter(member=self.member).count(), 3)
