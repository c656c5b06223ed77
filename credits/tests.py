from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.test import APITestCase
from rest_framework import status

from credits.models import Credit, CreditUsage
from credits.utils import (
    apply_credits,
    available_credit_total,
    create_credit,
    settle_with_credits,
    sweep_credits_to_initial_debts,
)
from duetypes.models import DueType
from obligations.models import InitialDebt, MonthlyDue

User = get_user_model()


class CreditApplicationTests(APITestCase):
    def setUp(self):
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")
        self.due_type = DueType.objects.create(name="Membership", standard_amount=Decimal("25.00"))
        self.due = MonthlyDue.objects.create(
            member=self.member,
            due_type=self.due_type,
            period="2025-01",
            due_date=date(2025, 1, 15),
            amount_due=Decimal("25.00"),
        )

    def test_oldest_credit_is_consumed_first(self):
        older = Credit.objects.create(member=self.member, amount=Decimal("10.00"))
        newer = Credit.objects.create(member=self.member, amount=Decimal("20.00"))

        with transaction.atomic():
            still_owed = apply_credits(self.member, Decimal("25.00"), self.due)

        self.assertEqual(still_owed, Decimal("0.00"))
        older.refresh_from_db()
        newer.refresh_from_db()
        self.assertEqual(older.amount_remaining, Decimal("0.00"))
        self.assertEqual(older.status, Credit.USED)
        self.assertEqual(newer.amount_used, Decimal("15.00"))
        self.assertEqual(newer.amount_remaining, Decimal("5.00"))
        self.assertEqual(newer.status, Credit.AVAILABLE)
        self.assertEqual(CreditUsage.objects.filter(monthly_due=self.due).count(), 2)

    def test_returns_what_is_still_owed_when_credits_run_out(self):
        Credit.objects.create(member=self.member, amount=Decimal("8.00"))

        with transaction.atomic():
            still_owed = apply_credits(self.member, Decimal("25.00"), self.due)

        self.assertEqual(still_owed, Decimal("17.00"))
        self.assertEqual(available_credit_total(self.member), Decimal("0.00"))

    def test_nothing_owed_touches_nothing(self):
        credit = Credit.objects.create(member=self.member, amount=Decimal("8.00"))

        with transaction.atomic():
            still_owed = apply_credits(self.member, Decimal("0.00"), self.due)

        self.assertEqual(still_owed, Decimal("0.00"))
        credit.refresh_from_db()
        self.assertEqual(credit.amount_remaining, Decimal("8.00"))
        self.assertFalse(CreditUsage.objects.exists())

    def test_credits_of_other_members_are_ignored(self):
        other = User.objects.create_user(password="password", first_name="Other", last_name="Member")
        Credit.objects.create(member=other, amount=Decimal("100.00"))

        with transaction.atomic():
            still_owed = apply_credits(self.member, Decimal("25.00"), self.due)

        self.assertEqual(still_owed, Decimal("25.00"))

    def test_settle_books_credit_as_paid(self):
        Credit.objects.create(member=self.member, amount=Decimal("10.00"))

        with transaction.atomic():
            still_owed = settle_with_credits(self.member, self.due)
            self.due.save()

        self.due.refresh_from_db()
        self.assertEqual(still_owed, Decimal("15.00"))
        self.assertEqual(self.due.amount_paid, Decimal("10.00"))
        self.assertEqual(self.due.amount_remaining, Decimal("15.00"))
        self.assertEqual(self.due.amount_paid + self.due.amount_remaining, self.due.amount_due)
        self.assertEqual(self.due.status, MonthlyDue.STATUS_PARTIALLY_PAID)


class InitialDebtSweepTests(APITestCase):
    def setUp(self):
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")

    def test_sweep_pays_oldest_year_first(self):
        debt_2023 = InitialDebt.objects.create(member=self.member, year=2023, amount_due=Decimal("30.00"))
        debt_2024 = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("30.00"))
        Credit.objects.create(member=self.member, amount=Decimal("40.00"))

        with transaction.atomic():
            absorbed = sweep_credits_to_initial_debts(self.member)

        self.assertEqual(absorbed, Decimal("40.00"))
        debt_2023.refresh_from_db()
        debt_2024.refresh_from_db()
        self.assertEqual(debt_2023.status, InitialDebt.STATUS_PAID)
        self.assertEqual(debt_2024.amount_remaining, Decimal("20.00"))
        self.assertEqual(debt_2024.status, InitialDebt.STATUS_PARTIALLY_PAID)

    def test_new_credit_is_swept_immediately(self):
        debt = InitialDebt.objects.create(member=self.member, year=2024, amount_due=Decimal("25.00"))

        with transaction.atomic():
            credit, absorbed = create_credit(self.member, Decimal("100.00"))

        self.assertEqual(absorbed, Decimal("25.00"))
        self.assertEqual(credit.amount, Decimal("100.00"))
        self.assertEqual(credit.amount_remaining, Decimal("75.00"))
        debt.refresh_from_db()
        self.assertEqual(debt.amount_remaining, Decimal("0.00"))

    def test_sweep_without_debts_keeps_credit(self):
        with transaction.atomic():
            credit, absorbed = create_credit(self.member, Decimal("12.50"))

        self.assertEqual(absorbed, Decimal("0.00"))
        self.assertEqual(credit.amount_remaining, Decimal("12.50"))
        self.assertEqual(credit.status, Credit.AVAILABLE)


class CreditApiTests(APITestCase):
    def setUp(self):
        self.member = User.objects.create_user(password="password", first_name="Awa", last_name="Diallo")
        self.other = User.objects.create_user(password="password", first_name="Other", last_name="Member")
        self.admin = User.objects.create_user(
            password="password", first_name="Admin", last_name="User", is_system_admin=True, is_member=False
        )
        self.credit = Credit.objects.create(member=self.member, amount=Decimal("10.00"))
        Credit.objects.create(member=self.other, amount=Decimal("5.00"))

    def test_member_only_sees_own_credits(self):
        self.client.force_authenticate(user=self.member)
        response = self.client.get("/api/v1/credits/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["reference"], self.credit.reference)

    def test_admin_can_filter_by_member(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(f"/api/v1/credits/?member={self.other.member_no}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["amount"], Decimal("5.00"))

    def test_member_cannot_read_someone_elses_credit(self):
        other_credit = Credit.objects.get(member=self.other)
        self.client.force_authenticate(user=self.member)
        response = self.client.get(f"/api/v1/credits/{other_credit.reference}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
