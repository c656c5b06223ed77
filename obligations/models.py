from decimal import Decimal

from django.db import models
from django.contrib.auth import get_user_model

from accounts.abstracts import TimeStampedModel, UniversalIdModel, ReferenceModel
from duetypes.models import DueType
from obligations.money import ZERO, clamp, to_money

User = get_user_model()


"""
Obligations section
- A member can owe money on four kinds of obligations: initial debts carried over
  from previous years, monthly dues, assistance charges and standing obligations
- All four share the same balance fields and are settled by payments and credits
"""


class Obligation(TimeStampedModel, UniversalIdModel, ReferenceModel):
    STATUS_PENDING = "Pending"
    STATUS_PARTIALLY_PAID = "Partially Paid"
    STATUS_PAID = "Paid"
    STATUS_OVERDUE = "Overdue"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PARTIALLY_PAID, "Partially Paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_OVERDUE, "Overdue"),
    ]

    # Name of the foreign key pointing at this kind on payments and credit usages
    KIND = None
    ORDERING_FIELD = "created_at"
    # None means "any status", only the remaining amount is checked
    OUTSTANDING_STATUSES = [STATUS_PENDING, STATUS_PARTIALLY_PAID, STATUS_OVERDUE]

    member = models.ForeignKey(User, on_delete=models.CASCADE, related_name="%(class)ss")
    amount_due = models.DecimalField(max_digits=12, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount_remaining = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    description = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        abstract = True

    @classmethod
    def outstanding_for(cls, member):
        queryset = cls.objects.filter(member=member, amount_remaining__gt=0)
        if cls.OUTSTANDING_STATUSES is not None:
            queryset = queryset.filter(status__in=cls.OUTSTANDING_STATUSES)
        return queryset.order_by(cls.ORDERING_FIELD, "created_at")

    def remaining(self):
        return self.amount_remaining

    def apply_amount(self, amount):
        """
        Add ``amount`` to the paid total, capped at what is still owed.
        Returns the amount actually applied.
        """
        amount = min(clamp(to_money(amount)), self.amount_remaining)
        self.amount_paid += amount
        self.amount_remaining = clamp(self.amount_due - self.amount_paid)
        self.recompute_status()
        return amount

    def set_paid_total(self, total):
        """Replace the paid total with a freshly derived one."""
        self.amount_paid = min(clamp(to_money(total)), self.amount_due)
        self.amount_remaining = clamp(self.amount_due - self.amount_paid)
        self.recompute_status()

    def recompute_status(self):
        if self.amount_remaining <= ZERO:
            self.status = self.STATUS_PAID
        elif self.amount_paid > ZERO:
            self.status = self.STATUS_PARTIALLY_PAID
        elif self.status != self.STATUS_OVERDUE:
            # Overdue is set by the scheduler and kept until money comes in
            self.status = self.STATUS_PENDING

    def save(self, *args, **kwargs):
        if self._state.adding:
            self.amount_due = to_money(self.amount_due)
            self.amount_paid = min(clamp(to_money(self.amount_paid)), self.amount_due)
            self.amount_remaining = clamp(self.amount_due - self.amount_paid)
            self.recompute_status()
        super().save(*args, **kwargs)


class InitialDebt(Obligation):
    """Balance carried over from before the member joined the system, one per year."""

    KIND = "initial_debt"
    ORDERING_FIELD = "year"
    OUTSTANDING_STATUSES = None

    year = models.PositiveIntegerField()

    class Meta:
        verbose_name = "Initial Debt"
        verbose_name_plural = "Initial Debts"
        ordering = ["-year", "-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["member", "year"], name="unique_initial_debt_per_year"),
        ]

    def __str__(self):
        return f"Initial debt {self.year} - {self.member.member_no}"


class MonthlyDue(Obligation):
    KIND = "monthly_due"
    ORDERING_FIELD = "due_date"

    due_type = models.ForeignKey(DueType, on_delete=models.PROTECT, related_name="monthly_dues")
    period = models.CharField(max_length=7)  # YYYY-MM
    due_date = models.DateField()

    class Meta:
        verbose_name = "Monthly Due"
        verbose_name_plural = "Monthly Dues"
        ordering = ["-due_date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["member", "due_type", "period"], name="unique_monthly_due_per_period"
            ),
        ]

    def __str__(self):
        return f"{self.due_type.name} {self.period} - {self.member.member_no}"


class AssistanceCharge(Obligation):
    """
    Contribution charged to a member for a family event.
    The Allocated state belongs to the assistance disbursement workflow.
    """

    KIND = "assistance_charge"
    ORDERING_FIELD = "event_date"

    STATUS_ALLOCATED = "Allocated"

    STATUS_CHOICES = [
        (Obligation.STATUS_PENDING, "Pending"),
        (STATUS_ALLOCATED, "Allocated"),
        (Obligation.STATUS_PAID, "Paid"),
    ]
    OUTSTANDING_STATUSES = [Obligation.STATUS_PENDING]

    ASSISTANCE_TYPE_CHOICES = [
        ("Birth", "Birth"),
        ("Child Wedding", "Child Wedding"),
        ("Family Bereavement", "Family Bereavement"),
        ("Hall Anniversary", "Hall Anniversary"),
        ("Other", "Other"),
    ]

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=Obligation.STATUS_PENDING)
    assistance_type = models.CharField(max_length=50, choices=ASSISTANCE_TYPE_CHOICES, default="Other")
    event_date = models.DateField()

    class Meta:
        verbose_name = "Assistance Charge"
        verbose_name_plural = "Assistance Charges"
        ordering = ["-event_date", "-created_at"]

    def __str__(self):
        return f"Assistance {self.assistance_type} - {self.member.member_no}"

    def recompute_status(self):
        if self.amount_remaining <= ZERO:
            self.status = self.STATUS_PAID
        elif self.status != self.STATUS_ALLOCATED:
            self.status = self.STATUS_PENDING


class StandingObligation(Obligation):
    """Recurring commitment outside the monthly dues (building fund, pledges...)."""

    KIND = "standing_obligation"
    ORDERING_FIELD = "due_date"

    label = models.CharField(max_length=255)
    period = models.CharField(max_length=7, blank=True, null=True)
    due_date = models.DateField()

    class Meta:
        verbose_name = "Standing Obligation"
        verbose_name_plural = "Standing Obligations"
        ordering = ["-due_date", "-created_at"]

    def __str__(self):
        return f"{self.label} - {self.member.member_no}"


# Allocation priority: a general payment settles these kinds in this order
OBLIGATION_MODELS = {
    InitialDebt.KIND: InitialDebt,
    MonthlyDue.KIND: MonthlyDue,
    AssistanceCharge.KIND: AssistanceCharge,
    StandingObligation.KIND: StandingObligation,
}
OBLIGATION_KINDS = list(OBLIGATION_MODELS)


class ObligationLinkModel(models.Model):
    """Points at exactly one obligation of any kind, or none."""

    initial_debt = models.ForeignKey(
        InitialDebt, on_delete=models.PROTECT, null=True, blank=True, related_name="%(class)ss"
    )
    monthly_due = models.ForeignKey(
        MonthlyDue, on_delete=models.PROTECT, null=True, blank=True, related_name="%(class)ss"
    )
    assistance_charge = models.ForeignKey(
        AssistanceCharge, on_delete=models.PROTECT, null=True, blank=True, related_name="%(class)ss"
    )
    standing_obligation = models.ForeignKey(
        StandingObligation, on_delete=models.PROTECT, null=True, blank=True, related_name="%(class)ss"
    )

    class Meta:
        abstract = True

    @property
    def obligation(self):
        for kind in OBLIGATION_KINDS:
            if getattr(self, f"{kind}_id") is not None:
                return getattr(self, kind)
        return None

    @property
    def obligation_kind(self):
        obligation = self.obligation
        return obligation.KIND if obligation is not None else None

    def link_obligation(self, obligation):
        for kind in OBLIGATION_KINDS:
            setattr(self, kind, None)
        if obligation is not None:
            setattr(self, obligation.KIND, obligation)


def obligation_filter(obligation):
    """Queryset kwargs selecting rows linked to ``obligation``."""
    return {obligation.KIND: obligation}
