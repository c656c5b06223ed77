from decimal import Decimal

from django.db import models
from django.contrib.auth import get_user_model

from accounts.abstracts import TimeStampedModel, UniversalIdModel, ReferenceModel
from obligations.models import ObligationLinkModel
from obligations.money import ZERO, clamp, to_money

User = get_user_model()


class Credit(TimeStampedModel, UniversalIdModel, ReferenceModel):
    """
    Reusable balance created when a payment exceeds what was owed.
    Consumed oldest first against the member's obligations.
    """
    AVAILABLE = "Available"
    USED = "Used"

    STATUS_CHOICES = [
        (AVAILABLE, "Available"),
        (USED, "Used"),
    ]

    member = models.ForeignKey(User, on_delete=models.CASCADE, related_name="credits")
    payment = models.OneToOneField(
        "payments.Payment",
        on_delete=models.PROTECT,
        related_name="credit",
        null=True,
        blank=True,
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    amount_used = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount_remaining = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=AVAILABLE)
    description = models.TextField(blank=True, null=True)

    class Meta:
        verbose_name = "Credit"
        verbose_name_plural = "Credits"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["member", "status", "created_at"], name="credit_member_status_idx"),
        ]

    def __str__(self):
        return f"Credit {self.reference} - {self.amount_remaining}/{self.amount} for {self.member.member_no}"

    def refresh_status(self):
        self.status = self.USED if self.amount_remaining <= ZERO else self.AVAILABLE

    def consume(self, amount):
        """Use up to ``amount`` of this credit and return what was taken."""
        taken = min(self.amount_remaining, clamp(to_money(amount)))
        self.amount_used += taken
        self.amount_remaining = self.amount - self.amount_used
        self.refresh_status()
        self.save(update_fields=["amount_used", "amount_remaining", "status", "updated_at"])
        return taken

    def resize(self, amount):
        """
        Change the face value after the payment behind it was edited.
        The part already consumed is kept.
        """
        self.amount = max(clamp(to_money(amount)), self.amount_used)
        self.amount_remaining = self.amount - self.amount_used
        self.refresh_status()
        self.save(update_fields=["amount", "amount_remaining", "status", "updated_at"])

    def save(self, *args, **kwargs):
        if self._state.adding:
            self.amount = to_money(self.amount)
            self.amount_used = clamp(to_money(self.amount_used))
            self.amount_remaining = clamp(self.amount - self.amount_used)
            self.refresh_status()
        super().save(*args, **kwargs)


class CreditUsage(TimeStampedModel, UniversalIdModel, ReferenceModel, ObligationLinkModel):
    """Append-only record of a credit being consumed against one obligation."""

    credit = models.ForeignKey(Credit, on_delete=models.PROTECT, related_name="usages")
    amount_consumed = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True, null=True)

    class Meta:
        verbose_name = "Credit Usage"
        verbose_name_plural = "Credit Usages"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.amount_consumed} from {self.credit.reference}"
