from django.db import models
from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator
from datetime import date
from decimal import Decimal
import logging
from django.db import IntegrityError, transaction

from accounts.abstracts import TimeStampedModel, UniversalIdModel, ReferenceModel
from obligations.models import ObligationLinkModel

logger = logging.getLogger(__name__)

User = get_user_model()

IDENTITY_ATTEMPTS = 5


class PaymentQuerySet(models.QuerySet):
    def valid(self):
        """Bank transfers only count once a proof of transfer is attached."""
        return self.exclude(
            models.Q(payment_method=Payment.BANK_TRANSFER)
            & (models.Q(proof_of_transfer__isnull=True) | models.Q(proof_of_transfer=""))
        )


class Payment(TimeStampedModel, UniversalIdModel, ReferenceModel, ObligationLinkModel):
    """
    Money received from a member through an external channel.
    - Linked to the obligation it was recorded for, or to none for a general payment remainder
    - ``amount`` is the full tendered amount, including any part that became a credit
    """
    CASH = "Cash"
    CHEQUE = "Cheque"
    BANK_TRANSFER = "Bank Transfer"
    CARD = "Card"

    PAYMENT_METHOD_CHOICES = [
        (CASH, "Cash"),
        (CHEQUE, "Cheque"),
        (BANK_TRANSFER, "Bank Transfer"),
        (CARD, "Card"),
    ]

    member = models.ForeignKey(User, on_delete=models.PROTECT, related_name="payments")
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"), message="Amount must be greater than 0")],
    )
    payment_date = models.DateField(default=date.today)
    payment_method = models.CharField(max_length=100, choices=PAYMENT_METHOD_CHOICES, default=CASH)
    payment_reference = models.CharField(max_length=100, blank=True, null=True)
    proof_of_transfer = models.CharField(max_length=500, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    recorded_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="recorded_payments",
        null=True,
        blank=True,
    )
    identity = models.CharField(max_length=100, blank=True, null=True, unique=True)

    objects = PaymentQuerySet.as_manager()

    class Meta:
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        ordering = ["-payment_date", "-created_at"]
        indexes = [
            models.Index(fields=["member", "created_at"], name="payment_member_created_idx"),
            models.Index(fields=["payment_date"], name="payment_date_idx"),
        ]

    def __str__(self):
        return f"Payment {self.reference} - {self.amount} by {self.member.member_no}"

    def generate_identity(self, offset=0):
        prefix = "PAY"
        today = date.today()
        date_str = today.strftime("%Y%m%d")
        payments_today = Payment.objects.filter(
            identity__startswith=f"{prefix}{date_str}"
        ).count()
        sequence = payments_today + 1 + offset
        self.identity = f"{prefix}{date_str}{sequence:04d}"

    def save(self, *args, **kwargs):
        if self.identity:
            return super().save(*args, **kwargs)

        # Two members paying at once can draw the same daily sequence
        for attempt in range(IDENTITY_ATTEMPTS):
            self.generate_identity(offset=attempt)
            try:
                with transaction.atomic():
                    return super().save(*args, **kwargs)
            except IntegrityError:
                if attempt == IDENTITY_ATTEMPTS - 1:
                    raise
                logger.warning(f"Payment identity {self.identity} already taken, retrying")
                self.identity = None
