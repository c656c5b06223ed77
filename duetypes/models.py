from decimal import Decimal

from django.db import models

from accounts.abstracts import TimeStampedModel, UniversalIdModel, ReferenceModel


class DueType(UniversalIdModel, TimeStampedModel, ReferenceModel):
    """
    - Categories of recurring monthly dues
    - Membership dues, solidarity fund, hall maintenance etc
    """
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, null=True)
    standard_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Due Type"
        verbose_name_plural = "Due Types"
        ordering = ["-created_at"]

    def __str__(self):
        return self.name
