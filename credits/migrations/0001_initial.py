import uuid
from decimal import Decimal

import accounts.utils
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("obligations", "0001_initial"),
        ("payments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Credit",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "reference",
                    models.CharField(
                        default=accounts.utils.generate_reference, editable=False, max_length=20, unique=True
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("amount_used", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_remaining", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[("Available", "Available"), ("Used", "Used")],
                        default="Available",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credits",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "payment",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit",
                        to="payments.payment",
                    ),
                ),
            ],
            options={
                "verbose_name": "Credit",
                "verbose_name_plural": "Credits",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["member", "status", "created_at"], name="credit_member_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditUsage",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "reference",
                    models.CharField(
                        default=accounts.utils.generate_reference, editable=False, max_length=20, unique=True
                    ),
                ),
                ("amount_consumed", models.DecimalField(decimal_places=2, max_digits=12)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "assistance_charge",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="creditusages",
                        to="obligations.assistancecharge",
                    ),
                ),
                (
                    "initial_debt",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="creditusages",
                        to="obligations.initialdebt",
                    ),
                ),
                (
                    "monthly_due",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="creditusages",
                        to="obligations.monthlydue",
                    ),
                ),
                (
                    "standing_obligation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="creditusages",
                        to="obligations.standingobligation",
                    ),
                ),
                (
                    "credit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="usages",
                        to="credits.credit",
                    ),
                ),
            ],
            options={
                "verbose_name": "Credit Usage",
                "verbose_name_plural": "Credit Usages",
                "ordering": ["-created_at"],
            },
        ),
    ]
