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
        ("duetypes", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="InitialDebt",
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
                ("amount_due", models.DecimalField(decimal_places=2, max_digits=12)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_remaining", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="initialdebts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Partially Paid", "Partially Paid"),
                            ("Paid", "Paid"),
                            ("Overdue", "Overdue"),
                        ],
                        default="Pending",
                        max_length=20,
                    ),
                ),
                ("year", models.PositiveIntegerField()),
            ],
            options={
                "verbose_name": "Initial Debt",
                "verbose_name_plural": "Initial Debts",
                "ordering": ["-year", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="MonthlyDue",
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
                ("amount_due", models.DecimalField(decimal_places=2, max_digits=12)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_remaining", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="monthlydues",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Partially Paid", "Partially Paid"),
                            ("Paid", "Paid"),
                            ("Overdue", "Overdue"),
                        ],
                        default="Pending",
                        max_length=20,
                    ),
                ),
                ("period", models.CharField(max_length=7)),
                ("due_date", models.DateField()),
                (
                    "due_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="monthly_dues",
                        to="duetypes.duetype",
                    ),
                ),
            ],
            options={
                "verbose_name": "Monthly Due",
                "verbose_name_plural": "Monthly Dues",
                "ordering": ["-due_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="AssistanceCharge",
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
                ("amount_due", models.DecimalField(decimal_places=2, max_digits=12)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_remaining", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assistancecharges",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("Pending", "Pending"), ("Allocated", "Allocated"), ("Paid", "Paid")],
                        default="Pending",
                        max_length=20,
                    ),
                ),
                (
                    "assistance_type",
                    models.CharField(
                        choices=[
                            ("Birth", "Birth"),
                            ("Child Wedding", "Child Wedding"),
                            ("Family Bereavement", "Family Bereavement"),
                            ("Hall Anniversary", "Hall Anniversary"),
                            ("Other", "Other"),
                        ],
                        default="Other",
                        max_length=50,
                    ),
                ),
                ("event_date", models.DateField()),
            ],
            options={
                "verbose_name": "Assistance Charge",
                "verbose_name_plural": "Assistance Charges",
                "ordering": ["-event_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StandingObligation",
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
                ("amount_due", models.DecimalField(decimal_places=2, max_digits=12)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_remaining", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="standingobligations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Partially Paid", "Partially Paid"),
                            ("Paid", "Paid"),
                            ("Overdue", "Overdue"),
                        ],
                        default="Pending",
                        max_length=20,
                    ),
                ),
                ("label", models.CharField(max_length=255)),
                ("period", models.CharField(blank=True, max_length=7, null=True)),
                ("due_date", models.DateField()),
            ],
            options={
                "verbose_name": "Standing Obligation",
                "verbose_name_plural": "Standing Obligations",
                "ordering": ["-due_date", "-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="initialdebt",
            constraint=models.UniqueConstraint(fields=("member", "year"), name="unique_initial_debt_per_year"),
        ),
        migrations.AddConstraint(
            model_name="monthlydue",
            constraint=models.UniqueConstraint(
                fields=("member", "due_type", "period"), name="unique_monthly_due_per_period"
            ),
        ),
    ]
