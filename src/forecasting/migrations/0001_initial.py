import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _category_score(name):
    return (
        name,
        models.PositiveSmallIntegerField(
            blank=True,
            null=True,
            validators=[
                django.core.validators.MinValueValidator(0),
                django.core.validators.MaxValueValidator(3),
            ],
        ),
    )


MEDDPICC_FIELDS = []
for _prefix in ("eb", "paper", "champion", "process", "timing", "criteria", "competition", "budget", "pain", "metrics"):
    MEDDPICC_FIELDS.extend([
        _category_score(f"{_prefix}_score"),
        (f"{_prefix}_summary", models.TextField(blank=True, default="")),
        (f"{_prefix}_tip", models.TextField(blank=True, default="")),
    ])


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="HealthScoreRule",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "min_score",
                    models.PositiveSmallIntegerField(
                        validators=[django.core.validators.MaxValueValidator(30)],
                        verbose_name="min score",
                    ),
                ),
                (
                    "max_score",
                    models.PositiveSmallIntegerField(
                        validators=[django.core.validators.MaxValueValidator(30)],
                        verbose_name="max score",
                    ),
                ),
                (
                    "mapped_category",
                    models.CharField(
                        choices=[("Commit", "Commit"), ("Best Case", "Best Case"), ("Pipeline", "Pipeline")],
                        max_length=20,
                        verbose_name="mapped category",
                    ),
                ),
                ("suppression", models.BooleanField(default=False, verbose_name="suppression")),
                (
                    "probability_modifier",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("1.0000"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("9.9999")),
                        ],
                        verbose_name="probability modifier",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="health_score_rules",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "health score rule",
                "verbose_name_plural": "health score rules",
                "ordering": ["organization", "mapped_category", "-min_score", "max_score", "id"],
                "indexes": [
                    models.Index(fields=["organization", "mapped_category"], name="forecast_rule_org_cat_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuotaPeriod",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("period_name", models.CharField(max_length=100, verbose_name="period name")),
                ("period_start", models.DateField(verbose_name="period start")),
                ("period_end", models.DateField(verbose_name="period end")),
                ("fiscal_year", models.CharField(blank=True, default="", max_length=20, verbose_name="fiscal year")),
                ("fiscal_quarter", models.CharField(blank=True, default="", max_length=20, verbose_name="fiscal quarter")),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quota_periods",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "quota period",
                "verbose_name_plural": "quota periods",
                "ordering": ["-period_start"],
            },
        ),
        migrations.CreateModel(
            name="Opportunity",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("rep_name", models.CharField(blank=True, default="", max_length=255, verbose_name="rep name")),
                ("account_name", models.CharField(blank=True, default="", max_length=255, verbose_name="account name")),
                (
                    "opportunity_name",
                    models.CharField(blank=True, default="", max_length=255, verbose_name="opportunity name"),
                ),
                (
                    "amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, verbose_name="amount"),
                ),
                ("close_date", models.DateField(blank=True, db_index=True, null=True, verbose_name="close date")),
                (
                    "forecast_stage",
                    models.CharField(blank=True, default="", max_length=100, verbose_name="forecast stage"),
                ),
                (
                    "health_score",
                    models.DecimalField(
                        blank=True,
                        decimal_places=1,
                        max_digits=4,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(30),
                        ],
                        verbose_name="health score",
                    ),
                ),
                *MEDDPICC_FIELDS,
                ("risk_summary", models.TextField(blank=True, default="", verbose_name="risk summary")),
                ("next_steps", models.TextField(blank=True, default="", verbose_name="next steps")),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="opportunities",
                        to="organizations.organization",
                    ),
                ),
                (
                    "rep",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="opportunities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "opportunity",
                "verbose_name_plural": "opportunities",
                "ordering": ["close_date", "-amount", "id"],
                "indexes": [
                    models.Index(fields=["organization", "close_date"], name="forecast_opp_org_close_idx"),
                    models.Index(fields=["organization", "rep"], name="forecast_opp_org_rep_idx"),
                ],
            },
        ),
    ]
