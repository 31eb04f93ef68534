import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("name", models.CharField(max_length=255, verbose_name="name")),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="code")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="children",
                        to="organizations.organization",
                        verbose_name="parent organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "organization",
                "verbose_name_plural": "organizations",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="ForecastStageProbability",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "stage_key",
                    models.CharField(
                        choices=[("commit", "Commit"), ("best_case", "Best Case"), ("pipeline", "Pipeline")],
                        max_length=20,
                    ),
                ),
                (
                    "probability",
                    models.DecimalField(
                        decimal_places=4,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1")),
                        ],
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stage_probabilities",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "forecast stage probability",
                "verbose_name_plural": "forecast stage probabilities",
            },
        ),
        migrations.AddConstraint(
            model_name="forecaststageprobability",
            constraint=models.UniqueConstraint(
                fields=("organization", "stage_key"),
                name="uniq_forecast_stage_probability",
            ),
        ),
        migrations.CreateModel(
            name="ScoreDefinition",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("category", models.CharField(max_length=40)),
                (
                    "score",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(3),
                        ],
                    ),
                ),
                ("label", models.CharField(blank=True, default="", max_length=120)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="score_definitions",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["category", "score"],
            },
        ),
        migrations.AddConstraint(
            model_name="scoredefinition",
            constraint=models.UniqueConstraint(
                fields=("organization", "category", "score"),
                name="uniq_score_definition",
            ),
        ),
    ]
