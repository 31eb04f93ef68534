"""Models for the organizations app."""
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import TimeStampedModel

STAGE_KEY_COMMIT = "commit"
STAGE_KEY_BEST_CASE = "best_case"
STAGE_KEY_PIPELINE = "pipeline"


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class Organization(TimeStampedModel):
    """Tenant. Organizations form a tree through ``parent``."""

    name = models.CharField("name", max_length=255)
    code = models.CharField("code", max_length=50, unique=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
        verbose_name="parent organization",
    )
    is_active = models.BooleanField("active", default=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "organization"
        verbose_name_plural = "organizations"

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        if self.parent_id and self.parent_id == self.pk:
            raise ValidationError({"parent": "An organization cannot be its own parent."})


# ---------------------------------------------------------------------------
# Forecast configuration
# ---------------------------------------------------------------------------

class ForecastStageProbability(TimeStampedModel):
    """Per-organization override of the weight applied to a CRM bucket."""

    class StageKey(models.TextChoices):
        COMMIT = STAGE_KEY_COMMIT, "Commit"
        BEST_CASE = STAGE_KEY_BEST_CASE, "Best Case"
        PIPELINE = STAGE_KEY_PIPELINE, "Pipeline"

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="stage_probabilities",
    )
    stage_key = models.CharField(max_length=20, choices=StageKey.choices)
    probability = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
    )

    class Meta:
        verbose_name = "forecast stage probability"
        verbose_name_plural = "forecast stage probabilities"
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "stage_key"],
                name="uniq_forecast_stage_probability",
            ),
        ]

    def __str__(self):
        return f"{self.organization_id} {self.stage_key}={self.probability}"


class ScoreDefinition(TimeStampedModel):
    """Display label for one (MEDDPICC+TB category, score) pair."""

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="score_definitions",
    )
    category = models.CharField(max_length=40)
    score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(3)],
    )
    label = models.CharField(max_length=120, blank=True, default="")

    class Meta:
        ordering = ["category", "score"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "category", "score"],
                name="uniq_score_definition",
            ),
        ]

    def __str__(self):
        return f"{self.category}:{self.score} {self.label}"
