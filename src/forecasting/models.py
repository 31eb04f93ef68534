"""Models for the forecasting app."""
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import TimeStampedModel
from forecasting.health_rules import MODIFIER_MAX, clamp_modifier


# ---------------------------------------------------------------------------
# Health score rules
# ---------------------------------------------------------------------------

class HealthScoreRule(models.Model):
    """Maps a health-score range within a CRM bucket to a probability modifier.

    Integer ids are kept on purpose: the lowest id wins when two rules tie.
    """

    class Category(models.TextChoices):
        COMMIT = "Commit", "Commit"
        BEST_CASE = "Best Case", "Best Case"
        PIPELINE = "Pipeline", "Pipeline"

    id = models.BigAutoField(primary_key=True)
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="health_score_rules",
    )
    min_score = models.PositiveSmallIntegerField(
        "min score",
        validators=[MaxValueValidator(30)],
    )
    max_score = models.PositiveSmallIntegerField(
        "max score",
        validators=[MaxValueValidator(30)],
    )
    mapped_category = models.CharField(
        "mapped category",
        max_length=20,
        choices=Category.choices,
    )
    suppression = models.BooleanField("suppression", default=False)
    probability_modifier = models.DecimalField(
        "probability modifier",
        max_digits=5,
        decimal_places=4,
        default=Decimal("1.0000"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal(str(MODIFIER_MAX)))],
    )
    created_at = models.DateTimeField("created at", auto_now_add=True)
    updated_at = models.DateTimeField("updated at", auto_now=True)

    class Meta:
        ordering = ["organization", "mapped_category", "-min_score", "max_score", "id"]
        verbose_name = "health score rule"
        verbose_name_plural = "health score rules"
        indexes = [
            models.Index(fields=["organization", "mapped_category"], name="forecast_rule_org_cat_idx"),
        ]

    def __str__(self):
        return f"#{self.pk} {self.mapped_category} [{self.min_score}-{self.max_score}]"

    def clean(self):
        if self.min_score is not None and self.max_score is not None and self.min_score > self.max_score:
            raise ValidationError({"max_score": "Max score must be greater than or equal to min score."})

    def save(self, *args, **kwargs):
        self.probability_modifier = clamp_modifier(self.probability_modifier)
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Quota periods
# ---------------------------------------------------------------------------

class QuotaPeriod(TimeStampedModel):
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="quota_periods",
    )
    period_name = models.CharField("period name", max_length=100)
    period_start = models.DateField("period start")
    period_end = models.DateField("period end")
    fiscal_year = models.CharField("fiscal year", max_length=20, blank=True, default="")
    fiscal_quarter = models.CharField("fiscal quarter", max_length=20, blank=True, default="")

    class Meta:
        ordering = ["-period_start"]
        verbose_name = "quota period"
        verbose_name_plural = "quota periods"

    def __str__(self):
        return f"{self.period_name} ({self.period_start} - {self.period_end})"

    def clean(self):
        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValidationError({"period_end": "Period end must not be before period start."})


# ---------------------------------------------------------------------------
# Opportunities
# ---------------------------------------------------------------------------

MEDDPICC_FIELD_PREFIXES = (
    "eb",
    "paper",
    "champion",
    "process",
    "timing",
    "criteria",
    "competition",
    "budget",
    "pain",
    "metrics",
)

_CATEGORY_SCORE_VALIDATORS = [MinValueValidator(0), MaxValueValidator(3)]


class Opportunity(TimeStampedModel):
    """A CRM deal, written by ingestion and scoring; read-only to the engine."""

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="opportunities",
    )
    rep = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="opportunities",
    )
    rep_name = models.CharField("rep name", max_length=255, blank=True, default="")
    account_name = models.CharField("account name", max_length=255, blank=True, default="")
    opportunity_name = models.CharField("opportunity name", max_length=255, blank=True, default="")
    amount = models.DecimalField("amount", max_digits=14, decimal_places=2, default=Decimal("0.00"))
    close_date = models.DateField("close date", null=True, blank=True, db_index=True)
    forecast_stage = models.CharField("forecast stage", max_length=100, blank=True, default="")
    health_score = models.DecimalField(
        "health score",
        max_digits=4,
        decimal_places=1,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(30)],
    )

    eb_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    eb_summary = models.TextField(blank=True, default="")
    eb_tip = models.TextField(blank=True, default="")
    paper_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    paper_summary = models.TextField(blank=True, default="")
    paper_tip = models.TextField(blank=True, default="")
    champion_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    champion_summary = models.TextField(blank=True, default="")
    champion_tip = models.TextField(blank=True, default="")
    process_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    process_summary = models.TextField(blank=True, default="")
    process_tip = models.TextField(blank=True, default="")
    timing_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    timing_summary = models.TextField(blank=True, default="")
    timing_tip = models.TextField(blank=True, default="")
    criteria_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    criteria_summary = models.TextField(blank=True, default="")
    criteria_tip = models.TextField(blank=True, default="")
    competition_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    competition_summary = models.TextField(blank=True, default="")
    competition_tip = models.TextField(blank=True, default="")
    budget_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    budget_summary = models.TextField(blank=True, default="")
    budget_tip = models.TextField(blank=True, default="")
    pain_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    pain_summary = models.TextField(blank=True, default="")
    pain_tip = models.TextField(blank=True, default="")
    metrics_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=_CATEGORY_SCORE_VALIDATORS)
    metrics_summary = models.TextField(blank=True, default="")
    metrics_tip = models.TextField(blank=True, default="")

    risk_summary = models.TextField("risk summary", blank=True, default="")
    next_steps = models.TextField("next steps", blank=True, default="")

    class Meta:
        ordering = ["close_date", "-amount", "id"]
        verbose_name = "opportunity"
        verbose_name_plural = "opportunities"
        indexes = [
            models.Index(fields=["organization", "close_date"], name="forecast_opp_org_close_idx"),
            models.Index(fields=["organization", "rep"], name="forecast_opp_org_rep_idx"),
        ]

    def __str__(self):
        return self.opportunity_name or self.account_name or str(self.pk)
