"""Django admin configuration for the forecasting app."""
from django.contrib import admin, messages

from forecasting.models import HealthScoreRule, Opportunity, QuotaPeriod
from forecasting.providers import overlapping_rules


@admin.register(HealthScoreRule)
class HealthScoreRuleAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "organization",
        "mapped_category",
        "min_score",
        "max_score",
        "suppression",
        "probability_modifier",
    )
    list_filter = ("organization", "mapped_category", "suppression")
    list_select_related = ("organization",)
    ordering = ("organization", "mapped_category", "-min_score", "max_score", "id")

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        pairs = [
            (a, b) for a, b in overlapping_rules(obj.organization_id)
            if obj.pk in (a.id, b.id)
        ]
        for a, b in pairs[:12]:
            self.message_user(
                request,
                f"Rule #{a.id} [{a.min_score}-{a.max_score}] overlaps rule #{b.id} "
                f"[{b.min_score}-{b.max_score}] in {a.mapped_category}.",
                level=messages.WARNING,
            )


@admin.register(QuotaPeriod)
class QuotaPeriodAdmin(admin.ModelAdmin):
    list_display = ("period_name", "organization", "period_start", "period_end", "fiscal_year", "fiscal_quarter")
    list_filter = ("organization", "fiscal_year")
    search_fields = ("period_name",)
    date_hierarchy = "period_start"
    list_select_related = ("organization",)


@admin.register(Opportunity)
class OpportunityAdmin(admin.ModelAdmin):
    list_display = (
        "opportunity_name",
        "account_name",
        "organization",
        "rep_name",
        "forecast_stage",
        "amount",
        "close_date",
        "health_score",
    )
    list_filter = ("organization", "forecast_stage")
    search_fields = ("opportunity_name", "account_name", "rep_name")
    raw_id_fields = ("rep",)
    readonly_fields = ("id", "created_at", "updated_at")
    list_select_related = ("organization", "rep")
    date_hierarchy = "close_date"
    list_per_page = 50
