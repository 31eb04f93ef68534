"""Django admin configuration for the organizations app."""
from django import forms
from django.contrib import admin

from core.exceptions import HierarchyCycleError
from organizations.models import ForecastStageProbability, Organization, ScoreDefinition
from organizations.services import descendant_organization_ids


class OrganizationAdminForm(forms.ModelForm):
    class Meta:
        model = Organization
        fields = ("name", "code", "parent", "is_active")

    def clean(self):
        cleaned_data = super().clean()
        parent = cleaned_data.get("parent")
        if parent is not None and self.instance.pk:
            if str(parent.pk) in descendant_organization_ids(self.instance.pk):
                raise HierarchyCycleError(
                    "This parent would create a cycle in the organization tree.",
                    code="organization_cycle",
                )
        return cleaned_data


class StageProbabilityInline(admin.TabularInline):
    model = ForecastStageProbability
    extra = 0
    max_num = 3


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    form = OrganizationAdminForm
    list_display = ("name", "code", "parent", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    readonly_fields = ("id", "created_at", "updated_at")
    list_select_related = ("parent",)
    inlines = (StageProbabilityInline,)
    list_per_page = 50


@admin.register(ScoreDefinition)
class ScoreDefinitionAdmin(admin.ModelAdmin):
    list_display = ("organization", "category", "score", "label")
    list_filter = ("organization", "category")
    search_fields = ("category", "label", "organization__name")
    list_select_related = ("organization",)
