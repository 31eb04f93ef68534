from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .forms import UserAdminChangeForm, VisibilityEdgeForm
from .models import User, VisibilityEdge


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin configuration for the custom User model."""

    form = UserAdminChangeForm

    # ------------------------------------------------------------------
    # List view
    # ------------------------------------------------------------------
    list_display = (
        "email",
        "first_name",
        "last_name",
        "organization",
        "role",
        "hierarchy_level",
        "manager",
        "is_active",
    )
    list_filter = ("role", "organization", "is_active", "is_staff")
    search_fields = ("email", "first_name", "last_name", "display_name")
    ordering = ("last_name", "first_name")
    list_select_related = ("organization", "manager")
    actions = ("activate_users", "deactivate_users")

    # ------------------------------------------------------------------
    # Detail / edit view
    # ------------------------------------------------------------------
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            _("Personal info"),
            {"fields": ("first_name", "last_name", "display_name")},
        ),
        (
            _("Forecast hierarchy"),
            {
                "fields": (
                    "organization",
                    "role",
                    "hierarchy_level",
                    "manager",
                    "admin_has_full_analytics_access",
                    "see_all_visibility",
                ),
            },
        ),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (
            _("Important dates"),
            {"fields": ("last_login", "date_joined")},
        ),
    )

    # ------------------------------------------------------------------
    # Add user view
    # ------------------------------------------------------------------
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "first_name",
                    "last_name",
                    "organization",
                    "role",
                    "hierarchy_level",
                    "password1",
                    "password2",
                ),
            },
        ),
    )

    readonly_fields = ("date_joined", "last_login")
    autocomplete_fields = ("manager",)

    @admin.action(description="Activate selected users")
    def activate_users(self, request, queryset):
        queryset.update(is_active=True)

    @admin.action(description="Deactivate selected users")
    def deactivate_users(self, request, queryset):
        queryset.update(is_active=False)


@admin.register(VisibilityEdge)
class VisibilityEdgeAdmin(admin.ModelAdmin):
    form = VisibilityEdgeForm
    list_display = ("manager", "visible_user", "created_at")
    search_fields = ("manager__email", "visible_user__email")
    autocomplete_fields = ("manager", "visible_user")
