"""Custom DRF permissions for the forecasting API."""
from rest_framework.permissions import BasePermission

from forecasting.visibility import KNOWN_ROLES


class CanViewForecast(BasePermission):
    """Active user attached to an organization with a known role."""

    message = "Your account is not set up for forecast views."

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and user.is_active
            and getattr(user, "organization_id", None)
            and getattr(user, "role", None) in KNOWN_ROLES
        )


class IsOrgAdmin(BasePermission):
    """Allow access to users with the ADMIN role inside an organization."""

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "organization_id", None)
            and user.is_admin
        )
