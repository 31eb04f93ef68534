"""Exceptions shared across apps."""
from django.core.exceptions import ValidationError


class HierarchyCycleError(ValidationError):
    """Raised when a parent/manager assignment would close a loop."""
