from django import forms
from django.contrib.auth.forms import UserChangeForm

from .models import User, VisibilityEdge
from .services import check_no_cycle


class UserAdminChangeForm(UserChangeForm):
    """Change form that refuses manager links forming a loop."""

    class Meta(UserChangeForm.Meta):
        model = User
        fields = "__all__"

    def clean(self):
        cleaned_data = super().clean()
        manager = cleaned_data.get("manager")
        if manager is not None and self.instance.pk:
            self.instance.organization = cleaned_data.get("organization", self.instance.organization)
            check_no_cycle(manager, self.instance, "manager_cycle")
        return cleaned_data


class VisibilityEdgeForm(forms.ModelForm):
    class Meta:
        model = VisibilityEdge
        fields = ("manager", "visible_user")

    def clean(self):
        cleaned_data = super().clean()
        manager = cleaned_data.get("manager")
        visible_user = cleaned_data.get("visible_user")
        if manager is not None and visible_user is not None:
            check_no_cycle(manager, visible_user, "visibility_cycle")
        return cleaned_data
