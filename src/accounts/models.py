import uuid

from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


class UserManager(BaseUserManager):
    """Custom manager for the User model that uses email as the unique identifier."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("An email address is required.")
        email = self.normalize_email(email)
        extra_fields.setdefault("is_active", True)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.ADMIN)
        extra_fields.setdefault("admin_has_full_analytics_access", True)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model for the forecasting platform.

    Uses email as the unique identifier instead of a username.
    The role, hierarchy level and manager link decide which reps'
    deals a user can see in forecast views.
    """

    class Role(models.TextChoices):
        REP = "REP", "Sales rep"
        MANAGER = "MANAGER", "Manager"
        EXEC_MANAGER = "EXEC_MANAGER", "Executive manager"
        ADMIN = "ADMIN", "Administrator"

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )
    email = models.EmailField(
        "email address",
        unique=True,
        error_messages={
            "unique": "A user with this email address already exists.",
        },
    )
    first_name = models.CharField("first name", max_length=150)
    last_name = models.CharField("last name", max_length=150)
    display_name = models.CharField("display name", max_length=255, blank=True, default="")
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="users",
        verbose_name="organization",
    )
    role = models.CharField(
        "role",
        max_length=20,
        choices=Role.choices,
        default=Role.REP,
        db_index=True,
    )
    hierarchy_level = models.PositiveSmallIntegerField(
        "hierarchy level",
        default=0,
        help_text="0 is the top of the organization.",
    )
    manager = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="direct_reports",
        verbose_name="manager",
    )
    admin_has_full_analytics_access = models.BooleanField(
        "full analytics access",
        default=False,
        help_text="Admins only: see every user in this organization and its children.",
    )
    see_all_visibility = models.BooleanField(
        "see all visibility",
        default=False,
        help_text="Managers only: see every user at or below this hierarchy level.",
    )
    is_active = models.BooleanField("active", default=True, db_index=True)
    is_staff = models.BooleanField("staff status", default=False)
    date_joined = models.DateTimeField("date joined", default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["last_name", "first_name"]

    def __str__(self):
        return self.get_full_name() or self.email

    def clean(self):
        super().clean()
        if self.manager_id and self.manager_id == self.pk:
            raise ValidationError({"manager": "A user cannot be their own manager."})

    def get_full_name(self):
        if self.display_name:
            return self.display_name
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name

    def get_short_name(self):
        return self.first_name

    # ------------------------------------------------------------------
    # Role helpers
    # ------------------------------------------------------------------

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN


class VisibilityEdge(TimeStampedModel):
    """Explicit grant: ``manager`` may see ``visible_user``'s deals."""

    manager = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="visibility_grants",
    )
    visible_user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="visible_to",
    )

    class Meta:
        verbose_name = "visibility edge"
        verbose_name_plural = "visibility edges"
        constraints = [
            models.UniqueConstraint(
                fields=["manager", "visible_user"],
                name="uniq_visibility_edge",
            ),
        ]

    def __str__(self):
        return f"{self.manager_id} -> {self.visible_user_id}"

    def clean(self):
        if self.manager_id and self.manager_id == self.visible_user_id:
            raise ValidationError("A user cannot be granted visibility on themselves.")
