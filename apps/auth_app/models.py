"""Custom user model for case managers.

Sign-in is delegated to an external identity provider; ``external_id`` holds
the provider's subject so a returning case manager maps onto the same row.
"""
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models

from caseload.encryption import encrypted_property


class UserManager(BaseUserManager):
    """Manager for the custom User model."""

    def create_user(self, username, password=None, **extra_fields):
        if not username:
            raise ValueError("Username is required.")
        email = extra_fields.pop("email", "")
        user = self.model(username=username, **extra_fields)
        user.email = email
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        extra_fields.setdefault("is_admin", True)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(username, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """A case manager (or administrator) account."""

    username = models.CharField(max_length=150, unique=True)
    external_id = models.CharField(
        max_length=255, unique=True, null=True, blank=True,
        help_text="Identity provider subject for SSO users.",
    )
    display_name = models.CharField(max_length=255, blank=True, default="")
    _email_encrypted = models.BinaryField(default=b"", blank=True)

    is_admin = models.BooleanField(default=False, help_text="Full instance access.")
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False, help_text="Django admin access.")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = ["display_name"]

    class Meta:
        app_label = "auth_app"
        db_table = "users"

    email = encrypted_property("_email_encrypted")

    def __str__(self):
        return self.display_name or self.username

    def get_display_name(self):
        return self.display_name or self.username
