"""
Core models - users, bearer tokens and delivery addresses.

All customer-owned models inherit from UserOwnedModel.
"""

import secrets

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

from .managers import UserOwnedManager


class TimestampedModel(models.Model):
    """Abstract base with created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class User(AbstractUser):
    """
    Custom user model with a marketplace role.

    Customers place orders; restaurant owners fulfill them.
    """

    class Role(models.TextChoices):
        CUSTOMER = "customer", "Customer"
        RESTAURANT_OWNER = "restaurant_owner", "Restaurant Owner"

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CUSTOMER,
    )
    phone = models.CharField(max_length=20, blank=True)

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"

    @property
    def is_restaurant_owner(self) -> bool:
        return self.role == self.Role.RESTAURANT_OWNER


def _generate_token_key() -> str:
    return secrets.token_hex(20)


class AuthToken(models.Model):
    """
    Bearer token for API access.

    Tokens are issued by the login flow; the API only looks them up.
    """

    key = models.CharField(max_length=40, unique=True, default=_generate_token_key)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="auth_tokens",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Token for {self.user.username}"


class UserOwnedModel(TimestampedModel):
    """
    Abstract base for models owned by a single user.

    Provides:
    - Automatic user FK
    - UserOwnedManager for scoped queries
    - Created/updated timestamps
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)

    objects = UserOwnedManager()

    class Meta:
        abstract = True


class Address(UserOwnedModel):
    """A saved delivery address. At most one per user is the default."""

    label = models.CharField(max_length=50, blank=True, help_text="e.g., Home, Work")
    address = models.TextField()
    city = models.CharField(max_length=100, blank=True)
    pincode = models.CharField(max_length=10, blank=True)
    is_default = models.BooleanField(default=False)

    class Meta:
        ordering = ["-is_default", "created_at"]
        verbose_name_plural = "addresses"

    def __str__(self) -> str:
        return f"{self.label or 'Address'}: {self.address}"
