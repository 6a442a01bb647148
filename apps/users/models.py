"""User profile models for RideGO.

Authentication itself is provided by ``django.contrib.auth``; the engine
only needs a display name and a role for each user.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.context import CallerContext, Role


class Profile(models.Model):
    """Display data and role of a platform user."""

    class RoleChoices(models.TextChoices):
        CUSTOMER = Role.CUSTOMER.value, _("Customer")
        ADMIN = Role.ADMIN.value, _("Administrator")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    full_name = models.CharField(max_length=255, blank=True)
    role = models.CharField(
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.CUSTOMER,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Profile")
        verbose_name_plural = _("Profiles")

    def __str__(self) -> str:
        return self.full_name or str(self.user)

    def caller_context(self) -> CallerContext:
        """Explicit identity handed to booking and payment operations."""
        return CallerContext(
            user_id=self.user_id,
            email=self.user.email,
            role=Role(self.role),
        )


def caller_context_for_user(user) -> CallerContext:
    """
    Build the caller identity for a Django user.

    Users without a profile are customers, except superusers who act as
    administrators.
    """
    try:
        return user.profile.caller_context()
    except Profile.DoesNotExist:
        role = Role.ADMIN if user.is_superuser else Role.CUSTOMER
        return CallerContext(user_id=user.pk, email=user.email, role=role)
