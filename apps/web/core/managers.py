"""
Custom managers for per-user ownership.

UserOwnedManager filters queries by the authenticated user.
"""

from typing import TYPE_CHECKING, Any, TypeVar

from django.db import models

if TYPE_CHECKING:
    from django.http import HttpRequest

    from .models import UserOwnedModel

_T = TypeVar("_T", bound="UserOwnedModel")


class UserOwnedManager(models.Manager[_T]):
    """
    Manager that filters by owner.

    Usage in views:
        # Automatically scoped to request.user
        items = CartItem.objects.for_user(request).all()

    SECURITY: Always use for_user() in views, never raw querysets.
    """

    def for_user(self, request: "HttpRequest") -> models.QuerySet[_T]:
        """
        Filter queryset by the user attached to the request.

        Args:
            request: HttpRequest with an authenticated .user (set by
                TokenAuthMiddleware or the session)

        Returns:
            QuerySet filtered to the request's user

        Raises:
            ValueError: If the request is not authenticated
        """
        user: Any = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            msg = "Request has no authenticated user. Is TokenAuthMiddleware enabled?"
            raise ValueError(msg)
        return self.filter(user=user)
