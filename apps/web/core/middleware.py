"""
Token middleware - authenticates API requests from a bearer token.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

from django.http import HttpRequest, HttpResponse
from django.utils import timezone

if TYPE_CHECKING:
    from .models import AuthToken


class TokenAuthMiddleware:
    """
    Middleware that resolves `Authorization: Bearer <key>` to a user.

    Runs after AuthenticationMiddleware. When a valid token is present,
    request.user becomes the token's user and request.auth_token the token.
    Invalid tokens leave the request anonymous; the view decides whether
    that is acceptable.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Skip for admin
        if request.path.startswith("/admin/"):
            return self.get_response(request)

        token = self._get_token(request)
        request.auth_token = token  # type: ignore[attr-defined]
        if token is not None:
            request.user = token.user
        return self.get_response(request)

    def _get_token(self, request: HttpRequest) -> "AuthToken | None":
        """Resolve the bearer token from the request."""
        # Lazy import to avoid circular dependency
        from .models import AuthToken

        header = request.headers.get("Authorization", "")
        scheme, _, key = header.partition(" ")
        if scheme.lower() != "bearer" or not key.strip():
            return None

        try:
            token = AuthToken.objects.select_related("user").get(
                key=key.strip(), is_active=True, user__is_active=True
            )
        except AuthToken.DoesNotExist:
            return None

        AuthToken.objects.filter(pk=token.pk).update(last_used_at=timezone.now())
        return token
