"""
Decorators for request handling and validation.
"""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.core.cache import cache
from django.http import HttpRequest, JsonResponse


def idempotency_key_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that requires an Idempotency-Key header for POST requests.

    If the same user sends the same key twice, returns the cached response
    from the first request. Cached responses are stored for 24 hours.

    Usage:
        @idempotency_key_required
        def create_order(request):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        key = request.headers.get("Idempotency-Key")

        if not key:
            return JsonResponse(
                {"error": "Idempotency-Key header is required"},
                status=400,
            )

        # Keys are scoped per user so two customers never share a response
        cache_key = f"idempotency:{request.user.pk}:{key}"
        cached = cache.get(cache_key)

        if cached:
            # Return cached response
            return JsonResponse(
                cached["data"],
                status=cached["status"],
            )

        # Call the actual view
        response = view_func(request, *args, **kwargs)

        # Cache successful responses for 24 hours
        if response.status_code < 400:
            cache.set(
                cache_key,
                {
                    "data": json.loads(response.content),
                    "status": response.status_code,
                },
                timeout=86400,  # 24 hours
            )

        return response

    return wrapper


def api_login_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that rejects anonymous API requests with a JSON 401.

    Unlike django's login_required, never redirects to a login page.
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Authentication required"}, status=401)
        return view_func(request, *args, **kwargs)

    return wrapper


def role_required(role: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that restricts a view to users with the given role.

    Implies api_login_required.

    Usage:
        @role_required(User.Role.RESTAURANT_OWNER)
        def restaurant_orders(request):
            ...
    """

    def decorator(view_func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
            if getattr(request.user, "role", None) != role:
                return JsonResponse(
                    {"error": "You don't have permission to access this resource"},
                    status=403,
                )
            return view_func(request, *args, **kwargs)

        return api_login_required(wrapper)

    return decorator
