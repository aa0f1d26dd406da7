"""
Menu and Order API views.

These endpoints are used by the Platter client:
- Menu browsing: restaurant menu with customization groups
- Checkout: one order creation per restaurant (idempotent)
- Tracking: customer order history and detail
- Fulfillment: restaurant owner order queue and status updates
"""

import logging

from django.http import Http404, HttpRequest, JsonResponse
from django.views.decorators.cache import cache_control
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from platter_schemas import (
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
)

from apps.web.core.decorators import (
    api_login_required,
    idempotency_key_required,
    role_required,
)
from apps.web.core.models import User
from apps.web.core.responses import (
    ValidationErrorDetail,
    error_response,
    json_response,
    parse_request,
    validation_error_response,
)
from apps.web.restaurant.exceptions import (
    OrderPermissionError,
    OrderTransitionError,
    OrderValidationError,
)
from apps.web.restaurant.lifecycle import filter_by_status, transition_order
from apps.web.restaurant.models import Order, OrderQuerySet, OrderStatus, Restaurant
from apps.web.restaurant.serializers import (
    MenuResponse,
    RestaurantSchema,
    serialize_category,
    serialize_order,
)
from apps.web.restaurant.services import create_order

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _orders_with_items() -> OrderQuerySet:
    return Order.objects.select_related("restaurant").prefetch_related("items")


def _status_param(request: HttpRequest) -> str | None | JsonResponse:
    """Read and validate the ?status= filter."""
    status = request.GET.get("status") or None
    if status is not None and status not in OrderStatus.values:
        return error_response(f"Unknown status '{status}'")
    return status


def _paginate(request: HttpRequest) -> tuple[int, int]:
    """Read ?limit= and ?offset=, falling back to defaults on bad input."""
    try:
        limit = min(int(request.GET.get("limit", 20)), MAX_PAGE_SIZE)
        offset = max(int(request.GET.get("offset", 0)), 0)
    except ValueError:
        return 20, 0
    return max(limit, 1), offset


# =============================================================================
# Menu
# =============================================================================


@require_GET
@cache_control(max_age=300, public=True)  # 5 minutes
def menu(_request: HttpRequest, restaurant_id: int) -> JsonResponse:
    """
    GET /api/restaurants/{restaurant_id}/menu

    Returns the restaurant with its categories, items and customization
    groups. Unavailable items are included and flagged.
    """
    try:
        restaurant = Restaurant.objects.prefetch_related(
            "categories",
            "categories__items",
            "categories__items__customization_groups",
            "categories__items__customization_groups__options",
        ).get(pk=restaurant_id, is_active=True)
    except Restaurant.DoesNotExist as exc:
        raise Http404(f"Restaurant {restaurant_id} not found") from exc

    response = MenuResponse(
        restaurant=RestaurantSchema.model_validate(restaurant),
        categories=[serialize_category(c) for c in restaurant.categories.all()],
    )
    return json_response(response.model_dump(mode="json"))


# =============================================================================
# Orders
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_login_required
def orders(request: HttpRequest) -> JsonResponse:
    """
    GET  /api/orders - the customer's orders, newest first (?status=)
    POST /api/orders - create one order for one restaurant
    """
    if request.method == "POST":
        return _create_order(request)

    status = _status_param(request)
    if isinstance(status, JsonResponse):
        return status
    limit, offset = _paginate(request)

    queryset = filter_by_status(_orders_with_items().for_customer(request.user), status)
    response = OrderListResponse(
        orders=[serialize_order(o) for o in queryset[offset : offset + limit]],
    )
    return json_response(response.model_dump(mode="json"))


@idempotency_key_required
def _create_order(request: HttpRequest) -> JsonResponse:
    """
    Create an order from an OrderCreateRequest body.

    Response: OrderResponse (201) or ValidationErrorResponse (400)
    """
    order_request = parse_request(request, OrderCreateRequest)
    if isinstance(order_request, JsonResponse):
        return order_request

    try:
        order = create_order(request.user, order_request)
    except OrderValidationError as e:
        return validation_error_response(
            [ValidationErrorDetail(field=f, message=m) for f, m in e.details]
        )

    order = _orders_with_items().get(pk=order.pk)
    response = OrderResponse(order=serialize_order(order))
    return json_response(response.model_dump(mode="json"), status=201)


@require_GET
@role_required(User.Role.RESTAURANT_OWNER)
def restaurant_orders(request: HttpRequest) -> JsonResponse:
    """
    GET /api/orders/restaurant

    Orders of the restaurants owned by the current user (?status=).
    """
    status = _status_param(request)
    if isinstance(status, JsonResponse):
        return status
    limit, offset = _paginate(request)

    queryset = filter_by_status(_orders_with_items().for_owner(request.user), status)
    response = OrderListResponse(
        orders=[serialize_order(o) for o in queryset[offset : offset + limit]],
    )
    return json_response(response.model_dump(mode="json"))


@require_GET
@api_login_required
def order_detail(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    GET /api/orders/{order_id}

    Visible to the customer who placed it and the restaurant owner.
    """
    try:
        order = _orders_with_items().get(pk=order_id)
    except Order.DoesNotExist as exc:
        raise Http404(f"Order {order_id} not found") from exc

    if request.user.pk not in (order.customer_id, order.restaurant.owner_id):
        return error_response("Access denied", status=403)

    response = OrderResponse(order=serialize_order(order))
    return json_response(response.model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["PUT"])
@role_required(User.Role.RESTAURANT_OWNER)
def order_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    PUT /api/orders/{order_id}/status

    Move an order to its next status (or cancel a pending one).
    Restaurant owner only.

    Response: OrderResponse (200), 403 if not the owner, 409 if the
    transition is not allowed.
    """
    update = parse_request(request, OrderStatusUpdate)
    if isinstance(update, JsonResponse):
        return update

    try:
        transition_order(order_id, request.user, update.status.value)
    except Order.DoesNotExist as exc:
        raise Http404(f"Order {order_id} not found") from exc
    except OrderPermissionError as e:
        return error_response(e.message, status=403)
    except OrderTransitionError as e:
        logger.info("Rejected transition for order %s: %s", order_id, e.message)
        return json_response(
            {"error": e.message, "current": e.current, "target": e.target},
            status=409,
        )

    order = _orders_with_items().get(pk=order_id)
    response = OrderResponse(order=serialize_order(order))
    return json_response(response.model_dump(mode="json"))
