"""
Cart and Favorites API views.

The client keeps its own local copy and mirrors each mutation here on a
best-effort basis; on login it replaces its copy with these lists.
"""

import logging

from django.db import transaction
from django.db.models import QuerySet
from django.http import Http404, HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from platter_schemas import (
    MAX_QUANTITY,
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
    FavoriteCreate,
    FavoriteResponse,
    FavoritesResponse,
    RemoteCartItem,
    RemoteFavorite,
    customization_key,
    dump_customizations,
    parse_customizations,
)

from apps.web.cart.models import CartItem, Favorite
from apps.web.core.decorators import api_login_required
from apps.web.core.responses import (
    ValidationErrorDetail,
    json_response,
    parse_request,
    validation_error_response,
)
from apps.web.restaurant.models import MenuItem
from apps.web.restaurant.serializers import serialize_menu_item
from apps.web.restaurant.services import resolve_customizations

logger = logging.getLogger(__name__)

_MENU_ITEM_RELATED = ("menu_item__category__restaurant",)
_MENU_ITEM_PREFETCH = ("menu_item__customization_groups__options",)


def _cart_items(request: HttpRequest) -> QuerySet[CartItem]:
    return (
        CartItem.objects.for_user(request)
        .select_related(*_MENU_ITEM_RELATED)
        .prefetch_related(*_MENU_ITEM_PREFETCH)
    )


def _favorites(request: HttpRequest) -> QuerySet[Favorite]:
    return (
        Favorite.objects.for_user(request)
        .select_related(*_MENU_ITEM_RELATED)
        .prefetch_related(*_MENU_ITEM_PREFETCH)
    )


def serialize_cart_item(item: CartItem) -> RemoteCartItem:
    return RemoteCartItem(
        id=item.pk,
        menu_item_id=item.menu_item_id,
        quantity=item.quantity,
        customizations=parse_customizations(item.customizations),
        menu_item=serialize_menu_item(item.menu_item),
        created_at=item.created_at,
    )


def serialize_favorite(favorite: Favorite) -> RemoteFavorite:
    return RemoteFavorite(
        id=favorite.pk,
        menu_item_id=favorite.menu_item_id,
        menu_item=serialize_menu_item(favorite.menu_item),
        created_at=favorite.created_at,
    )


def _menu_item_error(message: str) -> JsonResponse:
    return validation_error_response(
        [ValidationErrorDetail(field="menu_item_id", message=message)]
    )


# =============================================================================
# Cart
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST", "DELETE"])
@api_login_required
def cart(request: HttpRequest) -> JsonResponse:
    """
    GET    /api/cart - the user's cart with embedded menu items
    POST   /api/cart - add an item (merged with an identical line)
    DELETE /api/cart - remove every item
    """
    if request.method == "POST":
        return _add_to_cart(request)

    if request.method == "DELETE":
        deleted, _ = CartItem.objects.for_user(request).delete()
        logger.info("Cleared %d cart items for user %s", deleted, request.user.pk)
        return json_response({"deleted": deleted})

    response = CartResponse(
        cart_items=[serialize_cart_item(item) for item in _cart_items(request)],
    )
    return json_response(response.model_dump(mode="json"))


def _add_to_cart(request: HttpRequest) -> JsonResponse:
    """
    Add a menu item selection to the cart.

    Response: CartItemResponse (201 when created, 200 when merged)
    """
    body = parse_request(request, CartItemCreate)
    if isinstance(body, JsonResponse):
        return body

    try:
        menu_item = MenuItem.objects.get(pk=body.menu_item_id)
    except MenuItem.DoesNotExist:
        return _menu_item_error("Item not found")
    if not menu_item.is_available:
        return _menu_item_error(f"'{menu_item.name}' is currently unavailable")

    customizations, errors = resolve_customizations(menu_item, body.customizations)
    if errors:
        return validation_error_response(
            [ValidationErrorDetail(field="customizations", message=e) for e in errors]
        )

    key = customization_key(customizations)
    with transaction.atomic():
        existing = (
            CartItem.objects.for_user(request)
            .select_for_update()
            .filter(menu_item=menu_item)
        )
        item = next((i for i in existing if i.selection_key == key), None)
        if item is not None:
            item.quantity = min(item.quantity + body.quantity, MAX_QUANTITY)
            item.save(update_fields=["quantity", "updated_at"])
            status = 200
        else:
            item = CartItem.objects.create(
                user=request.user,
                menu_item=menu_item,
                quantity=body.quantity,
                customizations=dump_customizations(customizations),
            )
            status = 201

    item = _cart_items(request).get(pk=item.pk)
    response = CartItemResponse(cart_item=serialize_cart_item(item))
    return json_response(response.model_dump(mode="json"), status=status)


@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@api_login_required
def cart_item(request: HttpRequest, item_id: int) -> JsonResponse:
    """
    PUT    /api/cart/{item_id} - set the quantity
    DELETE /api/cart/{item_id} - remove the item
    """
    try:
        item = _cart_items(request).get(pk=item_id)
    except CartItem.DoesNotExist as exc:
        raise Http404(f"Cart item {item_id} not found") from exc

    if request.method == "DELETE":
        item.delete()
        return json_response({"deleted": 1})

    body = parse_request(request, CartItemUpdate)
    if isinstance(body, JsonResponse):
        return body

    item.quantity = body.quantity
    item.save(update_fields=["quantity", "updated_at"])
    response = CartItemResponse(cart_item=serialize_cart_item(item))
    return json_response(response.model_dump(mode="json"))


# =============================================================================
# Favorites
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_login_required
def favorites(request: HttpRequest) -> JsonResponse:
    """
    GET  /api/favorites - the user's favorites with embedded menu items
    POST /api/favorites - save a menu item (no-op if already saved)
    """
    if request.method == "GET":
        response = FavoritesResponse(
            favorites=[serialize_favorite(f) for f in _favorites(request)],
        )
        return json_response(response.model_dump(mode="json"))

    body = parse_request(request, FavoriteCreate)
    if isinstance(body, JsonResponse):
        return body

    try:
        menu_item = MenuItem.objects.get(pk=body.menu_item_id)
    except MenuItem.DoesNotExist:
        return _menu_item_error("Item not found")

    favorite, created = Favorite.objects.get_or_create(
        user=request.user,
        menu_item=menu_item,
    )
    favorite = _favorites(request).get(pk=favorite.pk)
    response = FavoriteResponse(favorite=serialize_favorite(favorite))
    return json_response(response.model_dump(mode="json"), status=201 if created else 200)


@csrf_exempt
@require_http_methods(["DELETE"])
@api_login_required
def favorite(request: HttpRequest, favorite_id: int) -> JsonResponse:
    """
    DELETE /api/favorites/{favorite_id}
    """
    deleted, _ = Favorite.objects.for_user(request).filter(pk=favorite_id).delete()
    if not deleted:
        raise Http404(f"Favorite {favorite_id} not found")
    return json_response({"deleted": deleted})
