"""Translate the nested remote cart/favorites shape into the flat local shape."""

from platter_schemas import (
    MAX_QUANTITY,
    CartLine,
    DietaryType,
    FavoriteEntry,
    RemoteCartItem,
    RemoteFavorite,
)


def cart_line_from_remote(item: RemoteCartItem) -> CartLine:
    """
    Flatten a server cart item into a local cart line.

    The server cart item ID becomes both the local id and the remote id,
    so later removals can be mirrored without a lookup. Quantities above
    MAX_QUANTITY are capped so the line can still be ordered.
    """
    menu_item = item.menu_item
    added_at = {"added_at": item.created_at} if item.created_at else {}
    return CartLine(
        id=str(item.id),
        remote_id=item.id,
        item_id=item.menu_item_id,
        restaurant_id=menu_item.category.restaurant_id,
        restaurant_name=menu_item.category.restaurant.name,
        name=menu_item.name,
        unit_price=menu_item.price,
        customizations=item.customizations,
        quantity=min(item.quantity, MAX_QUANTITY),
        **added_at,
    )


def favorite_from_remote(favorite: RemoteFavorite) -> FavoriteEntry:
    """Flatten a server favorite into a local favorite entry."""
    menu_item = favorite.menu_item
    return FavoriteEntry(
        id=str(favorite.id),
        remote_id=favorite.id,
        item_id=favorite.menu_item_id,
        restaurant_id=menu_item.category.restaurant_id,
        restaurant_name=menu_item.category.restaurant.name,
        name=menu_item.name,
        price=menu_item.price,
        description=menu_item.description,
        category=menu_item.category.name,
        dietary_type=DietaryType.VEG if menu_item.is_veg else DietaryType.NON_VEG,
        popular=menu_item.is_popular,
        customizations=menu_item.customization_groups,
        added_at=favorite.created_at,
    )
