"""Platter Schemas - Pydantic models for data contracts."""

from platter_schemas.cart import (
    MAX_QUANTITY,
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    CartLine,
    CartLineDraft,
    CartResponse,
    DietaryType,
    FavoriteCreate,
    FavoriteDraft,
    FavoriteEntry,
    FavoriteResponse,
    FavoritesResponse,
    RemoteCartItem,
    RemoteCategory,
    RemoteFavorite,
    RemoteMenuItem,
    RemoteRestaurant,
)
from platter_schemas.customizations import (
    CustomizationGroup,
    CustomizationKey,
    CustomizationKind,
    CustomizationOption,
    Customizations,
    MultiSelection,
    Selection,
    SingleSelection,
    customization_key,
    customization_price,
    dump_customizations,
    parse_customizations,
    select,
)
from platter_schemas.orders import (
    CANCELLABLE_STATUSES,
    ORDER_STATUS_FLOW,
    TERMINAL_STATUSES,
    AddressListResponse,
    AddressSchema,
    OrderCreateRequest,
    OrderItemRequest,
    OrderItemSchema,
    OrderListResponse,
    OrderResponse,
    OrderSchema,
    OrderStatus,
    OrderStatusUpdate,
    PaymentMethod,
    PaymentStatus,
    allowed_transitions,
    is_terminal,
    next_status,
)

__all__ = [
    # Customizations
    "CustomizationGroup",
    "CustomizationKey",
    "CustomizationKind",
    "CustomizationOption",
    "Customizations",
    "MultiSelection",
    "Selection",
    "SingleSelection",
    "customization_key",
    "customization_price",
    "dump_customizations",
    "parse_customizations",
    "select",
    # Cart & favorites
    "MAX_QUANTITY",
    "CartItemCreate",
    "CartItemResponse",
    "CartItemUpdate",
    "CartLine",
    "CartLineDraft",
    "CartResponse",
    "DietaryType",
    "FavoriteCreate",
    "FavoriteDraft",
    "FavoriteEntry",
    "FavoriteResponse",
    "FavoritesResponse",
    "RemoteCartItem",
    "RemoteCategory",
    "RemoteFavorite",
    "RemoteMenuItem",
    "RemoteRestaurant",
    # Orders
    "CANCELLABLE_STATUSES",
    "ORDER_STATUS_FLOW",
    "TERMINAL_STATUSES",
    "AddressListResponse",
    "AddressSchema",
    "OrderCreateRequest",
    "OrderItemRequest",
    "OrderItemSchema",
    "OrderListResponse",
    "OrderResponse",
    "OrderSchema",
    "OrderStatus",
    "OrderStatusUpdate",
    "PaymentMethod",
    "PaymentStatus",
    "allowed_transitions",
    "is_terminal",
    "next_status",
]
