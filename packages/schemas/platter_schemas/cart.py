"""
Cart and favorites schemas.

Two shapes live here:
- The flat shape kept in the client's local store (CartLine, FavoriteEntry).
- The nested shape served by the remote Cart/Favorites API, where each
  entry embeds its menu item, category and restaurant.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, computed_field

from platter_schemas.customizations import (
    CustomizationGroup,
    CustomizationKey,
    Customizations,
    customization_key,
    customization_price,
)


# Largest quantity of one cart line or order item
MAX_QUANTITY = 99


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DietaryType(str, Enum):
    """Dietary label shown on favorites."""

    VEG = "Veg"
    NON_VEG = "Non-Veg"


# =============================================================================
# Local (flat) shape
# =============================================================================


class CartLineDraft(BaseModel):
    """A cart line as requested by the UI, before it gets a local id."""

    item_id: int
    restaurant_id: int
    restaurant_name: str = ""
    name: str
    unit_price: Decimal
    customizations: Customizations = Field(default_factory=dict)
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def customization_price(self) -> Decimal:
        """Sum of the selected option prices."""
        return customization_price(self.customizations)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_price(self) -> Decimal:
        """Price of a single unit including customizations."""
        return self.unit_price + self.customization_price

    @property
    def line_total(self) -> Decimal:
        return self.total_price * self.quantity

    @property
    def selection_key(self) -> tuple[int, CustomizationKey]:
        """Identity of the choice: same item with the same customizations."""
        return self.item_id, customization_key(self.customizations)


class CartLine(CartLineDraft):
    """
    One priced, quantified selection of a menu item in the local cart.

    At most one CartLine exists per (item_id, customizations).
    """

    id: str = Field(description="Opaque local identifier")
    added_at: datetime = Field(default_factory=_utc_now)
    remote_id: int | None = Field(
        default=None,
        description="Cart item ID on the server, once mirrored",
    )


class FavoriteDraft(BaseModel):
    """A favorite as requested by the UI, before it gets a local id."""

    item_id: int
    restaurant_id: int
    restaurant_name: str = ""
    name: str
    price: Decimal
    description: str = ""
    category: str = ""
    dietary_type: DietaryType = DietaryType.VEG
    popular: bool = False
    customizations: list[CustomizationGroup] = Field(default_factory=list)


class FavoriteEntry(FavoriteDraft):
    """A saved menu item template. At most one per item_id."""

    id: str
    added_at: datetime = Field(default_factory=_utc_now)
    remote_id: int | None = None


# =============================================================================
# Remote (nested) shape
# =============================================================================


class RemoteRestaurant(BaseModel):
    """Restaurant summary embedded in a menu item category."""

    id: int
    name: str


class RemoteCategory(BaseModel):
    """Menu category embedded in a menu item."""

    id: int
    name: str
    restaurant_id: int
    restaurant: RemoteRestaurant


class RemoteMenuItem(BaseModel):
    """Menu item embedded in cart and favorite entries."""

    id: int
    name: str
    description: str = ""
    price: Decimal
    is_veg: bool = True
    is_popular: bool = False
    is_available: bool = True
    category: RemoteCategory
    customization_groups: list[CustomizationGroup] = Field(default_factory=list)


class RemoteCartItem(BaseModel):
    """A cart item as stored on the server."""

    id: int
    menu_item_id: int
    quantity: int = Field(ge=1)
    customizations: Customizations = Field(default_factory=dict)
    menu_item: RemoteMenuItem
    created_at: datetime | None = None


class RemoteFavorite(BaseModel):
    """A favorite as stored on the server."""

    id: int
    menu_item_id: int
    menu_item: RemoteMenuItem
    created_at: datetime


# =============================================================================
# API requests / responses
# =============================================================================


class CartItemCreate(BaseModel):
    """Request body for POST /api/cart."""

    menu_item_id: int
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)
    customizations: Customizations = Field(default_factory=dict)


class CartItemUpdate(BaseModel):
    """Request body for PUT /api/cart/{id}."""

    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)


class FavoriteCreate(BaseModel):
    """Request body for POST /api/favorites."""

    menu_item_id: int


class CartResponse(BaseModel):
    """Response for GET /api/cart."""

    cart_items: list[RemoteCartItem]


class CartItemResponse(BaseModel):
    """Response for POST /api/cart and PUT /api/cart/{id}."""

    cart_item: RemoteCartItem


class FavoritesResponse(BaseModel):
    """Response for GET /api/favorites."""

    favorites: list[RemoteFavorite]


class FavoriteResponse(BaseModel):
    """Response for POST /api/favorites."""

    favorite: RemoteFavorite
