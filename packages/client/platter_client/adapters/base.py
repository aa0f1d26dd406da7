"""Base service protocol - interface to the remote Cart/Favorites/Order API."""

from typing import Protocol, runtime_checkable

from platter_schemas import (
    AddressSchema,
    CartItemCreate,
    OrderCreateRequest,
    OrderSchema,
    OrderStatus,
    RemoteCartItem,
    RemoteFavorite,
)


@runtime_checkable
class PlatterService(Protocol):
    """
    Protocol defining the remote service the client synchronizes with.

    Implementations: HttpPlatterService (production) and
    InMemoryPlatterService (tests, offline demos).
    Methods are async so network calls never block local mutations.
    """

    # =========================================================================
    # Cart
    # =========================================================================

    async def get_cart(self) -> list[RemoteCartItem]:
        """
        Get the authoritative cart with embedded menu item data.

        Raises:
            PlatterAPIError: If the request fails.
        """
        ...

    async def add_cart_item(self, item: CartItemCreate) -> RemoteCartItem:
        """
        Add an item to the cart (merged with an identical existing line).

        Raises:
            PlatterAPIError: If the request fails.
        """
        ...

    async def update_cart_item(self, cart_item_id: int, quantity: int) -> RemoteCartItem:
        """
        Set the quantity of a cart item.

        Raises:
            PlatterAPIError: If the request fails or the item is unknown.
        """
        ...

    async def remove_cart_item(self, cart_item_id: int) -> None:
        """
        Remove a cart item.

        Raises:
            PlatterAPIError: If the request fails or the item is unknown.
        """
        ...

    async def clear_cart(self) -> None:
        """
        Remove every cart item.

        Raises:
            PlatterAPIError: If the request fails.
        """
        ...

    # =========================================================================
    # Favorites
    # =========================================================================

    async def get_favorites(self) -> list[RemoteFavorite]:
        """
        Get the authoritative favorites with embedded menu item data.

        Raises:
            PlatterAPIError: If the request fails.
        """
        ...

    async def add_favorite(self, menu_item_id: int) -> RemoteFavorite:
        """
        Add a menu item to favorites (no-op if already present).

        Raises:
            PlatterAPIError: If the request fails.
        """
        ...

    async def remove_favorite(self, favorite_id: int) -> None:
        """
        Remove a favorite by its server ID.

        Raises:
            PlatterAPIError: If the request fails or the favorite is unknown.
        """
        ...

    # =========================================================================
    # Addresses (read-only)
    # =========================================================================

    async def get_addresses(self) -> list[AddressSchema]:
        """
        Get the customer's saved delivery addresses.

        Raises:
            PlatterAPIError: If the request fails.
        """
        ...

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self, order: OrderCreateRequest, idempotency_key: str | None = None
    ) -> OrderSchema:
        """
        Create one order for one restaurant.

        Args:
            order: Order request for a single restaurant group.
            idempotency_key: Replays with the same key return the first result.

        Raises:
            PlatterAPIError: If the order is rejected or the request fails.
        """
        ...

    async def list_orders(self, status: OrderStatus | None = None) -> list[OrderSchema]:
        """
        List the customer's orders, optionally filtered by status.

        Raises:
            PlatterAPIError: If the request fails.
        """
        ...

    async def list_restaurant_orders(
        self, status: OrderStatus | None = None
    ) -> list[OrderSchema]:
        """
        List orders of the restaurant owned by the current user.

        Raises:
            PlatterAuthError: If the user is not a restaurant owner.
        """
        ...

    async def get_order(self, order_id: int) -> OrderSchema:
        """
        Get a single order.

        Raises:
            PlatterAPIError: If the order is not found or not visible.
        """
        ...

    async def update_order_status(self, order_id: int, status: OrderStatus) -> OrderSchema:
        """
        Advance an order to its next status (restaurant owner only).

        Raises:
            PlatterAuthError: If the user does not own the restaurant.
            PlatterAPIError: If the transition is rejected.
        """
        ...
