"""In-memory service adapter for development and testing."""

import asyncio
import itertools
from datetime import UTC, datetime
from decimal import Decimal

from platter_schemas import (
    MAX_QUANTITY,
    AddressSchema,
    CartItemCreate,
    CustomizationGroup,
    CustomizationKind,
    CustomizationOption,
    OrderCreateRequest,
    OrderItemSchema,
    OrderSchema,
    OrderStatus,
    PaymentStatus,
    RemoteCartItem,
    RemoteCategory,
    RemoteFavorite,
    RemoteMenuItem,
    RemoteRestaurant,
    allowed_transitions,
    customization_key,
    customization_price,
)

from platter_client.exceptions import PlatterAPIError

TAX_RATE = Decimal("0.05")


def _menu_item(
    item_id: int,
    name: str,
    price: str,
    restaurant: RemoteRestaurant,
    category: str,
    is_veg: bool = True,
    groups: list[CustomizationGroup] | None = None,
) -> RemoteMenuItem:
    return RemoteMenuItem(
        id=item_id,
        name=name,
        price=Decimal(price),
        is_veg=is_veg,
        category=RemoteCategory(
            id=restaurant.id * 10,
            name=category,
            restaurant_id=restaurant.id,
            restaurant=restaurant,
        ),
        customization_groups=groups or [],
    )


def _default_menu() -> list[RemoteMenuItem]:
    """Generate the default test catalog: two restaurants, four items."""
    pizza_palace = RemoteRestaurant(id=1, name="Pizza Palace")
    burger_barn = RemoteRestaurant(id=2, name="Burger Barn")
    return [
        _menu_item(
            101,
            "Margherita Pizza",
            "350",
            pizza_palace,
            "Pizza",
            groups=[
                CustomizationGroup(
                    name="Size",
                    kind=CustomizationKind.SINGLE,
                    required=True,
                    options=[
                        CustomizationOption(name="Small", price=Decimal("0")),
                        CustomizationOption(name="Medium", price=Decimal("100")),
                        CustomizationOption(name="Large", price=Decimal("200")),
                    ],
                ),
                CustomizationGroup(
                    name="Extra Toppings",
                    kind=CustomizationKind.MULTI,
                    options=[
                        CustomizationOption(name="Extra Cheese", price=Decimal("50")),
                        CustomizationOption(name="Mushrooms", price=Decimal("40")),
                        CustomizationOption(name="Olives", price=Decimal("30")),
                    ],
                ),
            ],
        ),
        _menu_item(102, "Garlic Bread", "120", pizza_palace, "Sides"),
        _menu_item(201, "Classic Burger", "180", burger_barn, "Burgers", is_veg=False),
        _menu_item(202, "Fries", "90", burger_barn, "Sides"),
    ]


class InMemoryPlatterService:
    """
    In-memory Platter service for development and testing.

    Mirrors the server's cart merge rule and order pricing, and provides
    configurable failures for exercising offline and partial-failure paths.

    Usage:
        service = InMemoryPlatterService(
            failing_restaurants={2},  # orders for restaurant 2 are rejected
        )
        service.offline = True  # every call raises PlatterAPIError
    """

    def __init__(
        self,
        menu: list[RemoteMenuItem] | None = None,
        addresses: list[AddressSchema] | None = None,
        delivery_fees: dict[int, Decimal] | None = None,
        failing_restaurants: set[int] | None = None,
        offline: bool = False,
        api_delay_ms: int = 0,
    ) -> None:
        """
        Initialize the in-memory service.

        Args:
            menu: Menu items to serve. Uses the default catalog if None.
            addresses: Saved addresses. Defaults to one default address.
            delivery_fees: Delivery fee per restaurant ID (default 0).
            failing_restaurants: Restaurant IDs whose order creation fails.
            offline: If True, every call fails.
            api_delay_ms: Simulated API delay in milliseconds.
        """
        menu_items = menu if menu is not None else _default_menu()
        self.menu: dict[int, RemoteMenuItem] = {item.id: item for item in menu_items}
        self.addresses = (
            addresses
            if addresses is not None
            else [AddressSchema(id=1, label="Home", address="12 Main Street", is_default=True)]
        )
        self.delivery_fees = delivery_fees or {}
        self.failing_restaurants = failing_restaurants or set()
        self.offline = offline
        self._api_delay_ms = api_delay_ms

        self.cart: dict[int, RemoteCartItem] = {}
        self.favorites: dict[int, RemoteFavorite] = {}
        self.orders: dict[int, OrderSchema] = {}
        self.idempotency_keys: dict[str, int] = {}
        self.calls: list[str] = []

        self._ids = itertools.count(1)

    async def _call(self, name: str) -> None:
        """Record a call and apply simulated latency/outage."""
        self.calls.append(name)
        if self._api_delay_ms > 0:
            await asyncio.sleep(self._api_delay_ms / 1000)
        if self.offline:
            raise PlatterAPIError(f"Service unavailable ({name})", status_code=503)

    def _get_menu_item(self, menu_item_id: int) -> RemoteMenuItem:
        try:
            return self.menu[menu_item_id]
        except KeyError as e:
            raise PlatterAPIError(
                f"Menu item {menu_item_id} not found", status_code=400
            ) from e

    # =========================================================================
    # Cart
    # =========================================================================

    async def get_cart(self) -> list[RemoteCartItem]:
        await self._call("get_cart")
        return list(self.cart.values())

    async def add_cart_item(self, item: CartItemCreate) -> RemoteCartItem:
        await self._call("add_cart_item")
        menu_item = self._get_menu_item(item.menu_item_id)

        key = customization_key(item.customizations)
        for existing in self.cart.values():
            if (
                existing.menu_item_id == item.menu_item_id
                and customization_key(existing.customizations) == key
            ):
                existing.quantity = min(existing.quantity + item.quantity, MAX_QUANTITY)
                return existing

        cart_item = RemoteCartItem(
            id=next(self._ids),
            menu_item_id=item.menu_item_id,
            quantity=item.quantity,
            customizations=item.customizations,
            menu_item=menu_item,
            created_at=datetime.now(UTC),
        )
        self.cart[cart_item.id] = cart_item
        return cart_item

    async def update_cart_item(self, cart_item_id: int, quantity: int) -> RemoteCartItem:
        await self._call("update_cart_item")
        if cart_item_id not in self.cart:
            raise PlatterAPIError("Cart item not found", status_code=404)
        self.cart[cart_item_id].quantity = quantity
        return self.cart[cart_item_id]

    async def remove_cart_item(self, cart_item_id: int) -> None:
        await self._call("remove_cart_item")
        if self.cart.pop(cart_item_id, None) is None:
            raise PlatterAPIError("Cart item not found", status_code=404)

    async def clear_cart(self) -> None:
        await self._call("clear_cart")
        self.cart.clear()

    # =========================================================================
    # Favorites
    # =========================================================================

    async def get_favorites(self) -> list[RemoteFavorite]:
        await self._call("get_favorites")
        return list(self.favorites.values())

    async def add_favorite(self, menu_item_id: int) -> RemoteFavorite:
        await self._call("add_favorite")
        for favorite in self.favorites.values():
            if favorite.menu_item_id == menu_item_id:
                return favorite

        favorite = RemoteFavorite(
            id=next(self._ids),
            menu_item_id=menu_item_id,
            menu_item=self._get_menu_item(menu_item_id),
            created_at=datetime.now(UTC),
        )
        self.favorites[favorite.id] = favorite
        return favorite

    async def remove_favorite(self, favorite_id: int) -> None:
        await self._call("remove_favorite")
        if self.favorites.pop(favorite_id, None) is None:
            raise PlatterAPIError("Favorite not found", status_code=404)

    # =========================================================================
    # Addresses
    # =========================================================================

    async def get_addresses(self) -> list[AddressSchema]:
        await self._call("get_addresses")
        return list(self.addresses)

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self, order: OrderCreateRequest, idempotency_key: str | None = None
    ) -> OrderSchema:
        await self._call("create_order")

        if idempotency_key and idempotency_key in self.idempotency_keys:
            return self.orders[self.idempotency_keys[idempotency_key]]

        if order.restaurant_id in self.failing_restaurants:
            raise PlatterAPIError(
                f"Restaurant {order.restaurant_id} is not accepting orders",
                status_code=400,
            )

        items: list[OrderItemSchema] = []
        restaurant_name = ""
        for request_item in order.items:
            menu_item = self._get_menu_item(request_item.menu_item_id)
            restaurant_name = menu_item.category.restaurant.name
            unit_price = menu_item.price + customization_price(
                request_item.customizations
            )
            items.append(
                OrderItemSchema(
                    id=next(self._ids),
                    menu_item_id=menu_item.id,
                    name=menu_item.name,
                    quantity=request_item.quantity,
                    unit_price=unit_price,
                    customizations=request_item.customizations,
                    line_total=unit_price * request_item.quantity,
                )
            )

        subtotal = sum((item.line_total for item in items), Decimal("0"))
        delivery_fee = self.delivery_fees.get(order.restaurant_id, Decimal("0"))
        tax = (subtotal * TAX_RATE).quantize(Decimal("0.01"))
        order_id = next(self._ids)

        created = OrderSchema(
            id=order_id,
            order_number=f"ORD-MEM-{order_id:06d}",
            restaurant_id=order.restaurant_id,
            restaurant_name=restaurant_name,
            address_id=order.address_id,
            items=items,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            tax=tax,
            total=subtotal + delivery_fee + tax,
            status=OrderStatus.PENDING,
            payment_method=order.payment_method,
            payment_status=PaymentStatus.PENDING,
            delivery_instructions=order.delivery_instructions,
            placed_at=datetime.now(UTC),
        )
        self.orders[order_id] = created
        if idempotency_key:
            self.idempotency_keys[idempotency_key] = order_id
        return created

    async def list_orders(self, status: OrderStatus | None = None) -> list[OrderSchema]:
        await self._call("list_orders")
        return [o for o in self.orders.values() if status is None or o.status == status]

    async def list_restaurant_orders(
        self, status: OrderStatus | None = None
    ) -> list[OrderSchema]:
        await self._call("list_restaurant_orders")
        return [o for o in self.orders.values() if status is None or o.status == status]

    async def get_order(self, order_id: int) -> OrderSchema:
        await self._call("get_order")
        if order_id not in self.orders:
            raise PlatterAPIError(f"Order {order_id} not found", status_code=404)
        return self.orders[order_id]

    async def update_order_status(self, order_id: int, status: OrderStatus) -> OrderSchema:
        await self._call("update_order_status")
        order = await self.get_order(order_id)
        if status not in allowed_transitions(order.status):
            raise PlatterAPIError(
                f"Cannot move order from {order.status.value} to {status.value}",
                status_code=409,
            )

        now = datetime.now(UTC)
        update: dict[str, object] = {"status": status}
        if status == OrderStatus.CONFIRMED and order.confirmed_at is None:
            update["confirmed_at"] = now
        if status == OrderStatus.PREPARING and order.prepared_at is None:
            update["prepared_at"] = now
        if status == OrderStatus.OUT_FOR_DELIVERY and order.picked_up_at is None:
            update["picked_up_at"] = now
        if status == OrderStatus.DELIVERED and order.delivered_at is None:
            update["delivered_at"] = now
        if status == OrderStatus.CANCELLED and order.cancelled_at is None:
            update["cancelled_at"] = now

        self.orders[order_id] = order.model_copy(update=update)
        return self.orders[order_id]
