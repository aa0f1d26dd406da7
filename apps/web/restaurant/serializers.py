"""
Pydantic schemas and model serializers for menu and order API responses.

Cart, favorite and order wire shapes live in platter_schemas so the client
validates exactly what the server emits; this module maps models onto them.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from platter_schemas import (
    CustomizationGroup as CustomizationGroupSchema,
    CustomizationKind,
    CustomizationOption as CustomizationOptionSchema,
    OrderItemSchema,
    OrderSchema,
    RemoteCategory,
    RemoteMenuItem,
    RemoteRestaurant,
    parse_customizations,
)

from apps.web.restaurant.models import (
    CustomizationGroup,
    MenuCategory,
    MenuItem,
    Order,
    OrderItem,
    Restaurant,
)

# =============================================================================
# Menu Structure
# =============================================================================


class RestaurantSchema(BaseModel):
    """Restaurant summary shown above its menu."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    cuisine: str
    delivery_fee: Decimal
    delivery_time: int


class MenuCategorySchema(BaseModel):
    """A menu category with its items."""

    id: int
    name: str
    description: str
    items: list[RemoteMenuItem] = Field(default_factory=list)


class MenuResponse(BaseModel):
    """Response for GET /api/restaurants/{id}/menu."""

    restaurant: RestaurantSchema
    categories: list[MenuCategorySchema]


def serialize_customization_group(group: CustomizationGroup) -> CustomizationGroupSchema:
    """Serialize a CustomizationGroup model with its options."""
    return CustomizationGroupSchema(
        name=group.name,
        kind=CustomizationKind(group.kind),
        required=group.required,
        options=[
            CustomizationOptionSchema(name=option.name, price=option.price)
            for option in group.options.all()
        ],
    )


def serialize_restaurant_summary(restaurant: Restaurant) -> RemoteRestaurant:
    return RemoteRestaurant(id=restaurant.pk, name=restaurant.name)


def serialize_menu_item(item: MenuItem) -> RemoteMenuItem:
    """
    Serialize a MenuItem with its category, restaurant and customizations.

    This is the nested shape embedded in cart and favorite entries.
    """
    category = item.category
    return RemoteMenuItem(
        id=item.pk,
        name=item.name,
        description=item.description,
        price=item.price,
        is_veg=item.is_veg,
        is_popular=item.is_popular,
        is_available=item.is_available,
        category=RemoteCategory(
            id=category.pk,
            name=category.name,
            restaurant_id=category.restaurant_id,
            restaurant=serialize_restaurant_summary(category.restaurant),
        ),
        customization_groups=[
            serialize_customization_group(group)
            for group in item.customization_groups.all()
        ],
    )


def serialize_category(category: MenuCategory) -> MenuCategorySchema:
    """Serialize a MenuCategory with its items."""
    return MenuCategorySchema(
        id=category.pk,
        name=category.name,
        description=category.description,
        items=[serialize_menu_item(item) for item in category.items.all()],
    )


# =============================================================================
# Orders
# =============================================================================


def serialize_order_item(item: OrderItem) -> OrderItemSchema:
    return OrderItemSchema(
        id=item.pk,
        menu_item_id=item.menu_item_id,
        name=item.item_name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        customizations=parse_customizations(item.customizations),
        line_total=item.line_total,
    )


def serialize_order(order: Order) -> OrderSchema:
    """Serialize an Order with its line items."""
    return OrderSchema(
        id=order.pk,
        order_number=order.order_number,
        restaurant_id=order.restaurant_id,
        restaurant_name=order.restaurant.name,
        address_id=order.address_id,
        items=[serialize_order_item(item) for item in order.items.all()],
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        tax=order.tax,
        discount=order.discount,
        total=order.total,
        status=order.status,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        delivery_instructions=order.delivery_instructions,
        placed_at=order.placed_at,
        confirmed_at=order.confirmed_at,
        prepared_at=order.prepared_at,
        picked_up_at=order.picked_up_at,
        delivered_at=order.delivered_at,
        cancelled_at=order.cancelled_at,
    )
