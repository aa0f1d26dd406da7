"""
Order placement service - prices and creates one order per restaurant.

Handles:
1. Validating items belong to the restaurant and are available
2. Validating customizations against the item's declared groups
3. Pricing from the database (client-sent prices are never trusted)
4. Creating the order and its items atomically
"""

import logging
import secrets
import time
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import transaction

from platter_schemas import (
    CustomizationKind,
    CustomizationOption,
    Customizations,
    MultiSelection,
    OrderCreateRequest,
    SingleSelection,
    customization_price,
    dump_customizations,
)

from apps.web.core.models import Address
from apps.web.restaurant.exceptions import OrderValidationError
from apps.web.restaurant.models import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Restaurant,
)

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("0.05")
CENT = Decimal("0.01")


def generate_order_number() -> str:
    """Generate a customer-facing order number: ORD-<millis>-<random>."""
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(5).upper()[:9]}"


def get_tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, "ORDER_TAX_RATE", DEFAULT_TAX_RATE)))


def resolve_customizations(
    menu_item: MenuItem, customizations: Customizations
) -> tuple[Customizations, list[str]]:
    """
    Check selections against the item's groups and reprice them.

    Returns:
        Tuple of (customizations with database prices, error messages).
    """
    errors: list[str] = []
    groups = {
        group.name: group
        for group in menu_item.customization_groups.prefetch_related("options")
    }
    resolved: Customizations = {}

    for group_name, selection in customizations.items():
        group = groups.get(group_name)
        if group is None:
            errors.append(f"'{group_name}' is not a customization of '{menu_item.name}'")
            continue

        options = {option.name: option for option in group.options.all()}
        expected_single = group.kind == CustomizationKind.SINGLE
        if expected_single != isinstance(selection, SingleSelection):
            kind = "one option" if expected_single else "a list of options"
            errors.append(f"'{group.name}' takes {kind}")
            continue

        names = selection.option_names()
        unknown = [name for name in names if name not in options]
        if unknown:
            errors.append(
                f"{', '.join(repr(n) for n in unknown)} not available for '{group.name}'"
            )
            continue

        if isinstance(selection, SingleSelection):
            option = options[selection.option.name]
            resolved[group_name] = SingleSelection(
                option=CustomizationOption(name=option.name, price=option.price)
            )
        else:
            resolved[group_name] = MultiSelection(
                options=[
                    CustomizationOption(name=o.name, price=options[o.name].price)
                    for o in selection.options
                ]
            )

    for group in groups.values():
        # Groups that failed validation above already have an error
        if not group.required or (group.name in customizations and group.name not in resolved):
            continue
        chosen = resolved.get(group.name)
        if chosen is None or not chosen.option_names():
            errors.append(f"'{group.name}' is required")

    return resolved, errors


def _validate_items(
    restaurant: Restaurant, order_request: OrderCreateRequest
) -> list[tuple[MenuItem, int, Customizations]]:
    """
    Validate every requested item against the restaurant's menu.

    Raises:
        OrderValidationError: With one detail per problem found.
    """
    details: list[tuple[str, str]] = []
    validated: list[tuple[MenuItem, int, Customizations]] = []

    for i, item in enumerate(order_request.items):
        field_prefix = f"items[{i}]"

        try:
            menu_item = MenuItem.objects.select_related("category").get(
                pk=item.menu_item_id,
                category__restaurant=restaurant,
            )
        except MenuItem.DoesNotExist:
            details.append((f"{field_prefix}.menu_item_id", "Item not found"))
            continue

        if not menu_item.is_available:
            details.append(
                (
                    f"{field_prefix}.menu_item_id",
                    f"'{menu_item.name}' is currently unavailable",
                )
            )
            continue

        resolved, errors = resolve_customizations(menu_item, item.customizations)
        details.extend((f"{field_prefix}.customizations", error) for error in errors)
        validated.append((menu_item, item.quantity, resolved))

    if details:
        raise OrderValidationError("Order validation failed", details=details)
    return validated


def create_order(customer: Any, order_request: OrderCreateRequest) -> Order:
    """
    Create an order for a single restaurant.

    Prices come from the menu: unit price is the item price plus the
    selected option prices; tax is ORDER_TAX_RATE of the subtotal; the
    delivery fee is the restaurant's.

    Args:
        customer: The ordering user.
        order_request: Validated order request.

    Returns:
        The created order with its items.

    Raises:
        OrderValidationError: If the restaurant, address, or any item is
            invalid.
    """
    try:
        restaurant = Restaurant.objects.get(pk=order_request.restaurant_id, is_active=True)
    except Restaurant.DoesNotExist as e:
        raise OrderValidationError(
            "Restaurant not found",
            details=[("restaurant_id", "Restaurant not found or not accepting orders")],
        ) from e

    try:
        address = Address.objects.get(pk=order_request.address_id, user=customer)
    except Address.DoesNotExist as e:
        raise OrderValidationError(
            "Address not found",
            details=[("address_id", "Address not found")],
        ) from e

    validated = _validate_items(restaurant, order_request)

    subtotal = Decimal("0")
    priced: list[tuple[MenuItem, int, Customizations, Decimal]] = []
    for menu_item, quantity, customizations in validated:
        unit_price = menu_item.price + customization_price(customizations)
        subtotal += unit_price * quantity
        priced.append((menu_item, quantity, customizations, unit_price))

    if (
        order_request.subtotal is not None
        and order_request.subtotal.quantize(CENT) != subtotal.quantize(CENT)
    ):
        # Client estimate is informational; the menu price wins
        logger.info(
            "Client subtotal %s differs from computed %s for restaurant %s",
            order_request.subtotal,
            subtotal,
            restaurant.pk,
        )

    delivery_fee = restaurant.delivery_fee
    tax = (subtotal * get_tax_rate()).quantize(CENT)
    total = subtotal + delivery_fee + tax

    with transaction.atomic():
        order = Order.objects.create(
            order_number=generate_order_number(),
            customer=customer,
            restaurant=restaurant,
            address=address,
            status=OrderStatus.PENDING,
            delivery_instructions=order_request.delivery_instructions,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            tax=tax,
            total=total,
            payment_method=order_request.payment_method.value,
            payment_status=PaymentStatus.PENDING,
        )

        for menu_item, quantity, customizations, unit_price in priced:
            OrderItem.objects.create(
                order=order,
                menu_item=menu_item,
                item_name=menu_item.name,
                quantity=quantity,
                unit_price=unit_price,
                customizations=dump_customizations(customizations),
                line_total=unit_price * quantity,
            )

    logger.info(
        "Created order %s for restaurant %s (total %s)",
        order.order_number,
        restaurant.pk,
        total,
    )
    return order
