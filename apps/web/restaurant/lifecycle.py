"""
Order lifecycle - the server-side fulfillment state machine.

PENDING -> CONFIRMED -> PREPARING -> READY_FOR_PICKUP -> OUT_FOR_DELIVERY
-> DELIVERED, with PENDING -> CANCELLED as the only cancellation.
DELIVERED and CANCELLED are terminal.

The flow table itself lives in platter_schemas.orders so the client can
show the same "next step" the server will accept.
"""

import logging
from typing import Any

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from platter_schemas import OrderStatus as FlowStatus
from platter_schemas import allowed_transitions, is_terminal

from apps.web.restaurant.exceptions import (
    InvalidTransitionError,
    OrderPermissionError,
    OrderTerminalError,
)
from apps.web.restaurant.models import Order, OrderStatus

logger = logging.getLogger(__name__)

# Timestamp recorded when an order enters a status
STATUS_TIMESTAMPS: dict[str, str] = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.PREPARING: "prepared_at",
    OrderStatus.OUT_FOR_DELIVERY: "picked_up_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


def transition_order(order_id: int, actor: Any, target: str) -> Order:
    """
    Move an order to a new status.

    The order row is locked for the duration of the check and update, so
    two concurrent transitions cannot both apply.

    Args:
        order_id: Order primary key.
        actor: User requesting the change; must own the order's restaurant.
        target: Requested status value.

    Returns:
        The updated order.

    Raises:
        Order.DoesNotExist: If the order does not exist.
        OrderPermissionError: If the actor does not own the restaurant.
        OrderTerminalError: If the order is already DELIVERED or CANCELLED.
        InvalidTransitionError: If the target is not the next status or an
            allowed cancellation.
    """
    with transaction.atomic():
        order = (
            Order.objects.select_for_update()
            .select_related("restaurant")
            .get(pk=order_id)
        )
        current = order.status

        if order.restaurant.owner_id != getattr(actor, "pk", None):
            raise OrderPermissionError(
                "Only the restaurant owner can update this order",
                order_id=order_id,
                current=current,
                target=target,
            )

        if is_terminal(current):
            raise OrderTerminalError(
                f"Order is already {current.lower()}",
                order_id=order_id,
                current=current,
                target=target,
            )

        try:
            reachable = FlowStatus(target) in allowed_transitions(current)
        except ValueError:
            reachable = False
        if not reachable:
            raise InvalidTransitionError(
                f"Cannot move order from {current} to {target}",
                order_id=order_id,
                current=current,
                target=target,
            )

        order.status = target
        update_fields = ["status", "updated_at"]

        timestamp_field = STATUS_TIMESTAMPS.get(target)
        if timestamp_field and getattr(order, timestamp_field) is None:
            setattr(order, timestamp_field, timezone.now())
            update_fields.append(timestamp_field)

        order.save(update_fields=update_fields)

    logger.info("Order %s moved from %s to %s", order.order_number, current, target)
    return order


def filter_by_status(queryset: QuerySet[Order], status: str | None) -> QuerySet[Order]:
    """Restrict orders to one status. A missing status keeps everything."""
    if not status:
        return queryset
    return queryset.filter(status=status)
