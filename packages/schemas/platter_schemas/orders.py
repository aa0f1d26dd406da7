"""Order schemas - placement requests, order data, and the fulfillment flow."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from platter_schemas.cart import MAX_QUANTITY
from platter_schemas.customizations import Customizations

# =============================================================================
# Enums
# =============================================================================


class OrderStatus(str, Enum):
    """Order fulfillment status."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    """How the customer intends to pay."""

    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"


class PaymentStatus(str, Enum):
    """Payment processing status."""

    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


# =============================================================================
# Fulfillment flow
# =============================================================================

# Linear forward sequence; no stage may be skipped.
ORDER_STATUS_FLOW: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY_FOR_PICKUP,
    OrderStatus.READY_FOR_PICKUP: OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY: OrderStatus.DELIVERED,
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Cancellation is only possible before the restaurant confirms.
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING})


def next_status(status: OrderStatus | str) -> OrderStatus | None:
    """Next status in the forward flow, or None for terminal states."""
    return ORDER_STATUS_FLOW.get(OrderStatus(status))


def is_terminal(status: OrderStatus | str) -> bool:
    """Check if no further transition is possible."""
    return OrderStatus(status) in TERMINAL_STATUSES


def allowed_transitions(status: OrderStatus | str) -> frozenset[OrderStatus]:
    """All statuses reachable in one step from the given status."""
    current = OrderStatus(status)
    allowed: set[OrderStatus] = set()
    forward = ORDER_STATUS_FLOW.get(current)
    if forward is not None:
        allowed.add(forward)
    if current in CANCELLABLE_STATUSES:
        allowed.add(OrderStatus.CANCELLED)
    return frozenset(allowed)


# =============================================================================
# Placement
# =============================================================================


class OrderItemRequest(BaseModel):
    """A single item in an order creation request."""

    menu_item_id: int
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)
    customizations: Customizations = Field(default_factory=dict)


class OrderCreateRequest(BaseModel):
    """Request body for POST /api/orders - one per restaurant."""

    restaurant_id: int
    address_id: int
    items: list[OrderItemRequest] = Field(..., min_length=1)
    payment_method: PaymentMethod
    delivery_instructions: str = Field(default="", max_length=500)
    subtotal: Decimal | None = Field(
        default=None,
        description="Client-side estimate; the server recomputes prices",
    )


# =============================================================================
# Order data
# =============================================================================


class OrderItemSchema(BaseModel):
    """A line item in an order (snapshot at order time)."""

    id: int
    menu_item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    customizations: Customizations = Field(default_factory=dict)
    line_total: Decimal


class OrderSchema(BaseModel):
    """A placed order."""

    id: int
    order_number: str
    restaurant_id: int
    restaurant_name: str = ""
    address_id: int
    items: list[OrderItemSchema] = Field(default_factory=list)
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    discount: Decimal = Decimal("0.00")
    total: Decimal
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    delivery_instructions: str = ""
    placed_at: datetime
    confirmed_at: datetime | None = None
    prepared_at: datetime | None = None
    picked_up_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def next_status(self) -> OrderStatus | None:
        return next_status(self.status)


class OrderResponse(BaseModel):
    """Response wrapping a single order."""

    order: OrderSchema


class OrderListResponse(BaseModel):
    """Response for GET /api/orders and GET /api/orders/restaurant."""

    orders: list[OrderSchema]


class OrderStatusUpdate(BaseModel):
    """Request body for PUT /api/orders/{id}/status."""

    status: OrderStatus


# =============================================================================
# Addresses (read-only)
# =============================================================================


class AddressSchema(BaseModel):
    """A saved delivery address."""

    id: int
    label: str = ""
    address: str
    city: str = ""
    pincode: str = ""
    is_default: bool = False


class AddressListResponse(BaseModel):
    """Response for GET /api/users/addresses."""

    addresses: list[AddressSchema]
