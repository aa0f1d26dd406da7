"""
Order composer - turns the cart into one order per restaurant.

An order belongs to exactly one restaurant, so a cart spanning several
restaurants is split by restaurant and each group is submitted as its own
order. All submissions run concurrently and are joined before the cart is
touched.

Cart policy after placement:
- Every order created: the cart is cleared (locally and on the server).
- Some orders failed: created orders stand; their restaurants' lines leave
  the cart while the failed restaurants' lines stay for a retry.
"""

import asyncio
import logging
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from platter_schemas import (
    AddressSchema,
    CartLine,
    OrderCreateRequest,
    OrderItemRequest,
    OrderSchema,
    PaymentMethod,
)

from platter_client.adapters.base import PlatterService
from platter_client.exceptions import (
    AddressRequiredError,
    EmptyCartError,
    PlatterError,
)
from platter_client.sync import SyncEngine, SyncResult, group_lines

logger = logging.getLogger(__name__)


class GroupOutcome(BaseModel):
    """Result of submitting one restaurant's order."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    restaurant_id: int
    restaurant_name: str = ""
    request: OrderCreateRequest
    order: OrderSchema | None = None
    error: PlatterError | None = None

    @property
    def ok(self) -> bool:
        return self.order is not None


class PlacementResult(BaseModel):
    """Per-restaurant outcomes of a checkout."""

    outcomes: list[GroupOutcome]
    cart_sync: SyncResult | None = None

    @property
    def ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def orders(self) -> list[OrderSchema]:
        return [o.order for o in self.outcomes if o.order is not None]

    @property
    def failed(self) -> list[GroupOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def message(self) -> str:
        """Summary suitable for a toast."""
        if self.ok:
            count = len(self.outcomes)
            return f"{count} order{'s' if count != 1 else ''} placed successfully"
        failed = ", ".join(
            f"{o.restaurant_name or o.restaurant_id}: {o.error}" for o in self.failed
        )
        return (
            f"{len(self.orders)} of {len(self.outcomes)} orders placed. "
            f"Failed: {failed}"
        )


def pick_address(addresses: list[AddressSchema]) -> AddressSchema:
    """
    Choose the delivery address: the default one, else the first.

    Raises:
        AddressRequiredError: If there are no saved addresses.
    """
    if not addresses:
        raise AddressRequiredError("Please add a delivery address in your profile")
    return next((a for a in addresses if a.is_default), addresses[0])


class OrderComposer:
    """
    Builds and submits per-restaurant orders from the cart.

    Usage:
        composer = OrderComposer(engine, service)
        result = await composer.place_orders(PaymentMethod.CASH)
        toast(result.message)
    """

    def __init__(self, engine: SyncEngine, service: PlatterService) -> None:
        self.engine = engine
        self.service = service

    @staticmethod
    def compose(
        lines: list[CartLine],
        address_id: int,
        payment_method: PaymentMethod,
        delivery_instructions: str = "",
    ) -> list[OrderCreateRequest]:
        """Build one order request per restaurant, in first-seen order."""
        requests: list[OrderCreateRequest] = []
        for restaurant_id, group in group_lines(lines).items():
            requests.append(
                OrderCreateRequest(
                    restaurant_id=restaurant_id,
                    address_id=address_id,
                    items=[
                        OrderItemRequest(
                            menu_item_id=line.item_id,
                            quantity=line.quantity,
                            customizations=line.customizations,
                        )
                        for line in group
                    ],
                    payment_method=payment_method,
                    delivery_instructions=delivery_instructions,
                    subtotal=sum((line.line_total for line in group), Decimal("0")),
                )
            )
        return requests

    async def _submit(self, request: OrderCreateRequest) -> OrderSchema:
        return await self.service.create_order(
            request, idempotency_key=uuid.uuid4().hex
        )

    async def place_orders(
        self,
        payment_method: PaymentMethod,
        delivery_instructions: str = "",
        lines: list[CartLine] | None = None,
    ) -> PlacementResult:
        """
        Place one order per restaurant in the cart.

        Args:
            payment_method: Payment method for every order.
            delivery_instructions: Free text passed to every restaurant.
            lines: Cart lines to order (defaults to the current cart, e.g.
                a CheckoutSnapshot's refreshed lines).

        Raises:
            EmptyCartError: If there is nothing to order.
            AddressRequiredError: If no delivery address is saved.
            PlatterAPIError: If the addresses cannot be loaded.
        """
        lines = self.engine.get_cart() if lines is None else lines
        if not lines:
            raise EmptyCartError("Your cart is empty")

        address = pick_address(await self.service.get_addresses())
        requests = self.compose(
            lines, address.id, payment_method, delivery_instructions
        )
        names = {line.restaurant_id: line.restaurant_name for line in lines}

        logger.info(
            "Placing %d orders for address %s", len(requests), address.id
        )
        results = await asyncio.gather(
            *(self._submit(request) for request in requests),
            return_exceptions=True,
        )

        outcomes: list[GroupOutcome] = []
        for request, result in zip(requests, results, strict=True):
            outcome = GroupOutcome(
                restaurant_id=request.restaurant_id,
                restaurant_name=names.get(request.restaurant_id, ""),
                request=request,
            )
            if isinstance(result, PlatterError):
                logger.warning(
                    "Order for restaurant %s failed: %s", request.restaurant_id, result
                )
                outcome.error = result
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome.order = result
            outcomes.append(outcome)

        placement = PlacementResult(outcomes=outcomes)
        placement.cart_sync = await self._apply_cart_policy(placement, lines)
        return placement

    async def _apply_cart_policy(
        self, placement: PlacementResult, lines: list[CartLine]
    ) -> SyncResult | None:
        """
        Drop ordered lines from the cart, keep the failed restaurants' lines.

        Lines that were not part of this placement (a subset was ordered,
        or lines were added while the orders were in flight) stay. The whole
        cart is cleared only when every stored line was ordered.
        """
        placed = {o.restaurant_id for o in placement.outcomes if o.ok}
        if not placed:
            return None

        ordered = [line for line in lines if line.restaurant_id in placed]
        ordered_ids = {line.id for line in ordered}
        if placement.ok and {line.id for line in self.engine.get_cart()} <= ordered_ids:
            return (await self.engine.clear_cart()).sync

        sync: SyncResult | None = None
        for line in ordered:
            result = await self.engine.remove_from_cart(line.id)
            if result.sync and not result.sync.ok:
                sync = result.sync
        return sync or SyncResult.success()
