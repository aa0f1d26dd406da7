"""Order placement and lifecycle exceptions."""


class OrderError(Exception):
    """Base exception for order errors."""

    def __init__(self, message: str, order_id: int | None = None) -> None:
        self.message = message
        self.order_id = order_id
        super().__init__(message)


class OrderValidationError(OrderError):
    """Order request references unknown, unavailable or mispriced items."""

    def __init__(self, message: str, details: list[tuple[str, str]]) -> None:
        super().__init__(message)
        # (field, message) pairs
        self.details = details


class OrderTransitionError(OrderError):
    """A status change was rejected. The order is left unchanged."""

    def __init__(
        self,
        message: str,
        order_id: int | None = None,
        current: str | None = None,
        target: str | None = None,
    ) -> None:
        super().__init__(message, order_id)
        self.current = current
        self.target = target


class OrderPermissionError(OrderTransitionError):
    """The actor does not own the order's restaurant."""


class OrderTerminalError(OrderTransitionError):
    """The order is DELIVERED or CANCELLED and can no longer change."""


class InvalidTransitionError(OrderTransitionError):
    """The target status is not reachable from the current one."""
