"""Platter client exceptions."""


class PlatterError(Exception):
    """Base exception for Platter client errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PlatterAPIError(PlatterError):
    """API request to the Platter service failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class PlatterAuthError(PlatterAPIError):
    """The session token is missing, expired, or lacks permission."""


class SyncError(PlatterError):
    """A best-effort remote mirror of a local mutation failed."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class AddressRequiredError(PlatterError):
    """No delivery address is available for order placement."""


class EmptyCartError(PlatterError):
    """Order placement was requested with an empty cart."""
