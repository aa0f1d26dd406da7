"""HTTP service adapter - talks to the Platter REST API over httpx."""

import asyncio
import logging
import uuid
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from platter_schemas import (
    AddressListResponse,
    AddressSchema,
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
    FavoriteCreate,
    FavoriteResponse,
    FavoritesResponse,
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
    OrderSchema,
    OrderStatus,
    OrderStatusUpdate,
    RemoteCartItem,
    RemoteFavorite,
)

from platter_client.config import DEFAULT_API_URL, ClientConfig
from platter_client.exceptions import PlatterAPIError, PlatterAuthError

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


class HttpPlatterService:
    """
    Platter API adapter implementing the PlatterService protocol.

    Authentication tokens are issued elsewhere; this adapter only attaches
    the current token as a bearer header.

    Transport errors and 5xx responses are retried with exponential
    backoff for idempotent calls. Cart and favorite additions are not
    retried since a replay would add the item twice; order creation is
    retried because it carries an Idempotency-Key.
    """

    MAX_RETRIES = 3
    RETRY_BACKOFF = 1.0  # seconds, doubled per attempt

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_retries: int | None = None,
        retry_backoff: float | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            base_url: API root, e.g. "https://platter.example/api".
            token: Bearer token for the current session (None = anonymous).
            http_client: Optional HTTP client for dependency injection (testing).
            timeout: Request timeout in seconds when we create the client.
            max_retries: Attempts per retried request.
            retry_backoff: Base backoff in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        self._max_retries = max_retries or self.MAX_RETRIES
        self._retry_backoff = (
            self.RETRY_BACKOFF if retry_backoff is None else retry_backoff
        )

    @classmethod
    def from_config(
        cls, config: ClientConfig, token: str | None = None
    ) -> "HttpPlatterService":
        """Build an adapter from client configuration."""
        return cls(base_url=config.api_url, token=token, timeout=config.timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_token(self, token: str | None) -> None:
        """Switch the session token (None after logout)."""
        self._token = token

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # HTTP Helpers
    # =========================================================================

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Extract the server's error message from a response."""
        try:
            data = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"HTTP {response.status_code}"

    async def _request(
        self,
        method: str,
        path: str,
        retry: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Path relative to the API root, e.g. "/cart".
            retry: Whether transport errors and 5xx responses are retried.
            **kwargs: Additional arguments passed to httpx.

        Returns:
            HTTP response with a 2xx status.

        Raises:
            PlatterAuthError: On 401/403.
            PlatterAPIError: On other 4xx, or once retries are exhausted.
        """
        headers = {
            "Accept": "application/json",
            **kwargs.pop("headers", {}),
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        url = f"{self._base_url}{path}"
        attempts = self._max_retries if retry else 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                response = await self._client.request(
                    method, url, headers=headers, **kwargs
                )
            except httpx.RequestError as e:
                last_error = e
            else:
                if response.status_code in (401, 403):
                    raise PlatterAuthError(
                        self._error_message(response),
                        status_code=response.status_code,
                        response_body=response.text,
                    )
                if response.status_code >= 500:
                    last_error = PlatterAPIError(
                        f"{method} {path} failed: {self._error_message(response)}",
                        status_code=response.status_code,
                        response_body=response.text,
                    )
                elif response.is_error:
                    raise PlatterAPIError(
                        self._error_message(response),
                        status_code=response.status_code,
                        response_body=response.text,
                    )
                else:
                    return response

            if attempt < attempts - 1:
                backoff = self._retry_backoff * (2**attempt)
                logger.warning(
                    "Platter API %s %s failed (attempt %d/%d), retry in %.1fs: %s",
                    method,
                    path,
                    attempt + 1,
                    attempts,
                    backoff,
                    str(last_error),
                )
                await asyncio.sleep(backoff)

        if isinstance(last_error, PlatterAPIError):
            raise last_error
        raise PlatterAPIError(
            f"{method} {path} failed after {attempts} attempts: {last_error}"
        ) from last_error

    @staticmethod
    def _parse(response: httpx.Response, model: type[_M]) -> _M:
        """Validate a response body against a schema."""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise PlatterAPIError(
                f"Unexpected response from {response.request.url.path}: {e}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    # =========================================================================
    # Cart
    # =========================================================================

    async def get_cart(self) -> list[RemoteCartItem]:
        response = await self._request("GET", "/cart")
        return self._parse(response, CartResponse).cart_items

    async def add_cart_item(self, item: CartItemCreate) -> RemoteCartItem:
        response = await self._request(
            "POST", "/cart", retry=False, json=item.model_dump(mode="json")
        )
        return self._parse(response, CartItemResponse).cart_item

    async def update_cart_item(self, cart_item_id: int, quantity: int) -> RemoteCartItem:
        body = CartItemUpdate(quantity=quantity)
        response = await self._request(
            "PUT", f"/cart/{cart_item_id}", json=body.model_dump(mode="json")
        )
        return self._parse(response, CartItemResponse).cart_item

    async def remove_cart_item(self, cart_item_id: int) -> None:
        await self._request("DELETE", f"/cart/{cart_item_id}")

    async def clear_cart(self) -> None:
        await self._request("DELETE", "/cart")

    # =========================================================================
    # Favorites
    # =========================================================================

    async def get_favorites(self) -> list[RemoteFavorite]:
        response = await self._request("GET", "/favorites")
        return self._parse(response, FavoritesResponse).favorites

    async def add_favorite(self, menu_item_id: int) -> RemoteFavorite:
        body = FavoriteCreate(menu_item_id=menu_item_id)
        response = await self._request(
            "POST", "/favorites", retry=False, json=body.model_dump(mode="json")
        )
        return self._parse(response, FavoriteResponse).favorite

    async def remove_favorite(self, favorite_id: int) -> None:
        await self._request("DELETE", f"/favorites/{favorite_id}")

    # =========================================================================
    # Addresses
    # =========================================================================

    async def get_addresses(self) -> list[AddressSchema]:
        response = await self._request("GET", "/users/addresses")
        return self._parse(response, AddressListResponse).addresses

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self, order: OrderCreateRequest, idempotency_key: str | None = None
    ) -> OrderSchema:
        key = idempotency_key or uuid.uuid4().hex
        response = await self._request(
            "POST",
            "/orders",
            json=order.model_dump(mode="json"),
            headers={"Idempotency-Key": key},
        )
        return self._parse(response, OrderResponse).order

    async def list_orders(self, status: OrderStatus | None = None) -> list[OrderSchema]:
        params = {"status": status.value} if status else {}
        response = await self._request("GET", "/orders", params=params)
        return self._parse(response, OrderListResponse).orders

    async def list_restaurant_orders(
        self, status: OrderStatus | None = None
    ) -> list[OrderSchema]:
        params = {"status": status.value} if status else {}
        response = await self._request("GET", "/orders/restaurant", params=params)
        return self._parse(response, OrderListResponse).orders

    async def get_order(self, order_id: int) -> OrderSchema:
        response = await self._request("GET", f"/orders/{order_id}")
        return self._parse(response, OrderResponse).order

    async def update_order_status(self, order_id: int, status: OrderStatus) -> OrderSchema:
        body = OrderStatusUpdate(status=status)
        response = await self._request(
            "PUT",
            f"/orders/{order_id}/status",
            retry=False,
            json=body.model_dump(mode="json"),
        )
        return self._parse(response, OrderResponse).order
