"""Service adapters - implementations of the remote Platter API."""

from typing import Any

from platter_client.adapters.base import PlatterService
from platter_client.adapters.http import HttpPlatterService
from platter_client.adapters.memory import InMemoryPlatterService

BACKENDS = ("http", "memory")


def get_service(backend: str = "http", **kwargs: Any) -> PlatterService:
    """
    Get a service adapter for the given backend.

    Args:
        backend: "http" for the REST API, "memory" for the in-memory fake.
        **kwargs: Arguments passed to the adapter constructor
            (e.g. base_url=..., token=... for HttpPlatterService).

    Raises:
        ValueError: If the backend is not supported.

    Example:
        service = get_service("http", token=session_token)
        engine = SyncEngine(store, service)
    """
    if backend == "http":
        return HttpPlatterService(**kwargs)
    elif backend == "memory":
        return InMemoryPlatterService(**kwargs)
    raise ValueError(
        f"Unsupported service backend: {backend}. Supported: {', '.join(BACKENDS)}"
    )


__all__ = [
    "HttpPlatterService",
    "InMemoryPlatterService",
    "PlatterService",
    "get_service",
]
