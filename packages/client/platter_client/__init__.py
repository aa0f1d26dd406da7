"""Platter client - local cart/favorites store, sync engine and order composer."""

from platter_client.adapters import (
    HttpPlatterService,
    InMemoryPlatterService,
    PlatterService,
    get_service,
)
from platter_client.composer import (
    GroupOutcome,
    OrderComposer,
    PlacementResult,
    pick_address,
)
from platter_client.config import ClientConfig
from platter_client.events import CART_UPDATED, FAVORITES_UPDATED, EventBus
from platter_client.exceptions import (
    AddressRequiredError,
    EmptyCartError,
    PlatterAPIError,
    PlatterAuthError,
    PlatterError,
    SyncError,
)
from platter_client.store import (
    Collection,
    FileBackend,
    LocalStore,
    MemoryBackend,
    StorageBackend,
)
from platter_client.sync import (
    CheckoutSnapshot,
    MutationResult,
    SyncEngine,
    SyncResult,
    group_lines,
)

__all__ = [
    # Adapters
    "HttpPlatterService",
    "InMemoryPlatterService",
    "PlatterService",
    "get_service",
    # Local store
    "CART_UPDATED",
    "FAVORITES_UPDATED",
    "Collection",
    "EventBus",
    "FileBackend",
    "LocalStore",
    "MemoryBackend",
    "StorageBackend",
    # Sync
    "CheckoutSnapshot",
    "MutationResult",
    "SyncEngine",
    "SyncResult",
    "group_lines",
    # Orders
    "GroupOutcome",
    "OrderComposer",
    "PlacementResult",
    "pick_address",
    # Config & errors
    "AddressRequiredError",
    "ClientConfig",
    "EmptyCartError",
    "PlatterAPIError",
    "PlatterAuthError",
    "PlatterError",
    "SyncError",
]
