"""
Local store - durable key-value cache for the cart and favorites.

The store is usable before login: it is the source of truth for what the
UI renders, and is overwritten from the server when a session starts.

Every collection is a JSON array under its own key. Reads fail closed:
missing or corrupt data reads as an empty collection and never raises.
"""

import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from platter_schemas import CartLine, FavoriteEntry

from platter_client.config import ClientConfig
from platter_client.events import CART_UPDATED, FAVORITES_UPDATED, EventBus

logger = logging.getLogger(__name__)


class Collection(str, Enum):
    """Collections kept in the local store."""

    CART = "cart"
    FAVORITES = "favorites"


# =============================================================================
# Backends
# =============================================================================


class StorageBackend(Protocol):
    """Raw string storage keyed by name."""

    def read(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""
        ...

    def write(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    def remove(self, key: str) -> None:
        """Delete a value. Missing keys are ignored."""
        ...

    def version(self, key: str) -> int | None:
        """Opaque marker that changes on every write (None if absent)."""
        ...


class MemoryBackend:
    """In-memory backend for tests and ephemeral sessions."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(data or {})
        self._versions: dict[str, int] = dict.fromkeys(self._data, 1)

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value
        self._versions[key] = self._versions.get(key, 0) + 1

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
        self._versions[key] = self._versions.get(key, 0) + 1

    def version(self, key: str) -> int | None:
        if key not in self._data:
            return None
        return self._versions.get(key)


class FileBackend:
    """
    One JSON file per key inside a directory.

    Writes go to a temporary file first and are moved into place, so a
    reader never sees a half-written collection.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def version(self, key: str) -> int | None:
        try:
            return self._path(key).stat().st_mtime_ns
        except FileNotFoundError:
            return None


# =============================================================================
# Store
# =============================================================================

_ADAPTERS: dict[Collection, TypeAdapter[Any]] = {
    Collection.CART: TypeAdapter(list[CartLine]),
    Collection.FAVORITES: TypeAdapter(list[FavoriteEntry]),
}

_EVENTS = {
    Collection.CART: CART_UPDATED,
    Collection.FAVORITES: FAVORITES_UPDATED,
}


class LocalStore:
    """
    Cart and favorites persistence with change notification.

    Usage:
        store = LocalStore(FileBackend("~/.platter"), EventBus())
        lines = store.get_cart()
        store.save_cart([*lines, new_line])  # emits "cartUpdated"
    """

    def __init__(
        self,
        backend: StorageBackend,
        bus: EventBus | None = None,
        cart_key: str = "foodCart",
        favorites_key: str = "foodFavorites",
    ) -> None:
        self.backend = backend
        self.bus = bus or EventBus()
        self._keys = {
            Collection.CART: cart_key,
            Collection.FAVORITES: favorites_key,
        }
        # Last version this store wrote or observed, per collection
        self._seen: dict[Collection, int | None] = {
            collection: backend.version(key) for collection, key in self._keys.items()
        }

    @classmethod
    def from_config(cls, config: ClientConfig, bus: EventBus | None = None) -> "LocalStore":
        """File-backed store in the configured directory, under the configured keys."""
        return cls(
            FileBackend(config.storage_dir),
            bus,
            cart_key=config.cart_key,
            favorites_key=config.favorites_key,
        )

    def get(self, collection: Collection) -> list[Any]:
        """
        Read a collection.

        Returns:
            The stored entries in order, or an empty list if the collection
            is absent or cannot be parsed.
        """
        key = self._keys[collection]
        try:
            raw = self.backend.read(key)
        except OSError as e:
            logger.error("Could not read %s from local store: %s", key, e)
            return []
        except UnicodeDecodeError as e:
            logger.warning("Discarding undecodable %s collection: %s", collection.value, e)
            return []

        if raw is None:
            return []

        try:
            entries: list[Any] = _ADAPTERS[collection].validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Discarding corrupt %s collection (%d errors)",
                collection.value,
                e.error_count(),
            )
            return []
        return entries

    def save(self, collection: Collection, entries: list[Any]) -> None:
        """Overwrite a collection, then emit its change event."""
        key = self._keys[collection]
        payload = _ADAPTERS[collection].dump_json(entries).decode()
        try:
            self.backend.write(key, payload)
        except OSError as e:
            logger.error("Could not write %s to local store: %s", key, e)
            return
        self._seen[collection] = self.backend.version(key)
        self.bus.emit(_EVENTS[collection])

    def clear(self, collection: Collection) -> None:
        """Remove a collection, then emit its change event."""
        key = self._keys[collection]
        try:
            self.backend.remove(key)
        except OSError as e:
            logger.error("Could not clear %s in local store: %s", key, e)
            return
        self._seen[collection] = self.backend.version(key)
        self.bus.emit(_EVENTS[collection])

    def check_external_changes(self) -> list[Collection]:
        """
        Detect writes made by another process sharing the same backend.

        Emits the change event for every collection whose stored version
        differs from the last one this store saw. The latest write wins;
        there is no merge.

        Returns:
            The collections that changed.
        """
        changed: list[Collection] = []
        for collection, key in self._keys.items():
            current = self.backend.version(key)
            if current != self._seen[collection]:
                self._seen[collection] = current
                changed.append(collection)
                self.bus.emit(_EVENTS[collection])
        return changed

    # Typed shortcuts

    def get_cart(self) -> list[CartLine]:
        return self.get(Collection.CART)

    def save_cart(self, lines: list[CartLine]) -> None:
        self.save(Collection.CART, lines)

    def get_favorites(self) -> list[FavoriteEntry]:
        return self.get(Collection.FAVORITES)

    def save_favorites(self, favorites: list[FavoriteEntry]) -> None:
        self.save(Collection.FAVORITES, favorites)
