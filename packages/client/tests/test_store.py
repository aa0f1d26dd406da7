"""Tests for the local store and its change events."""

import logging
from decimal import Decimal
from pathlib import Path

import pytest
from platter_schemas import CartLine, FavoriteEntry

from platter_client import (
    CART_UPDATED,
    FAVORITES_UPDATED,
    ClientConfig,
    Collection,
    EventBus,
    FileBackend,
    LocalStore,
    MemoryBackend,
)


def cart_line(line_id: str = "a", item_id: int = 201) -> CartLine:
    return CartLine(
        id=line_id,
        item_id=item_id,
        restaurant_id=2,
        restaurant_name="Burger Barn",
        name="Classic Burger",
        unit_price=Decimal("180"),
    )


class TestEventBus:
    def test_emit_calls_subscribers(self) -> None:
        """Only subscribers of the emitted event are called."""
        bus = EventBus()
        received: list[str] = []
        bus.subscribe(CART_UPDATED, received.append)

        bus.emit(CART_UPDATED)
        bus.emit(FAVORITES_UPDATED)

        assert received == [CART_UPDATED]

    def test_unsubscribe(self) -> None:
        """An unsubscribed handler is no longer called."""
        bus = EventBus()
        received: list[str] = []
        unsubscribe = bus.subscribe(CART_UPDATED, received.append)

        unsubscribe()
        bus.emit(CART_UPDATED)

        assert received == []

    def test_failing_handler_does_not_stop_others(self, caplog) -> None:
        """A raising handler is logged and the rest still run."""
        bus = EventBus()
        received: list[str] = []

        def broken(event: str) -> None:
            raise RuntimeError("boom")

        bus.subscribe(CART_UPDATED, broken)
        bus.subscribe(CART_UPDATED, received.append)

        with caplog.at_level(logging.ERROR):
            bus.emit(CART_UPDATED)

        assert received == [CART_UPDATED]
        assert "Handler for cartUpdated failed" in caplog.text


class TestLocalStore:
    def test_empty_store_reads_empty(self, store: LocalStore) -> None:
        """A fresh store reads empty collections."""
        assert store.get_cart() == []
        assert store.get_favorites() == []

    def test_save_and_read_cart(self, store: LocalStore) -> None:
        """Saved lines read back in order."""
        store.save_cart([cart_line("a"), cart_line("b", item_id=202)])

        lines = store.get_cart()
        assert [line.id for line in lines] == ["a", "b"]
        assert lines[0].unit_price == Decimal("180")

    def test_save_emits_event(self, store: LocalStore, bus: EventBus) -> None:
        """Saves and clears emit the collection's event."""
        events: list[str] = []
        bus.subscribe(CART_UPDATED, events.append)
        bus.subscribe(FAVORITES_UPDATED, events.append)

        store.save_cart([cart_line()])
        store.save_favorites([])
        store.clear(Collection.CART)

        assert events == [CART_UPDATED, FAVORITES_UPDATED, CART_UPDATED]

    def test_clear_removes_collection(self, store: LocalStore) -> None:
        """Cleared collections read empty."""
        store.save_cart([cart_line()])

        store.clear(Collection.CART)

        assert store.get_cart() == []

    def test_corrupt_data_reads_empty(self, caplog) -> None:
        """Invalid JSON and schema mismatches read as empty."""
        backend = MemoryBackend({"foodCart": "{not json", "foodFavorites": '[{"id": 1}]'})
        store = LocalStore(backend)

        with caplog.at_level(logging.WARNING):
            assert store.get_cart() == []
            assert store.get_favorites() == []

        assert "Discarding corrupt cart collection" in caplog.text

    def test_custom_keys(self) -> None:
        """Collections are stored under the configured keys."""
        backend = MemoryBackend()
        store = LocalStore(backend, cart_key="cart-v2")

        store.save_cart([cart_line()])

        assert backend.read("cart-v2") is not None
        assert backend.read("foodCart") is None

    def test_stored_json_includes_derived_prices(self) -> None:
        """Stored lines carry their computed prices."""
        backend = MemoryBackend()
        store = LocalStore(backend)

        store.save_cart([cart_line()])

        raw = backend.read("foodCart")
        assert raw is not None
        assert '"total_price":"180"' in raw

    def test_external_change_detection(self) -> None:
        """Writes from another store on the same backend are reported once."""
        backend = MemoryBackend()
        bus = EventBus()
        events: list[str] = []
        bus.subscribe(CART_UPDATED, events.append)
        first = LocalStore(backend, bus)
        other_tab = LocalStore(backend)

        assert first.check_external_changes() == []

        other_tab.save_cart([cart_line()])
        assert first.check_external_changes() == [Collection.CART]
        assert events == [CART_UPDATED]

        # Already observed
        assert first.check_external_changes() == []
        assert [line.id for line in first.get_cart()] == ["a"]

    def test_own_writes_are_not_external(self, store: LocalStore) -> None:
        """A store's own saves are not reported as external."""
        store.save_cart([cart_line()])

        assert store.check_external_changes() == []


class TestFileBackend:
    def test_round_trip_through_files(self, tmp_path: Path) -> None:
        """Collections survive reopening the directory."""
        store = LocalStore(FileBackend(tmp_path / "platter"))
        favorite = FavoriteEntry(
            id="f1",
            item_id=102,
            restaurant_id=1,
            name="Garlic Bread",
            price=Decimal("120"),
        )

        store.save_favorites([favorite])

        assert (tmp_path / "platter" / "foodFavorites.json").exists()
        reopened = LocalStore(FileBackend(tmp_path / "platter"))
        assert reopened.get_favorites()[0].name == "Garlic Bread"

    def test_missing_file_reads_none(self, tmp_path: Path) -> None:
        """A missing file has no value and no version."""
        backend = FileBackend(tmp_path)

        assert backend.read("foodCart") is None
        assert backend.version("foodCart") is None

    def test_remove_missing_is_noop(self, tmp_path: Path) -> None:
        """Removing a missing key does not raise."""
        FileBackend(tmp_path).remove("foodCart")

    def test_unwritable_directory_is_logged(self, tmp_path: Path, caplog) -> None:
        """Write failures are logged instead of raised."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        store = LocalStore(FileBackend(blocker))

        with caplog.at_level(logging.ERROR):
            store.save_cart([cart_line()])

        assert "Could not write foodCart" in caplog.text

    def test_undecodable_file_reads_empty(self, tmp_path: Path, caplog) -> None:
        """Bytes that are not UTF-8 read as an empty collection."""
        (tmp_path / "foodCart.json").write_bytes(b"\xff\xfe[garbage")
        store = LocalStore(FileBackend(tmp_path))

        with caplog.at_level(logging.WARNING):
            assert store.get_cart() == []

        assert "Discarding undecodable cart collection" in caplog.text

    def test_store_from_config(self, tmp_path: Path) -> None:
        """The configured directory and keys decide where collections land."""
        config = ClientConfig(storage_dir=tmp_path, cart_key="cart-v2")
        store = LocalStore.from_config(config)

        store.save_cart([cart_line()])

        assert (tmp_path / "cart-v2.json").exists()
        assert [line.id for line in LocalStore.from_config(config).get_cart()] == ["a"]


@pytest.mark.parametrize("collection", list(Collection))
def test_collections_start_empty(collection: Collection) -> None:
    """Every collection starts empty."""
    assert LocalStore(MemoryBackend()).get(collection) == []
