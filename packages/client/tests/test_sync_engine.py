"""Tests for the local-first sync engine."""

import asyncio
from decimal import Decimal

import pytest
from platter_schemas import MAX_QUANTITY, CartItemCreate, CartLineDraft, FavoriteDraft

from platter_client import (
    CART_UPDATED,
    EventBus,
    InMemoryPlatterService,
    LocalStore,
    SyncEngine,
    SyncError,
)


class TestAddToCart:
    @pytest.mark.asyncio
    async def test_adds_line_and_mirrors(
        self, engine: SyncEngine, service: InMemoryPlatterService, margherita: CartLineDraft
    ) -> None:
        """A new line is stored locally and mirrored to the server."""
        result = await engine.add_to_cart(margherita)

        assert result.sync is not None and result.sync.ok
        assert len(result.entries) == 1
        line = engine.get_cart()[0]
        assert line.total_price == Decimal("500")
        assert line.remote_id is not None
        assert line.remote_id in service.cart

    @pytest.mark.asyncio
    async def test_same_selection_increments_quantity(
        self, engine: SyncEngine, make_margherita
    ) -> None:
        """The same choice with options in another order adds to the quantity."""
        await engine.add_to_cart(make_margherita(toppings=("Extra Cheese", "Mushrooms")))
        result = await engine.add_to_cart(
            make_margherita(toppings=("Mushrooms", "Extra Cheese"), quantity=2)
        )

        assert len(result.entries) == 1
        assert result.entries[0].quantity == 3

    @pytest.mark.asyncio
    async def test_different_selection_adds_line(
        self, engine: SyncEngine, make_margherita
    ) -> None:
        """A different choice becomes its own line."""
        await engine.add_to_cart(make_margherita(size="Small"))
        result = await engine.add_to_cart(make_margherita(size="Large"))

        assert len(result.entries) == 2

    @pytest.mark.asyncio
    async def test_local_write_happens_before_remote(
        self, store: LocalStore, margherita: CartLineDraft
    ) -> None:
        """The store is written before the first await."""
        service = InMemoryPlatterService(api_delay_ms=50)
        engine = SyncEngine(store, service)

        task = asyncio.ensure_future(engine.add_to_cart(margherita))
        await asyncio.sleep(0)

        assert len(store.get_cart()) == 1
        assert service.cart == {}
        await task
        assert len(service.cart) == 1

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_local_line(
        self, engine: SyncEngine, service: InMemoryPlatterService, margherita: CartLineDraft
    ) -> None:
        """A failed mirror is reported and the local line stays."""
        service.offline = True

        result = await engine.add_to_cart(margherita)

        assert result.sync is not None
        assert result.sync.ok is False
        assert isinstance(result.sync.error, SyncError)
        assert result.sync.error.operation == "add_to_cart"
        assert "Service unavailable" in result.sync.message
        line = engine.get_cart()[0]
        assert line.remote_id is None

    @pytest.mark.asyncio
    async def test_local_only_add(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """sync_remote=False never calls the server."""
        result = await engine.add_to_cart(burger, sync_remote=False)

        assert result.sync is None
        assert service.calls == []
        assert engine.cart_count() == 1

    @pytest.mark.asyncio
    async def test_emits_cart_updated(
        self, engine: SyncEngine, bus: EventBus, burger: CartLineDraft
    ) -> None:
        """Adding to the cart emits cartUpdated."""
        events: list[str] = []
        bus.subscribe(CART_UPDATED, events.append)

        await engine.add_to_cart(burger)

        assert CART_UPDATED in events

    @pytest.mark.asyncio
    async def test_merge_stops_at_max_quantity(
        self, engine: SyncEngine, service: InMemoryPlatterService, make_margherita
    ) -> None:
        """Merging past the per-line limit caps the line instead of overflowing it."""
        await engine.add_to_cart(make_margherita(quantity=60))
        result = await engine.add_to_cart(make_margherita(quantity=60))

        assert result.sync is not None and result.sync.ok
        assert [line.quantity for line in result.entries] == [MAX_QUANTITY]
        assert [item.quantity for item in service.cart.values()] == [MAX_QUANTITY]

    @pytest.mark.asyncio
    async def test_oversized_draft_is_capped(
        self, engine: SyncEngine, burger: CartLineDraft
    ) -> None:
        """A draft mutated past the limit after validation is capped locally and remotely."""
        burger.quantity = 150

        result = await engine.add_to_cart(burger)

        assert result.sync is not None and result.sync.ok
        assert result.entries[0].quantity == MAX_QUANTITY

    @pytest.mark.asyncio
    async def test_invalid_remote_payload_is_reported(
        self,
        engine: SyncEngine,
        service: InMemoryPlatterService,
        burger: CartLineDraft,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A validation error from the remote mirror lands in the SyncResult."""

        async def rejecting(item: CartItemCreate):
            return CartItemCreate.model_validate({"menu_item_id": item.menu_item_id, "quantity": 0})

        monkeypatch.setattr(service, "add_cart_item", rejecting)

        result = await engine.add_to_cart(burger)

        assert result.sync is not None and not result.sync.ok
        assert result.sync.error is not None
        assert result.sync.error.operation == "add_to_cart"
        assert engine.cart_count() == 1


class TestRemoveAndUpdate:
    @pytest.mark.asyncio
    async def test_remove_mirrors_by_remote_id(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """Removal uses the recorded server id."""
        await engine.add_to_cart(burger)
        line = engine.get_cart()[0]

        result = await engine.remove_from_cart(line.id)

        assert result.entries == []
        assert result.sync is not None and result.sync.ok and not result.sync.skipped
        assert service.cart == {}

    @pytest.mark.asyncio
    async def test_remove_unsynced_line_skips_remote(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """Lines never mirrored are removed locally only."""
        await engine.add_to_cart(burger, sync_remote=False)
        line = engine.get_cart()[0]

        result = await engine.remove_from_cart(line.id)

        assert result.sync is not None and result.sync.skipped
        assert "remove_cart_item" not in service.calls

    @pytest.mark.asyncio
    async def test_remove_unknown_id_is_noop(
        self, engine: SyncEngine, burger: CartLineDraft
    ) -> None:
        """Removing an unknown id leaves the cart as it was."""
        await engine.add_to_cart(burger, sync_remote=False)

        result = await engine.remove_from_cart("missing")

        assert len(result.entries) == 1

    @pytest.mark.asyncio
    async def test_removing_twice_matches_removing_once(
        self,
        engine: SyncEngine,
        service: InMemoryPlatterService,
        burger: CartLineDraft,
        fries: CartLineDraft,
    ) -> None:
        """A second removal of the same line changes nothing and skips the remote."""
        await engine.add_to_cart(burger)
        await engine.add_to_cart(fries)
        line = engine.get_cart()[0]

        first = await engine.remove_from_cart(line.id)
        second = await engine.remove_from_cart(line.id)

        assert [e.model_dump() for e in second.entries] == [
            e.model_dump() for e in first.entries
        ]
        assert [e.item_id for e in engine.get_cart()] == [202]
        assert first.sync is not None and first.sync.ok and not first.sync.skipped
        assert second.sync is not None and second.sync.skipped
        assert service.calls.count("remove_cart_item") == 1

    def test_update_rejects_quantity_above_limit(self, engine: SyncEngine) -> None:
        """Quantity edits are bounded by the same limit as merges."""
        with pytest.raises(ValueError, match="between 1 and 99"):
            engine.update_cart_item("any", quantity=MAX_QUANTITY + 1)

    @pytest.mark.asyncio
    async def test_remove_failure_is_reported(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """A failed remote removal is reported after the local removal."""
        await engine.add_to_cart(burger)
        line = engine.get_cart()[0]
        service.offline = True

        result = await engine.remove_from_cart(line.id)

        assert result.entries == []
        assert result.sync is not None and not result.sync.ok

    @pytest.mark.asyncio
    async def test_update_quantity_is_local_only(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """Quantity edits never reach the server."""
        await engine.add_to_cart(burger, sync_remote=False)
        line = engine.get_cart()[0]

        lines = engine.update_cart_item(line.id, quantity=4)

        assert lines[0].quantity == 4
        assert engine.cart_total() == Decimal("720")
        assert service.calls == []

    def test_update_rejects_zero_quantity(self, engine: SyncEngine) -> None:
        """Quantity edits below one are rejected."""
        with pytest.raises(ValueError, match="between 1 and 99"):
            engine.update_cart_item("any", quantity=0)

    @pytest.mark.asyncio
    async def test_clear_cart(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """Clearing empties the local and the server cart."""
        await engine.add_to_cart(burger)

        result = await engine.clear_cart()

        assert result.entries == []
        assert engine.get_cart() == []
        assert service.cart == {}


class TestFavorites:
    @pytest.mark.asyncio
    async def test_add_favorite(
        self,
        engine: SyncEngine,
        service: InMemoryPlatterService,
        garlic_bread_favorite: FavoriteDraft,
    ) -> None:
        """A new favorite is stored and mirrored."""
        result = await engine.add_to_favorites(garlic_bread_favorite)

        assert result.sync is not None and result.sync.ok
        assert engine.is_favorite(102)
        assert engine.get_favorites()[0].remote_id is not None
        assert len(service.favorites) == 1

    @pytest.mark.asyncio
    async def test_add_favorite_twice_is_noop(
        self, engine: SyncEngine, garlic_bread_favorite: FavoriteDraft
    ) -> None:
        """A second add of the same item neither stores nor calls the server."""
        await engine.add_to_favorites(garlic_bread_favorite)
        result = await engine.add_to_favorites(garlic_bread_favorite)

        assert len(result.entries) == 1
        assert result.sync is None

    @pytest.mark.asyncio
    async def test_remove_favorite_looks_up_server_entry(
        self,
        engine: SyncEngine,
        service: InMemoryPlatterService,
        garlic_bread_favorite: FavoriteDraft,
    ) -> None:
        """The server favorite is found by menu item id."""
        await engine.add_to_favorites(garlic_bread_favorite)

        result = await engine.remove_from_favorites(102)

        assert result.entries == []
        assert result.sync is not None and result.sync.ok
        assert service.favorites == {}
        assert not engine.is_favorite(102)

    @pytest.mark.asyncio
    async def test_remove_favorite_missing_on_server_skips(
        self, engine: SyncEngine, garlic_bread_favorite: FavoriteDraft
    ) -> None:
        """A favorite the server never had is removed locally only."""
        await engine.add_to_favorites(garlic_bread_favorite, sync_remote=False)

        result = await engine.remove_from_favorites(102)

        assert result.sync is not None and result.sync.skipped

    @pytest.mark.asyncio
    async def test_remove_favorite_offline(
        self,
        engine: SyncEngine,
        service: InMemoryPlatterService,
        garlic_bread_favorite: FavoriteDraft,
    ) -> None:
        """An offline removal is reported and still applied locally."""
        await engine.add_to_favorites(garlic_bread_favorite)
        service.offline = True

        result = await engine.remove_from_favorites(102)

        assert result.entries == []
        assert result.sync is not None and not result.sync.ok

    @pytest.mark.asyncio
    async def test_clear_favorites(
        self, engine: SyncEngine, service: InMemoryPlatterService
    ) -> None:
        """Clearing removes every server favorite."""
        await service.add_favorite(101)
        await service.add_favorite(201)

        result = await engine.clear_favorites()

        assert result.sync is not None and result.sync.ok
        assert service.favorites == {}


class TestLoadFromApi:
    @pytest.mark.asyncio
    async def test_server_copy_replaces_local(
        self,
        engine: SyncEngine,
        service: InMemoryPlatterService,
        burger: CartLineDraft,
        margherita: CartLineDraft,
    ) -> None:
        """Session start overwrites both collections with the server copy."""
        await engine.add_to_cart(burger, sync_remote=False)
        await service.add_cart_item(
            CartItemCreate(
                menu_item_id=101, quantity=2, customizations=margherita.customizations
            )
        )
        await service.add_favorite(201)

        lines, favorites, sync = await engine.load_from_api()

        assert sync.ok
        assert [line.item_id for line in lines] == [101]
        assert lines[0].restaurant_name == "Pizza Palace"
        assert lines[0].line_total == Decimal("1000")
        assert lines[0].remote_id is not None
        assert favorites[0].dietary_type.value == "Non-Veg"
        assert [line.model_dump() for line in engine.get_cart()] == [
            line.model_dump() for line in lines
        ]

    @pytest.mark.asyncio
    async def test_failure_leaves_store_untouched(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """A failed load keeps the local collections as they were."""
        await engine.add_to_cart(burger, sync_remote=False)
        service.offline = True

        lines, favorites, sync = await engine.load_from_api()

        assert not sync.ok
        assert [line.item_id for line in lines] == [201]
        assert [line.item_id for line in engine.get_cart()] == [201]


class TestCheckoutSync:
    @pytest.mark.asyncio
    async def test_reprices_from_server(
        self, engine: SyncEngine, service: InMemoryPlatterService, make_margherita
    ) -> None:
        """Checkout refresh takes current names and prices from the server."""
        await engine.add_to_cart(make_margherita())
        menu_item = service.menu[101]
        menu_item.price = Decimal("375")
        menu_item.customization_groups[0].options[1].price = Decimal("120")

        snapshot = await engine.sync_cart_for_checkout()

        assert snapshot.refreshed
        line = snapshot.lines[0]
        # 375 + Medium 120 + Extra Cheese 50
        assert line.total_price == Decimal("545")
        assert engine.get_cart()[0].total_price == Decimal("545")

    @pytest.mark.asyncio
    async def test_reports_unavailable_items(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """Unavailable items are reported but kept."""
        await engine.add_to_cart(burger)
        service.menu[201].is_available = False

        snapshot = await engine.sync_cart_for_checkout()

        assert snapshot.unavailable == [201]
        assert len(snapshot.lines) == 1

    @pytest.mark.asyncio
    async def test_offline_returns_local_snapshot(
        self, engine: SyncEngine, service: InMemoryPlatterService, burger: CartLineDraft
    ) -> None:
        """An offline refresh returns the local lines unrefreshed."""
        await engine.add_to_cart(burger, sync_remote=False)
        service.offline = True

        snapshot = await engine.sync_cart_for_checkout()

        assert not snapshot.refreshed
        assert not snapshot.sync.ok
        assert [line.item_id for line in snapshot.lines] == [201]


class TestReads:
    @pytest.mark.asyncio
    async def test_totals_and_grouping(
        self,
        engine: SyncEngine,
        make_margherita,
        burger: CartLineDraft,
        fries: CartLineDraft,
    ) -> None:
        """Cart totals, counts and restaurant grouping agree."""
        await engine.add_to_cart(burger, sync_remote=False)
        await engine.add_to_cart(make_margherita(quantity=2), sync_remote=False)
        await engine.add_to_cart(fries, sync_remote=False)

        assert engine.cart_count() == 4
        assert engine.cart_total() == Decimal("180") + Decimal("1000") + Decimal("90")

        groups = engine.group_by_restaurant()
        assert list(groups) == [2, 1]
        assert [line.item_id for line in groups[2]] == [201, 202]
