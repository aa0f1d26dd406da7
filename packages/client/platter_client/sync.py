"""
Sync engine - keeps the local store and the remote service in step.

Mutations are local-first: the store is written synchronously, before the
first await, so the UI never waits on the network. The remote mirror is
best-effort; a failure is logged and reported in a SyncResult, never
rolled back and never raised.

On session start, load_from_api() replaces the local collections with the
server's copy (server wins).
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from platter_schemas import (
    MAX_QUANTITY,
    CartItemCreate,
    CartLine,
    CartLineDraft,
    Customizations,
    FavoriteDraft,
    FavoriteEntry,
    MultiSelection,
    RemoteCartItem,
    RemoteMenuItem,
    SingleSelection,
)

from platter_client.adapters.base import PlatterService
from platter_client.exceptions import PlatterError, SyncError
from platter_client.store import LocalStore
from platter_client.translate import cart_line_from_remote, favorite_from_remote

logger = logging.getLogger(__name__)

_E = TypeVar("_E")

# Derived CartLine fields, dumped but not accepted as input
_COMPUTED_FIELDS = {"customization_price", "total_price"}


class SyncResult(BaseModel):
    """Outcome of a best-effort remote call."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    error: SyncError | None = None
    skipped: bool = False

    @classmethod
    def success(cls) -> "SyncResult":
        return cls(ok=True)

    @classmethod
    def skip(cls) -> "SyncResult":
        """Nothing to mirror (e.g. the entry was never synced)."""
        return cls(ok=True, skipped=True)

    @classmethod
    def failure(cls, operation: str, error: Exception) -> "SyncResult":
        return cls(ok=False, error=SyncError(str(error), operation=operation))

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""


class MutationResult(BaseModel, Generic[_E]):
    """Local entries after a mutation, plus the remote mirror outcome."""

    entries: list[_E]
    sync: SyncResult | None = None


class CheckoutSnapshot(BaseModel):
    """Cart lines as they stand right before order placement."""

    lines: list[CartLine]
    refreshed: bool
    unavailable: list[int] = Field(default_factory=list)
    sync: SyncResult


def _new_local_id() -> str:
    return uuid.uuid4().hex


def _reprice(customizations: Customizations, menu_item: RemoteMenuItem) -> Customizations:
    """Replace selected option prices with the menu's current ones."""
    groups = {group.name: group for group in menu_item.customization_groups}
    repriced: Customizations = {}
    for group_name, selection in customizations.items():
        group = groups.get(group_name)
        if group is None:
            repriced[group_name] = selection
            continue
        if isinstance(selection, SingleSelection):
            current = group.get_option(selection.option.name) or selection.option
            repriced[group_name] = SingleSelection(option=current)
        else:
            repriced[group_name] = MultiSelection(
                options=[
                    group.get_option(option.name) or option
                    for option in selection.options
                ]
            )
    return repriced


class SyncEngine:
    """
    Local-first cart and favorites operations with remote mirroring.

    Usage:
        engine = SyncEngine(store, HttpPlatterService(token=token))
        result = await engine.add_to_cart(draft)
        if not result.sync.ok:
            toast(result.sync.message)
    """

    def __init__(self, store: LocalStore, service: PlatterService) -> None:
        self.store = store
        self.service = service

    async def _mirror(self, operation: str, call: Any) -> SyncResult:
        """Await a remote call, converting failures into a SyncResult."""
        try:
            await call
        except PlatterError as e:
            logger.warning("Remote %s failed, keeping local state: %s", operation, e)
            return SyncResult.failure(operation, e)
        return SyncResult.success()

    # =========================================================================
    # Cart
    # =========================================================================

    async def add_to_cart(
        self, draft: CartLineDraft, sync_remote: bool = True
    ) -> MutationResult[CartLine]:
        """
        Add a selection to the cart.

        An existing line with the same item and customizations has its
        quantity increased, up to MAX_QUANTITY; otherwise a new line is
        appended.
        """
        lines = self.store.get_cart()
        key = draft.selection_key
        quantity = min(draft.quantity, MAX_QUANTITY)

        target: CartLine | None = None
        for line in lines:
            if line.selection_key == key:
                line.quantity = min(line.quantity + quantity, MAX_QUANTITY)
                target = line
                break

        if target is None:
            data = draft.model_dump(exclude=_COMPUTED_FIELDS)
            data["quantity"] = quantity
            target = CartLine(id=_new_local_id(), **data)
            lines.append(target)

        self.store.save_cart(lines)

        if not sync_remote:
            return MutationResult(entries=lines)

        try:
            request = CartItemCreate(
                menu_item_id=draft.item_id,
                quantity=quantity,
                customizations=draft.customizations,
            )
            remote = await self.service.add_cart_item(request)
        except (PlatterError, ValidationError) as e:
            logger.warning("Remote add_to_cart failed for item %s: %s", draft.item_id, e)
            return MutationResult(entries=lines, sync=SyncResult.failure("add_to_cart", e))

        lines = self._record_remote_id(target.id, remote)
        return MutationResult(entries=lines, sync=SyncResult.success())

    def _record_remote_id(self, line_id: str, remote: RemoteCartItem) -> list[CartLine]:
        lines = self.store.get_cart()
        for line in lines:
            if line.id == line_id and line.remote_id != remote.id:
                line.remote_id = remote.id
                self.store.save_cart(lines)
                break
        return lines

    async def remove_from_cart(
        self, line_id: str, sync_remote: bool = True
    ) -> MutationResult[CartLine]:
        """Remove a cart line by local id. Unknown ids are a no-op."""
        lines = self.store.get_cart()
        removed = next((line for line in lines if line.id == line_id), None)
        remaining = [line for line in lines if line.id != line_id]
        self.store.save_cart(remaining)

        if not sync_remote:
            return MutationResult(entries=remaining)
        if removed is None or removed.remote_id is None:
            return MutationResult(entries=remaining, sync=SyncResult.skip())

        sync = await self._mirror(
            "remove_from_cart", self.service.remove_cart_item(removed.remote_id)
        )
        return MutationResult(entries=remaining, sync=sync)

    def update_cart_item(self, line_id: str, **patch: Any) -> list[CartLine]:
        """
        Merge fields into a cart line in place. Local only.

        Raises:
            ValueError: If the patch sets a quantity outside 1..MAX_QUANTITY.
        """
        if "quantity" in patch and not 1 <= patch["quantity"] <= MAX_QUANTITY:
            raise ValueError(f"Quantity must be between 1 and {MAX_QUANTITY}")

        lines = self.store.get_cart()
        for index, line in enumerate(lines):
            if line.id == line_id:
                data = line.model_dump(exclude=_COMPUTED_FIELDS)
                data.update(patch)
                lines[index] = CartLine.model_validate(data)
                self.store.save_cart(lines)
                break
        return lines

    async def clear_cart(self, sync_remote: bool = True) -> MutationResult[CartLine]:
        """Empty the cart locally, then on the server."""
        self.store.save_cart([])
        if not sync_remote:
            return MutationResult(entries=[])
        sync = await self._mirror("clear_cart", self.service.clear_cart())
        return MutationResult(entries=[], sync=sync)

    # =========================================================================
    # Favorites
    # =========================================================================

    async def add_to_favorites(
        self, draft: FavoriteDraft, sync_remote: bool = True
    ) -> MutationResult[FavoriteEntry]:
        """Save a menu item. Already-saved items are left as they are."""
        favorites = self.store.get_favorites()
        if any(favorite.item_id == draft.item_id for favorite in favorites):
            return MutationResult(entries=favorites)

        entry = FavoriteEntry(id=_new_local_id(), **draft.model_dump())
        favorites.append(entry)
        self.store.save_favorites(favorites)

        if not sync_remote:
            return MutationResult(entries=favorites)

        try:
            remote = await self.service.add_favorite(draft.item_id)
        except PlatterError as e:
            logger.warning("Remote add_to_favorites failed for item %s: %s", draft.item_id, e)
            return MutationResult(
                entries=favorites, sync=SyncResult.failure("add_to_favorites", e)
            )

        favorites = self.store.get_favorites()
        for favorite in favorites:
            if favorite.id == entry.id:
                favorite.remote_id = remote.id
                self.store.save_favorites(favorites)
                break
        return MutationResult(entries=favorites, sync=SyncResult.success())

    async def remove_from_favorites(
        self, item_id: int, sync_remote: bool = True
    ) -> MutationResult[FavoriteEntry]:
        """
        Remove a saved item by menu item id.

        The server favorite is looked up by menu item, since a local entry
        may have been saved before it was ever mirrored.
        """
        favorites = [f for f in self.store.get_favorites() if f.item_id != item_id]
        self.store.save_favorites(favorites)

        if not sync_remote:
            return MutationResult(entries=favorites)

        try:
            remote_favorites = await self.service.get_favorites()
            match = next(
                (f for f in remote_favorites if f.menu_item_id == item_id), None
            )
            if match is None:
                return MutationResult(entries=favorites, sync=SyncResult.skip())
            await self.service.remove_favorite(match.id)
        except PlatterError as e:
            logger.warning("Remote remove_from_favorites failed for item %s: %s", item_id, e)
            return MutationResult(
                entries=favorites, sync=SyncResult.failure("remove_from_favorites", e)
            )
        return MutationResult(entries=favorites, sync=SyncResult.success())

    async def clear_favorites(
        self, sync_remote: bool = True
    ) -> MutationResult[FavoriteEntry]:
        """Empty favorites locally, then remove each one on the server."""
        self.store.save_favorites([])
        if not sync_remote:
            return MutationResult(entries=[])

        try:
            remote_favorites = await self.service.get_favorites()
            await asyncio.gather(
                *(self.service.remove_favorite(f.id) for f in remote_favorites)
            )
        except PlatterError as e:
            logger.warning("Remote clear_favorites failed: %s", e)
            return MutationResult(entries=[], sync=SyncResult.failure("clear_favorites", e))
        return MutationResult(entries=[], sync=SyncResult.success())

    # =========================================================================
    # Session sync
    # =========================================================================

    async def load_from_api(
        self,
    ) -> tuple[list[CartLine], list[FavoriteEntry], SyncResult]:
        """
        Replace the local cart and favorites with the server's copy.

        Both collections are fetched concurrently. If either fetch fails,
        the local store is left untouched and its current contents are
        returned with a failed SyncResult.
        """
        try:
            remote_cart, remote_favorites = await asyncio.gather(
                self.service.get_cart(), self.service.get_favorites()
            )
        except PlatterError as e:
            logger.warning("Could not load cart and favorites from server: %s", e)
            return (
                self.store.get_cart(),
                self.store.get_favorites(),
                SyncResult.failure("load_from_api", e),
            )

        lines = [cart_line_from_remote(item) for item in remote_cart]
        favorites = [favorite_from_remote(fav) for fav in remote_favorites]
        self.store.save_cart(lines)
        self.store.save_favorites(favorites)

        logger.info(
            "Loaded %d cart lines and %d favorites from server",
            len(lines),
            len(favorites),
        )
        return lines, favorites, SyncResult.success()

    async def sync_cart_for_checkout(self) -> CheckoutSnapshot:
        """
        Refresh local cart prices from the server before placing orders.

        Local lines matching a server line by menu item take its current
        name, restaurant name, base price and option prices. Items the
        server marks unavailable are reported, not removed. If the fetch
        fails, the local snapshot is returned unchanged.
        """
        try:
            remote_cart = await self.service.get_cart()
        except PlatterError as e:
            logger.warning("Checkout refresh failed, using local cart: %s", e)
            return CheckoutSnapshot(
                lines=self.store.get_cart(),
                refreshed=False,
                sync=SyncResult.failure("sync_cart_for_checkout", e),
            )

        by_item = {item.menu_item_id: item for item in remote_cart}
        by_key = {
            cart_line_from_remote(item).selection_key: item.id for item in remote_cart
        }

        lines: list[CartLine] = []
        unavailable: list[int] = []
        for line in self.store.get_cart():
            remote = by_item.get(line.item_id)
            if remote is not None:
                menu_item = remote.menu_item
                line = line.model_copy(
                    update={
                        "name": menu_item.name,
                        "restaurant_name": menu_item.category.restaurant.name,
                        "unit_price": menu_item.price,
                        "customizations": _reprice(line.customizations, menu_item),
                        "remote_id": by_key.get(line.selection_key, line.remote_id),
                    }
                )
                if not menu_item.is_available and line.item_id not in unavailable:
                    unavailable.append(line.item_id)
            lines.append(line)

        self.store.save_cart(lines)
        return CheckoutSnapshot(
            lines=lines,
            refreshed=True,
            unavailable=unavailable,
            sync=SyncResult.success(),
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_cart(self) -> list[CartLine]:
        return self.store.get_cart()

    def get_favorites(self) -> list[FavoriteEntry]:
        return self.store.get_favorites()

    def is_favorite(self, item_id: int) -> bool:
        return any(f.item_id == item_id for f in self.store.get_favorites())

    def cart_total(self) -> Decimal:
        """Sum of line totals (unit price with options, times quantity)."""
        return sum((line.line_total for line in self.store.get_cart()), Decimal("0"))

    def cart_count(self) -> int:
        """Number of units in the cart."""
        return sum(line.quantity for line in self.store.get_cart())

    def group_by_restaurant(self) -> "OrderedDict[int, list[CartLine]]":
        """Cart lines partitioned by restaurant, in first-seen order."""
        return group_lines(self.store.get_cart())


def group_lines(lines: list[CartLine]) -> "OrderedDict[int, list[CartLine]]":
    """Partition lines by restaurant id, keeping first-seen order."""
    groups: OrderedDict[int, list[CartLine]] = OrderedDict()
    for line in lines:
        groups.setdefault(line.restaurant_id, []).append(line)
    return groups
