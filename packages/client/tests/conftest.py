"""
Pytest configuration for Platter client tests.
"""

from decimal import Decimal

import pytest
from platter_schemas import (
    CartLineDraft,
    CustomizationOption,
    FavoriteDraft,
    MultiSelection,
    SingleSelection,
)

from platter_client import (
    EventBus,
    InMemoryPlatterService,
    LocalStore,
    MemoryBackend,
    OrderComposer,
    SyncEngine,
)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def store(bus: EventBus) -> LocalStore:
    """Local store backed by memory."""
    return LocalStore(MemoryBackend(), bus)


@pytest.fixture
def service() -> InMemoryPlatterService:
    """In-memory service with the default two-restaurant catalog."""
    return InMemoryPlatterService(delivery_fees={1: Decimal("40"), 2: Decimal("30")})


@pytest.fixture
def engine(store: LocalStore, service: InMemoryPlatterService) -> SyncEngine:
    return SyncEngine(store, service)


@pytest.fixture
def composer(engine: SyncEngine, service: InMemoryPlatterService) -> OrderComposer:
    return OrderComposer(engine, service)


def margherita_draft(
    size: str = "Medium",
    toppings: tuple[str, ...] = ("Extra Cheese",),
    quantity: int = 1,
) -> CartLineDraft:
    """Margherita Pizza (350) with a size and toppings from the default catalog."""
    sizes = {"Small": "0", "Medium": "100", "Large": "200"}
    topping_prices = {"Extra Cheese": "50", "Mushrooms": "40", "Olives": "30"}
    return CartLineDraft(
        item_id=101,
        restaurant_id=1,
        restaurant_name="Pizza Palace",
        name="Margherita Pizza",
        unit_price=Decimal("350"),
        customizations={
            "Size": SingleSelection(
                option=CustomizationOption(name=size, price=Decimal(sizes[size]))
            ),
            "Extra Toppings": MultiSelection(
                options=[
                    CustomizationOption(name=t, price=Decimal(topping_prices[t]))
                    for t in toppings
                ]
            ),
        },
        quantity=quantity,
    )


def burger_draft(quantity: int = 1) -> CartLineDraft:
    return CartLineDraft(
        item_id=201,
        restaurant_id=2,
        restaurant_name="Burger Barn",
        name="Classic Burger",
        unit_price=Decimal("180"),
        quantity=quantity,
    )


def fries_draft(quantity: int = 1) -> CartLineDraft:
    return CartLineDraft(
        item_id=202,
        restaurant_id=2,
        restaurant_name="Burger Barn",
        name="Fries",
        unit_price=Decimal("90"),
        quantity=quantity,
    )


def favorite_draft(item_id: int = 102) -> FavoriteDraft:
    return FavoriteDraft(
        item_id=item_id,
        restaurant_id=1,
        restaurant_name="Pizza Palace",
        name="Garlic Bread",
        price=Decimal("120"),
    )


@pytest.fixture
def make_margherita():
    """Build Margherita drafts with other sizes, toppings or quantities."""
    return margherita_draft


@pytest.fixture
def margherita() -> CartLineDraft:
    return margherita_draft()


@pytest.fixture
def burger() -> CartLineDraft:
    return burger_draft()


@pytest.fixture
def fries() -> CartLineDraft:
    return fries_draft()


@pytest.fixture
def garlic_bread_favorite() -> FavoriteDraft:
    return favorite_draft()
