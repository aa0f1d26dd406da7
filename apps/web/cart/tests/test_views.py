"""
Integration tests for cart and favorites API views.
"""

import json
from decimal import Decimal

from django.test import Client as DjangoClient

import pytest
from platter_schemas import MAX_QUANTITY

from apps.web.cart.models import CartItem, Favorite
from apps.web.cart.tests.factories import CartItemFactory, FavoriteFactory
from apps.web.restaurant.models import CustomizationKind
from apps.web.restaurant.tests.factories import (
    CustomizationGroupFactory,
    CustomizationOptionFactory,
    MenuItemFactory,
)

TOPPINGS_AB = {
    "Extra Toppings": {
        "kind": "multi",
        "options": [
            {"name": "Extra Cheese", "price": "50.00"},
            {"name": "Mushrooms", "price": "40.00"},
        ],
    }
}

TOPPINGS_BA = {
    "Extra Toppings": {
        "kind": "multi",
        "options": [
            {"name": "Mushrooms", "price": "40.00"},
            {"name": "Extra Cheese", "price": "50.00"},
        ],
    }
}


@pytest.fixture
def pizza():
    item = MenuItemFactory(
        name="Margherita Pizza",
        price=Decimal("350.00"),
        category__restaurant__name="Pizza Palace",
    )
    toppings = CustomizationGroupFactory(
        item=item, name="Extra Toppings", kind=CustomizationKind.MULTI
    )
    CustomizationOptionFactory(group=toppings, name="Extra Cheese", price=Decimal("50.00"))
    CustomizationOptionFactory(group=toppings, name="Mushrooms", price=Decimal("40.00"))
    return item


def post_json(client: DjangoClient, url: str, payload: dict):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


@pytest.mark.django_db
class TestCartView:
    """Tests for /api/cart."""

    def test_requires_token(self, api_client: DjangoClient) -> None:
        """Cart requires a bearer token."""
        assert api_client.get("/api/cart").status_code == 401

    def test_get_returns_nested_items(
        self, customer_client: DjangoClient, user, pizza
    ) -> None:
        """Cart lists only the user's items with menu item, category and restaurant embedded."""
        CartItemFactory(user=user, menu_item=pizza, quantity=2)
        CartItemFactory()

        response = customer_client.get("/api/cart")

        assert response.status_code == 200
        items = response.json()["cart_items"]
        assert len(items) == 1
        assert items[0]["quantity"] == 2
        assert items[0]["menu_item"]["name"] == "Margherita Pizza"
        assert items[0]["menu_item"]["category"]["restaurant"]["name"] == "Pizza Palace"
        assert items[0]["menu_item"]["customization_groups"][0]["name"] == "Extra Toppings"

    def test_add_item(self, customer_client: DjangoClient, user, pizza) -> None:
        """Adding a new selection creates a cart item."""
        response = post_json(
            customer_client,
            "/api/cart",
            {"menu_item_id": pizza.pk, "quantity": 1, "customizations": TOPPINGS_AB},
        )

        assert response.status_code == 201
        item = response.json()["cart_item"]
        assert item["menu_item_id"] == pizza.pk
        assert set(item["customizations"]["Extra Toppings"]["options"][0]) == {"name", "price"}
        assert CartItem.objects.filter(user=user).count() == 1

    def test_same_selection_in_any_order_merges(
        self, customer_client: DjangoClient, user, pizza
    ) -> None:
        """Multi-select options in a different order merge into the same line."""
        post_json(
            customer_client,
            "/api/cart",
            {"menu_item_id": pizza.pk, "quantity": 1, "customizations": TOPPINGS_AB},
        )
        response = post_json(
            customer_client,
            "/api/cart",
            {"menu_item_id": pizza.pk, "quantity": 2, "customizations": TOPPINGS_BA},
        )

        assert response.status_code == 200
        assert response.json()["cart_item"]["quantity"] == 3
        assert CartItem.objects.filter(user=user).count() == 1

    def test_merge_is_capped_at_max_quantity(
        self, customer_client: DjangoClient, user, pizza
    ) -> None:
        """Merging past the per-line limit stores the limit."""
        post_json(customer_client, "/api/cart", {"menu_item_id": pizza.pk, "quantity": 60})
        response = post_json(
            customer_client, "/api/cart", {"menu_item_id": pizza.pk, "quantity": 60}
        )

        assert response.status_code == 200
        assert response.json()["cart_item"]["quantity"] == MAX_QUANTITY
        assert CartItem.objects.get(user=user).quantity == MAX_QUANTITY

    def test_different_selection_is_a_new_line(
        self, customer_client: DjangoClient, user, pizza
    ) -> None:
        """A different customization creates a separate line."""
        post_json(customer_client, "/api/cart", {"menu_item_id": pizza.pk})
        response = post_json(
            customer_client,
            "/api/cart",
            {"menu_item_id": pizza.pk, "customizations": TOPPINGS_AB},
        )

        assert response.status_code == 201
        assert CartItem.objects.filter(user=user).count() == 2

    def test_add_unknown_item(self, customer_client: DjangoClient) -> None:
        """Unknown menu items are a validation error."""
        response = post_json(customer_client, "/api/cart", {"menu_item_id": 999999})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "menu_item_id"

    def test_add_unavailable_item(self, customer_client: DjangoClient, pizza) -> None:
        """Unavailable menu items cannot be added."""
        pizza.is_available = False
        pizza.save()

        response = post_json(customer_client, "/api/cart", {"menu_item_id": pizza.pk})

        assert response.status_code == 400
        assert "unavailable" in response.json()["details"][0]["message"]

    def test_add_unknown_option(self, customer_client: DjangoClient, pizza) -> None:
        """Options the item does not offer are rejected."""
        customizations = {
            "Extra Toppings": {"kind": "multi", "options": [{"name": "Pineapple"}]},
        }

        response = post_json(
            customer_client,
            "/api/cart",
            {"menu_item_id": pizza.pk, "customizations": customizations},
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "customizations"

    def test_add_rejects_bad_quantity(self, customer_client: DjangoClient, pizza) -> None:
        """Quantities outside the allowed range are rejected."""
        response = post_json(
            customer_client, "/api/cart", {"menu_item_id": pizza.pk, "quantity": 0}
        )

        assert response.status_code == 400

    def test_clear_cart(self, customer_client: DjangoClient, user) -> None:
        """DELETE /api/cart removes only the user's items."""
        CartItemFactory(user=user)
        CartItemFactory(user=user)
        untouched = CartItemFactory()

        response = customer_client.delete("/api/cart")

        assert response.status_code == 200
        assert response.json() == {"deleted": 2}
        assert list(CartItem.objects.all()) == [untouched]


@pytest.mark.django_db
class TestCartItemView:
    """Tests for /api/cart/{id}."""

    def test_update_quantity(self, customer_client: DjangoClient, user) -> None:
        """PUT sets the item quantity."""
        item = CartItemFactory(user=user, quantity=1)

        response = customer_client.put(
            f"/api/cart/{item.pk}",
            data=json.dumps({"quantity": 4}),
            content_type="application/json",
        )

        assert response.status_code == 200
        item.refresh_from_db()
        assert item.quantity == 4

    def test_delete_item(self, customer_client: DjangoClient, user) -> None:
        """DELETE removes a single cart item."""
        item = CartItemFactory(user=user)

        response = customer_client.delete(f"/api/cart/{item.pk}")

        assert response.status_code == 200
        assert not CartItem.objects.filter(pk=item.pk).exists()

    def test_cannot_touch_other_users_item(self, customer_client: DjangoClient) -> None:
        """Another user's cart item is a 404."""
        item = CartItemFactory()

        response = customer_client.delete(f"/api/cart/{item.pk}")

        assert response.status_code == 404
        assert CartItem.objects.filter(pk=item.pk).exists()


@pytest.mark.django_db
class TestFavoritesView:
    """Tests for /api/favorites."""

    def test_list_favorites(self, customer_client: DjangoClient, user, pizza) -> None:
        """Favorites list embeds each menu item."""
        FavoriteFactory(user=user, menu_item=pizza)
        FavoriteFactory()

        response = customer_client.get("/api/favorites")

        favorites = response.json()["favorites"]
        assert [f["menu_item_id"] for f in favorites] == [pizza.pk]
        assert favorites[0]["menu_item"]["is_veg"] is True

    def test_add_favorite_is_idempotent(
        self, customer_client: DjangoClient, user, pizza
    ) -> None:
        """Saving the same item twice keeps one favorite."""
        first = post_json(customer_client, "/api/favorites", {"menu_item_id": pizza.pk})
        second = post_json(customer_client, "/api/favorites", {"menu_item_id": pizza.pk})

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["favorite"]["id"] == second.json()["favorite"]["id"]
        assert Favorite.objects.filter(user=user).count() == 1

    def test_add_unknown_item(self, customer_client: DjangoClient) -> None:
        """Unknown menu items cannot be saved."""
        response = post_json(customer_client, "/api/favorites", {"menu_item_id": 999999})

        assert response.status_code == 400

    def test_remove_favorite(self, customer_client: DjangoClient, user) -> None:
        """DELETE removes a favorite."""
        favorite = FavoriteFactory(user=user)

        response = customer_client.delete(f"/api/favorites/{favorite.pk}")

        assert response.status_code == 200
        assert not Favorite.objects.filter(pk=favorite.pk).exists()

    def test_remove_other_users_favorite(self, customer_client: DjangoClient) -> None:
        """Another user's favorite is a 404."""
        favorite = FavoriteFactory()

        response = customer_client.delete(f"/api/favorites/{favorite.pk}")

        assert response.status_code == 404
