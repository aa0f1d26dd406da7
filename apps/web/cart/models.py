"""
Cart models - server copies of the customer's cart and favorites.

Both are owned by a single user and scoped with UserOwnedManager.
"""

from django.db import models

from platter_schemas import CustomizationKey, customization_key, parse_customizations

from apps.web.core.models import UserOwnedModel
from apps.web.restaurant.models import MenuItem


class CartItem(UserOwnedModel):
    """
    A menu item selection in the cart.

    At most one row per (user, menu item, customizations); adding an
    identical selection increases the quantity instead.
    """

    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    quantity = models.PositiveIntegerField(default=1)
    customizations = models.JSONField(
        default=dict,
        blank=True,
        help_text="Selected options by group name",
    )

    class Meta:
        ordering = ["created_at", "pk"]
        indexes = [
            models.Index(fields=["user", "menu_item"], name="cartitem_user_item_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.menu_item.name}"

    @property
    def selection_key(self) -> CustomizationKey:
        return customization_key(parse_customizations(self.customizations))


class Favorite(UserOwnedModel):
    """A saved menu item. At most one per (user, menu item)."""

    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="favorites",
    )

    class Meta:
        ordering = ["created_at", "pk"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "menu_item"],
                name="unique_favorite_per_user_item",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user} likes {self.menu_item.name}"
