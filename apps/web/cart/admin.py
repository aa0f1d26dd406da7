"""Admin registration for cart models."""

from django.contrib import admin

from apps.web.cart.models import CartItem, Favorite


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    """Admin for cart items."""

    list_display = ["user", "menu_item", "quantity", "created_at"]
    list_filter = ["menu_item__category__restaurant"]
    search_fields = ["user__username", "menu_item__name"]
    raw_id_fields = ["user", "menu_item"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    """Admin for favorites."""

    list_display = ["user", "menu_item", "created_at"]
    search_fields = ["user__username", "menu_item__name"]
    raw_id_fields = ["user", "menu_item"]
    readonly_fields = ["created_at", "updated_at"]
