"""Django app configuration for the cart module."""

from django.apps import AppConfig


class CartConfig(AppConfig):
    """Server-side cart and favorites."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.cart"
    verbose_name = "Carts & Favorites"
