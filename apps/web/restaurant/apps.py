"""Django app configuration for the restaurant module."""

from django.apps import AppConfig


class RestaurantConfig(AppConfig):
    """Restaurants, menus and order fulfillment."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.restaurant"
    verbose_name = "Restaurants & Orders"
