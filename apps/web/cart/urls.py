"""
URL routing for cart and favorites API endpoints.

All endpoints require a bearer token and act on the current user only.
"""

from django.urls import path

from apps.web.cart import views

app_name = "cart"

urlpatterns = [
    path("cart", views.cart, name="cart"),
    path("cart/<int:item_id>", views.cart_item, name="cart_item"),
    path("favorites", views.favorites, name="favorites"),
    path("favorites/<int:favorite_id>", views.favorite, name="favorite"),
]
