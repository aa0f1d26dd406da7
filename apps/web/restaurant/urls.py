"""
URL routing for menu and order API endpoints.

All endpoints return JSON and are CORS-enabled; order endpoints require a
bearer token.
"""

from django.urls import path

from apps.web.restaurant import views

app_name = "restaurant"

urlpatterns = [
    # Menu endpoints
    path("restaurants/<int:restaurant_id>/menu", views.menu, name="menu"),
    # Order endpoints
    path("orders", views.orders, name="orders"),
    path("orders/restaurant", views.restaurant_orders, name="restaurant_orders"),
    path("orders/<int:order_id>", views.order_detail, name="order_detail"),
    path("orders/<int:order_id>/status", views.order_status, name="order_status"),
]
