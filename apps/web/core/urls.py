"""
URL patterns for user API endpoints.
"""

from django.urls import path

from apps.web.core import views

app_name = "core"

urlpatterns = [
    path("users/addresses", views.address_list, name="address_list"),
]
