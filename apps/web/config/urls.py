"""
URL configuration for Platter.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # JSON API
    path("api/", include("apps.web.cart.urls")),
    path("api/", include("apps.web.restaurant.urls")),
    path("api/", include("apps.web.core.urls")),
]
