"""
URL configuration for the food ordering platform.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # Public API endpoints
    path("api/", include("apps.web.core.urls")),
    path("api/", include("apps.web.restaurant.urls")),
]
