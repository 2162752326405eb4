"""URL configuration for the attribute service."""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("attributes.urls")),
]
