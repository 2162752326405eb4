"""Route registration for attribute endpoints."""
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import FieldDefinitionViewSet, FieldTemplateViewSet, TemplateApplicationViewSet, health

router = DefaultRouter()
router.register("fields", FieldDefinitionViewSet, basename="field-definition")
router.register("templates", FieldTemplateViewSet, basename="field-template")
router.register("template-applications", TemplateApplicationViewSet, basename="template-application")

urlpatterns = [
    path("healthz/", health, name="attribute-health"),
    path("", include(router.urls)),
]
