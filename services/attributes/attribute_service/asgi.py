"""ASGI config for the attribute service."""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "attribute_service.settings")

application = get_asgi_application()
