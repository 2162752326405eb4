"""WSGI config for the attribute service."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "attribute_service.settings")

application = get_wsgi_application()
