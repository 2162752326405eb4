"""Celery application for the attribute service."""
from __future__ import annotations

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "attribute_service.settings")

app = Celery("attribute_service")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
