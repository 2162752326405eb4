"""Background tasks for the attribute service."""
from __future__ import annotations

import logging

from celery import shared_task
from django.db import transaction

from .exceptions import AttributeEngineError
from .models import TemplateApplication
from .template_engine import apply_template

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=5)
def process_template_application(self, application_id: str) -> None:
    """Apply a template in the background so large bundles do not block requests."""

    application: TemplateApplication | None = None
    try:
        with transaction.atomic():
            application = TemplateApplication.objects.select_for_update().get(id=application_id)
            if application.status == TemplateApplication.COMPLETED:
                logger.info("Template application %s already completed", application_id)
                return
            if application.status == TemplateApplication.PROCESSING:
                logger.info("Template application %s already processing", application_id)
                return
            application.mark_processing()

        try:
            result = apply_template(application.template_code, application.applies_to or None)
        except AttributeEngineError as exc:
            logger.warning("Template application %s rejected: %s", application_id, exc)
            application.mark_failed(str(exc))
            return

        application.mark_completed(
            created=[field.name for field in result.created],
            skipped=result.skipped,
        )
        logger.info(
            "Template %s applied from request %s (%d created)",
            application.template_code,
            application_id,
            len(result.created),
        )
    except TemplateApplication.DoesNotExist:
        logger.warning("Template application %s does not exist", application_id)
    except Exception as exc:  # pragma: no cover - retries exercised in production
        logger.exception("Processing template application %s failed", application_id)
        if application is not None:
            if self.request.retries >= self.max_retries:
                application.mark_failed(str(exc))
                return
            application.status = TemplateApplication.PENDING
            application.save(update_fields=["status", "updated_at"])
        raise self.retry(exc=exc, countdown=min(60, 2 ** self.request.retries))
