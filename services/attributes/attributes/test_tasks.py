"""Tests for the queue-backed template application task."""
from __future__ import annotations

from django.test import TestCase

from .models import FieldDefinition, FieldTemplate, TemplateApplication
from .tasks import process_template_application


class ProcessTemplateApplicationTests(TestCase):
    def setUp(self) -> None:
        FieldTemplate.objects.create(
            code="HARDWARE",
            name="Hardware",
            field_configs=[
                {"name": "voltage", "label": "Voltage", "field_type": "decimal"},
                {"name": "warranty_months", "label": "Warranty", "field_type": "integer"},
            ],
        )

    def test_completes_and_records_created_fields(self) -> None:
        FieldDefinition.objects.create(name="voltage", label="Voltage", applies_to="category")
        application = TemplateApplication.objects.create(template_code="HARDWARE", applies_to="category")

        process_template_application.apply(args=[str(application.id)])

        application.refresh_from_db()
        self.assertEqual(application.status, TemplateApplication.COMPLETED)
        self.assertEqual(application.created_fields, ["warranty_months"])
        self.assertEqual(application.skipped_fields, ["voltage"])
        self.assertIsNotNone(application.completed_at)
        self.assertTrue(FieldDefinition.objects.filter(applies_to="category", name="warranty_months").exists())

    def test_unknown_template_fails_without_retry(self) -> None:
        application = TemplateApplication.objects.create(template_code="NOPE")

        process_template_application.apply(args=[str(application.id)])

        application.refresh_from_db()
        self.assertEqual(application.status, TemplateApplication.FAILED)
        self.assertIn("NOPE", application.error_message)

    def test_completed_application_is_not_reprocessed(self) -> None:
        application = TemplateApplication.objects.create(template_code="HARDWARE")
        application.mark_completed(created=[], skipped=[])

        process_template_application.apply(args=[str(application.id)])

        self.assertFalse(FieldDefinition.objects.exists())

    def test_missing_application_is_ignored(self) -> None:
        with self.assertLogs("attributes.tasks", level="WARNING"):
            process_template_application.apply(args=["00000000-0000-0000-0000-000000000000"])
