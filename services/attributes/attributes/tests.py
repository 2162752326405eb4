"""API tests for the attribute service."""
from __future__ import annotations

import uuid
from unittest import mock

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from .models import FieldDefinition, FieldTemplate, TemplateApplication
from .tasks import process_template_application


class FieldDefinitionApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def test_create_normalizes_configuration(self) -> None:
        payload = {
            "name": " Shoe_Size ",
            "label": "Shoe size",
            "field_type": "select",
            "applies_to": "product",
            "options": ["38", {"codigo": "39", "nombre": "Thirty nine"}, {"label": "broken"}],
            "validation_rules": {"minLength": 1, "unknown": True},
            "default_value": "38",
            "required": True,
        }

        response = self.client.post(reverse("field-definition-list"), payload, format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["name"], "shoe_size")
        self.assertEqual(
            response.data["options"],
            [{"value": "38", "label": "38"}, {"value": "39", "label": "Thirty nine"}],
        )
        self.assertEqual(response.data["validation_rules"], {"minLength": 1})
        self.assertEqual(response.data["diagnostics"], [])

    def test_duplicate_name_in_scope_is_rejected(self) -> None:
        FieldDefinition.objects.create(name="color", label="Color")
        url = reverse("field-definition-list")

        duplicate = self.client.post(url, {"name": "color", "label": "Colour"}, format="json")
        other_scope = self.client.post(
            url, {"name": "color", "label": "Color", "applies_to": "supplier"}, format="json"
        )

        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.data["name"], ["must be unique"])
        self.assertEqual(other_scope.status_code, 201)

    def test_configuration_errors(self) -> None:
        url = reverse("field-definition-list")
        cases = [
            ({"name": "9lives", "label": "x"}, "name"),
            ({"name": "stock", "label": "x", "validation_rules": {"min": 5, "max": 1}}, "validation_rules"),
            ({"name": "stock", "label": "x", "validation_rules": {"minLength": -1}}, "validation_rules"),
            ({"name": "stock", "label": "x", "options": "a,b"}, "options"),
            ({"name": "stock", "label": "x", "field_type": "integer", "default_value": "many"}, "default_value"),
        ]
        for payload, field in cases:
            with self.subTest(payload=payload):
                response = self.client.post(url, payload, format="json")
                self.assertEqual(response.status_code, 400)
                self.assertIn(field, response.data)

    def test_default_value_is_parsed_per_type(self) -> None:
        url = reverse("field-definition-list")
        boolean = self.client.post(
            url, {"name": "fragile", "label": "Fragile", "field_type": "boolean", "default_value": "sí"}, format="json"
        )
        tags = self.client.post(
            url,
            {
                "name": "tags",
                "label": "Tags",
                "field_type": "multi_select",
                "options": ["a", "b"],
                "default_value": "a, b",
            },
            format="json",
        )
        blank = self.client.post(
            url, {"name": "stock", "label": "Stock", "field_type": "integer", "default_value": " "}, format="json"
        )

        self.assertIs(boolean.data["default_value"], True)
        self.assertEqual(tags.data["default_value"], ["a", "b"])
        self.assertIsNone(blank.data["default_value"])

    def test_invalid_pattern_is_saved_with_diagnostic(self) -> None:
        response = self.client.post(
            reverse("field-definition-list"),
            {"name": "sku", "label": "SKU", "validation_rules": {"pattern": "([A-Z"}},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.data["diagnostics"]), 1)
        self.assertTrue(response.data["diagnostics"][0].startswith("pattern ignored"))

    def test_list_filters_and_soft_delete(self) -> None:
        keep = FieldDefinition.objects.create(name="brand", label="Brand", field_type="text")
        drop = FieldDefinition.objects.create(name="stock", label="Stock", field_type="integer")
        FieldDefinition.objects.create(name="vat_id", label="VAT", applies_to="supplier")

        delete_response = self.client.delete(reverse("field-definition-detail", args=[drop.id]))
        listing = self.client.get(reverse("field-definition-list"), {"applies_to": "product", "is_active": "true"})
        searched = self.client.get(reverse("field-definition-list"), {"search": "vat"})

        self.assertEqual(delete_response.status_code, 204)
        drop.refresh_from_db()
        self.assertFalse(drop.is_active)
        self.assertEqual([item["id"] for item in listing.data], [keep.id])
        self.assertEqual([item["name"] for item in searched.data], ["vat_id"])

    def test_validate_value_endpoint(self) -> None:
        field = FieldDefinition.objects.create(
            name="stock", label="Stock", field_type="integer", validation_rules={"min": 0}
        )
        url = reverse("field-definition-validate", args=[field.id])

        ok = self.client.post(url, {"value": 3}, format="json")
        bad = self.client.post(url, {"value": -1}, format="json")

        self.assertEqual(ok.data, {"valid": True})
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.data, {"valid": False, "errors": ["Must be >= 0"]})


class ScopeApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        FieldDefinition.objects.create(name="weight", label="Weight", field_type="decimal", group="Logistics", order=2)
        FieldDefinition.objects.create(
            name="fragile", label="Fragile", field_type="boolean", group="Logistics", order=1, default_value=True
        )
        FieldDefinition.objects.create(name="sku", label="SKU", required=True, validation_rules={"maxLength": 6})
        FieldDefinition.objects.create(name="retired", label="Retired", required=True, is_active=False)

    def test_scope_listing(self) -> None:
        response = self.client.get(reverse("field-definition-scope", args=["product"]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["name"] for item in response.data], ["sku", "fragile", "weight"])

    def test_grouped_scope_listing(self) -> None:
        response = self.client.get(reverse("field-definition-scope", args=["product"]), {"grouped": "true"})

        self.assertEqual([group["id"] for group in response.data], ["ungrouped", "Logistics"])
        self.assertEqual([field["name"] for field in response.data[1]["fields"]], ["fragile", "weight"])

    def test_unknown_scope(self) -> None:
        response = self.client.get(reverse("field-definition-scope", args=["warehouse"]))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"detail": "Unknown scope: warehouse"})

    def test_form_description(self) -> None:
        response = self.client.get(reverse("field-definition-scope-form", args=["product"]))

        logistics = response.data[1]
        self.assertEqual(logistics["fields"][0]["name"], "fragile")
        self.assertEqual(logistics["fields"][0]["control"]["kind"], "toggle")
        self.assertIs(logistics["fields"][0]["value"], True)

    def test_payload_reports_errors(self) -> None:
        response = self.client.post(
            reverse("field-definition-scope-payload", args=["product"]),
            {"values": {"sku": "TOO-LONG-SKU", "weight": "heavy"}},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.data["errors"],
            {"sku": ["Must be at most 6 characters"], "weight": ["Must be a valid number"]},
        )

    def test_payload_with_defaults(self) -> None:
        response = self.client.post(
            reverse("field-definition-scope-payload", args=["product"]),
            {"values": {"sku": " AB-1 ", "weight": 2.5}, "apply_defaults": True},
            format="json",
        )

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["attributes"], {"sku": "AB-1", "fragile": True, "weight": 2.5})


class FieldTemplateApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def _template_payload(self, **overrides):
        payload = {
            "code": "food",
            "name": "Food",
            "industry": "food",
            "color": "#22AA44",
            "field_configs": [
                {"name": "expires_on", "label": "Expires on", "field_type": "date", "required": True},
                {"name": "allergens", "label": "Allergens", "field_type": "multi_select", "options": ["gluten"]},
            ],
        }
        payload.update(overrides)
        return payload

    def test_create_and_fetch_by_code(self) -> None:
        response = self.client.post(reverse("field-template-list"), self._template_payload(), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["code"], "FOOD")
        self.assertEqual(response.data["field_configs"][1]["options"], [{"value": "gluten", "label": "gluten"}])

        detail = self.client.get(reverse("field-template-detail", args=["food"]))
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.data["name"], "Food")

    def test_template_validation(self) -> None:
        url = reverse("field-template-list")
        duplicate = self.client.post(
            url,
            self._template_payload(
                field_configs=[
                    {"name": "brand", "label": "Brand", "field_type": "text"},
                    {"name": "brand", "label": "Brand again", "field_type": "text"},
                ]
            ),
            format="json",
        )
        empty = self.client.post(url, self._template_payload(code="EMPTY", field_configs=[]), format="json")
        bad_code = self.client.post(url, self._template_payload(code="food pack"), format="json")
        bad_color = self.client.post(url, self._template_payload(code="F2", color="green"), format="json")

        self.assertEqual(duplicate.status_code, 400)
        self.assertIn("field_configs", duplicate.data)
        self.assertEqual(empty.status_code, 400)
        self.assertEqual(bad_code.status_code, 400)
        self.assertIn("code", bad_code.data)
        self.assertEqual(bad_color.status_code, 400)
        self.assertIn("color", bad_color.data)

    def test_apply_template(self) -> None:
        self.client.post(reverse("field-template-list"), self._template_payload(), format="json")
        url = reverse("field-template-apply", args=["FOOD"])

        first = self.client.post(url, {}, format="json")
        second = self.client.post(url, {"applies_to": None}, format="json")

        self.assertEqual(first.status_code, 201, first.data)
        self.assertEqual([field["name"] for field in first.data["created"]], ["expires_on", "allergens"])
        self.assertEqual(first.data["template"]["code"], "FOOD")
        self.assertEqual(second.status_code, 200)
        self.assertEqual(second.data["created"], [])
        self.assertEqual(second.data["skipped"], ["expires_on", "allergens"])

    def test_apply_unknown_template(self) -> None:
        response = self.client.post(reverse("field-template-apply", args=["NOPE"]), {}, format="json")

        self.assertEqual(response.status_code, 404)

    def test_soft_delete_and_filters(self) -> None:
        FieldTemplate.objects.create(code="AUTO", name="Automotive", industry="automotive", field_configs=[])
        self.client.post(reverse("field-template-list"), self._template_payload(), format="json")

        self.client.delete(reverse("field-template-detail", args=["auto"]))
        active = self.client.get(reverse("field-template-list"), {"is_active": "true"})

        self.assertFalse(FieldTemplate.objects.get(code="AUTO").is_active)
        self.assertEqual([item["code"] for item in active.data], ["FOOD"])


class TemplateApplicationApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        FieldTemplate.objects.create(
            code="PHARMA",
            name="Pharma",
            field_configs=[{"name": "lot", "label": "Lot", "field_type": "text"}],
        )

    @mock.patch("attributes.views.process_template_application.delay")
    def test_submit_application_is_queued(self, delay) -> None:
        response = self.client.post(
            reverse("template-application-list"), {"template_code": "pharma"}, format="json"
        )

        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.data["status"], TemplateApplication.PENDING)
        self.assertEqual(response.data["template_code"], "PHARMA")
        delay.assert_called_once_with(response.data["id"])

    @mock.patch("attributes.views.process_template_application.delay")
    def test_failed_reference_is_requeued(self, delay) -> None:
        reference = uuid.uuid4()
        application = TemplateApplication.objects.create(client_reference=reference, template_code="PHARMA")
        application.mark_failed("broker unavailable")

        response = self.client.post(
            reverse("template-application-list"),
            {"template_code": "PHARMA", "client_reference": str(reference)},
            format="json",
        )

        self.assertEqual(response.status_code, 202)
        application.refresh_from_db()
        self.assertEqual(application.status, TemplateApplication.PENDING)
        self.assertEqual(application.error_message, "")
        self.assertEqual(TemplateApplication.objects.count(), 1)
        delay.assert_called_once_with(str(application.id))

    @mock.patch("attributes.views.process_template_application.delay")
    def test_completed_reference_is_returned(self, delay) -> None:
        reference = uuid.uuid4()
        application = TemplateApplication.objects.create(client_reference=reference, template_code="PHARMA")
        application.mark_completed(created=["lot"], skipped=[])

        response = self.client.post(
            reverse("template-application-list"),
            {"template_code": "PHARMA", "client_reference": str(reference)},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["created_fields"], ["lot"])
        delay.assert_not_called()

    def test_submit_and_process_eagerly(self) -> None:
        with mock.patch("attributes.views.process_template_application.delay") as delay:
            delay.side_effect = lambda application_id: process_template_application.apply(args=[application_id])
            response = self.client.post(
                reverse("template-application-list"), {"template_code": "PHARMA"}, format="json"
            )

        detail = self.client.get(reverse("template-application-detail", args=[response.data["id"]]))
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.data["status"], TemplateApplication.COMPLETED)
        self.assertEqual(detail.data["created_fields"], ["lot"])


class HealthTests(TestCase):
    def test_health(self) -> None:
        response = APIClient().get(reverse("attribute-health"))
        self.assertEqual(response.data, {"status": "ok"})
