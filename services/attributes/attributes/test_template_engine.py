"""Tests for template application and field lookups."""
from __future__ import annotations

from django.test import TestCase

from . import repository
from .exceptions import InvalidScopeError, NotFoundError
from .models import FieldDefinition, FieldTemplate
from .template_engine import apply_template, expand_entry, get_template, list_templates


def make_template(**overrides) -> FieldTemplate:
    values = {
        "code": "RETAIL",
        "name": "Retail",
        "industry": "retail",
        "field_configs": [
            {"name": "brand", "label": "Brand", "field_type": "text"},
            {"name": "size", "label": "Size", "type": "select", "options": ["S", "M"], "group": "Sizing"},
            {"name": "fragile", "label": "Fragile", "field_type": "boolean", "applies_to": "movement"},
        ],
    }
    values.update(overrides)
    return FieldTemplate.objects.create(**values)


class ApplyTemplateTests(TestCase):
    def test_creates_fields_with_template_fallbacks(self) -> None:
        make_template()

        result = apply_template("retail")

        self.assertEqual([field.name for field in result.created], ["brand", "size", "fragile"])
        self.assertEqual(result.skipped, [])
        brand = FieldDefinition.objects.get(applies_to="product", name="brand")
        self.assertEqual(brand.group, "Retail")
        self.assertEqual(brand.industry, "retail")
        self.assertEqual(brand.order, 1)
        size = FieldDefinition.objects.get(applies_to="product", name="size")
        self.assertEqual(size.field_type, "select")
        self.assertEqual(size.group, "Sizing")
        self.assertEqual(size.order, 2)
        self.assertTrue(FieldDefinition.objects.filter(applies_to="movement", name="fragile").exists())

    def test_applying_twice_creates_nothing_and_keeps_existing_fields(self) -> None:
        make_template()
        FieldDefinition.objects.create(name="brand", label="Marca", applies_to="product", order=9)

        first = apply_template("RETAIL")
        second = apply_template("RETAIL")

        self.assertEqual(first.skipped, ["brand"])
        self.assertEqual(second.created, [])
        self.assertEqual(sorted(second.skipped), ["brand", "fragile", "size"])
        brand = FieldDefinition.objects.get(applies_to="product", name="brand")
        self.assertEqual(brand.label, "Marca")
        self.assertEqual(brand.order, 9)
        self.assertEqual(FieldDefinition.objects.count(), 3)

    def test_explicit_scope_overrides_entries(self) -> None:
        make_template()

        apply_template("RETAIL", applies_to="supplier")

        self.assertEqual(
            sorted(FieldDefinition.objects.filter(applies_to="supplier").values_list("name", flat=True)),
            ["brand", "fragile", "size"],
        )

    def test_malformed_entries_are_rejected(self) -> None:
        make_template(
            field_configs=[
                {"name": "Bad Name", "field_type": "text"},
                {"name": "weird", "field_type": "hologram"},
                {"name": "ok", "field_type": "integer"},
            ]
        )

        with self.assertLogs("attributes.template_engine", level="WARNING"):
            result = apply_template("RETAIL")

        self.assertEqual([field.name for field in result.created], ["ok"])
        self.assertEqual(result.rejected, ["Bad Name", "weird"])
        self.assertEqual(FieldDefinition.objects.get(name="ok").label, "ok")

    def test_unknown_and_inactive_templates(self) -> None:
        make_template(is_active=False)

        with self.assertRaises(NotFoundError):
            apply_template("MISSING")
        with self.assertRaises(NotFoundError):
            apply_template("RETAIL")
        with self.assertRaises(InvalidScopeError):
            apply_template("RETAIL", applies_to="warehouse")

    def test_expand_entry_keeps_explicit_values(self) -> None:
        template = make_template().to_spec()
        attributes = expand_entry(
            template,
            {"name": "stock", "type": "integer", "order": 0, "industry": "food", "required": True},
            position=4,
        )
        self.assertEqual(attributes["order"], 0)
        self.assertEqual(attributes["industry"], "food")
        self.assertTrue(attributes["required"])
        self.assertTrue(attributes["visible_in_detail"])

    def test_expand_entry_ignores_boolean_order(self) -> None:
        template = make_template().to_spec()
        attributes = expand_entry(template, {"name": "stock", "field_type": "integer", "order": True}, position=3)
        self.assertEqual(attributes["order"], 3)


class RepositoryTests(TestCase):
    def setUp(self) -> None:
        FieldDefinition.objects.create(name="weight", label="Weight", order=2, group="Logistics", visible_in_list=True)
        FieldDefinition.objects.create(name="alcohol", label="Alcohol", order=1, industry="food, beverages")
        FieldDefinition.objects.create(name="torque", label="Torque", order=1, industry="automotive")
        FieldDefinition.objects.create(name="archived", label="Archived", is_active=False)
        FieldDefinition.objects.create(name="vat_id", label="VAT", applies_to="supplier")

    def test_scope_listing_is_ordered_and_active(self) -> None:
        names = [field.name for field in repository.get_field_definitions("product")]
        self.assertEqual(names, ["alcohol", "torque", "weight"])

    def test_industry_filter_keeps_untagged_fields(self) -> None:
        names = [field.name for field in repository.get_field_definitions("product", industry="beverages")]
        self.assertEqual(names, ["alcohol", "weight"])

    def test_visibility_filter_and_grouping(self) -> None:
        listed = repository.get_field_definitions("product", visible_in_list=True)
        self.assertEqual([field.name for field in listed], ["weight"])

        grouped = repository.get_field_definitions("product", grouped=True)
        self.assertEqual(list(grouped), ["", "Logistics"])

    def test_template_lookup(self) -> None:
        make_template()
        make_template(code="FOOD", name="Food", industry="food", is_active=False)

        self.assertEqual(repository.get_template_by_code(" retail ").code, "RETAIL")
        self.assertEqual(get_template("Food").name, "Food")
        with self.assertRaises(NotFoundError):
            get_template("")
        self.assertEqual([template.code for template in list_templates(is_active=True)], ["RETAIL"])
        self.assertEqual([template.code for template in list_templates(industry="foo")], ["FOOD"])
