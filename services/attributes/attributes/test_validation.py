"""Tests for field-local value validation."""
from __future__ import annotations

from django.test import SimpleTestCase

from .schema import FieldSpec
from .validation import first_errors, is_empty, pattern_diagnostic, validate_value, validate_values

AB_OPTIONS = [{"value": "a", "label": "A"}, {"value": "b", "label": "B"}]


class RequiredValueTests(SimpleTestCase):
    def test_required_non_boolean_empty_values_only_report_required(self) -> None:
        for field_type in ("text", "long_text", "integer", "decimal", "date", "select", "email", "url", "color"):
            field = FieldSpec(
                name="sku",
                field_type=field_type,
                required=True,
                validation_rules={"minLength": 3, "pattern": "^[A-Z]+$"},
            )
            for value in (None, "", "   ", "\t\n"):
                with self.subTest(field_type=field_type, value=value):
                    self.assertEqual(validate_value(field, value), ["Value required"])

    def test_required_multi_select_rejects_empty_list(self) -> None:
        field = FieldSpec(name="tags", field_type="multi_select", required=True, options=AB_OPTIONS)
        self.assertEqual(validate_value(field, []), ["Value required"])

    def test_required_boolean_accepts_false(self) -> None:
        field = FieldSpec(name="fragile", field_type="boolean", required=True)
        self.assertEqual(validate_value(field, False), [])
        self.assertEqual(validate_value(field, None), ["Value required"])

    def test_optional_empty_value_is_valid(self) -> None:
        field = FieldSpec(name="weight", field_type="decimal", validation_rules={"min": 1})
        self.assertEqual(validate_value(field, ""), [])

    def test_zero_is_not_empty(self) -> None:
        self.assertFalse(is_empty(0))
        self.assertFalse(is_empty(False))
        self.assertTrue(is_empty("  "))


class ShapeTests(SimpleTestCase):
    def test_select_round_trip(self) -> None:
        field = FieldSpec(name="size", field_type="select", options=AB_OPTIONS)
        self.assertEqual(validate_value(field, "a"), [])
        self.assertEqual(validate_value(field, "b"), [])
        self.assertEqual(validate_value(field, "c"), ["Must select a valid option"])

        unconstrained = FieldSpec(name="size", field_type="select", options=[])
        self.assertEqual(validate_value(unconstrained, "c"), [])

    def test_select_compares_stringified_values(self) -> None:
        field = FieldSpec(name="grade", field_type="select", options=[1, 2, 3])
        self.assertEqual(validate_value(field, 2), [])
        self.assertEqual(validate_value(field, "2"), [])

    def test_multi_select(self) -> None:
        field = FieldSpec(name="tags", field_type="multi_select", options=AB_OPTIONS)
        self.assertEqual(validate_value(field, ["a", "b"]), [])
        self.assertEqual(validate_value(field, ["a", "z"]), ["Contains invalid options"])
        self.assertEqual(validate_value(field, "a"), ["Must select valid options"])

    def test_integer_and_decimal(self) -> None:
        integer = FieldSpec(name="stock", field_type="integer")
        self.assertEqual(validate_value(integer, 4), [])
        self.assertEqual(validate_value(integer, 4.0), [])
        self.assertEqual(validate_value(integer, 4.5), ["Must be a whole number"])
        self.assertEqual(validate_value(integer, "4"), ["Must be a whole number"])
        self.assertEqual(validate_value(integer, True), ["Must be a whole number"])

        decimal = FieldSpec(name="weight", field_type="decimal")
        self.assertEqual(validate_value(decimal, 2.5), [])
        self.assertEqual(validate_value(decimal, float("nan")), ["Must be a valid number"])
        self.assertEqual(validate_value(decimal, "2.5"), ["Must be a valid number"])

    def test_boolean_requires_real_boolean(self) -> None:
        field = FieldSpec(name="fragile", field_type="boolean")
        self.assertEqual(validate_value(field, True), [])
        self.assertEqual(validate_value(field, "true"), ["Must be true or false"])

    def test_date(self) -> None:
        field = FieldSpec(name="expires", field_type="date")
        self.assertEqual(validate_value(field, "2024-02-29"), [])
        self.assertEqual(validate_value(field, "2024-02-29T10:30:00"), [])
        self.assertEqual(validate_value(field, "2024/05/01"), [])
        self.assertEqual(validate_value(field, "05/01/2024"), [])
        self.assertEqual(validate_value(field, "2024/02/30"), ["Must be a valid date"])
        self.assertEqual(validate_value(field, "2023-02-29"), ["Must be a valid date"])
        self.assertEqual(validate_value(field, "tomorrow"), ["Must be a valid date"])

    def test_text_patterns(self) -> None:
        cases = [
            ("email", "ops@example.com", "not-an-email", "Must be a valid email"),
            ("phone", "+34 600 123 456", "call me", "Must be a valid phone number"),
            ("url", "https://example.com/item", "example", "Must be a valid URL"),
            ("color", "#A1B2C3", "red", "Must be a valid hex color"),
        ]
        for field_type, good, bad, message in cases:
            field = FieldSpec(name="contact", field_type=field_type)
            with self.subTest(field_type=field_type):
                self.assertEqual(validate_value(field, good), [])
                self.assertEqual(validate_value(field, bad), [message])

    def test_unknown_type_validates_as_text(self) -> None:
        field = FieldSpec(name="legacy", field_type="geo_point", validation_rules={"maxLength": 2})
        self.assertEqual(validate_value(field, "abc"), ["Must be at most 2 characters"])


class RuleTests(SimpleTestCase):
    def test_numeric_bounds(self) -> None:
        field = FieldSpec(name="stock", field_type="integer", validation_rules={"min": 0, "max": 10})
        self.assertEqual(validate_value(field, -1), ["Must be >= 0"])
        self.assertEqual(validate_value(field, 11), ["Must be <= 10"])
        self.assertEqual(validate_value(field, 0), [])

    def test_length_bounds_and_pattern(self) -> None:
        field = FieldSpec(
            name="sku",
            validation_rules={"minLength": 3, "maxLength": 5, "pattern": "^[A-Z]+$"},
        )
        self.assertEqual(validate_value(field, "ab"), ["Must be at least 3 characters", "Invalid format"])
        self.assertEqual(validate_value(field, "ABCDEF"), ["Must be at most 5 characters"])
        self.assertEqual(validate_value(field, "ABC"), [])

    def test_invalid_pattern_is_ignored(self) -> None:
        field = FieldSpec(name="sku", validation_rules={"pattern": "[unclosed"})
        with self.assertLogs("attributes.validation", level="WARNING"):
            self.assertEqual(validate_value(field, "anything"), [])
        self.assertTrue(pattern_diagnostic(field.validation_rules).startswith("pattern ignored:"))
        self.assertIsNone(pattern_diagnostic({"pattern": "^ok$"}))

    def test_multi_select_counts(self) -> None:
        field = FieldSpec(
            name="tags",
            field_type="multi_select",
            options=["a", "b", "c"],
            validation_rules={"minLength": 2, "maxLength": 2},
        )
        self.assertEqual(validate_value(field, ["a"]), ["Must select at least 2 options"])
        self.assertEqual(validate_value(field, ["a", "b", "c"]), ["Must select at most 2 options"])


class ValidateValuesTests(SimpleTestCase):
    def test_only_active_invalid_fields_are_reported(self) -> None:
        fields = [
            FieldSpec(name="sku", required=True),
            FieldSpec(name="stock", field_type="integer", validation_rules={"min": 0}),
            FieldSpec(name="retired", required=True, is_active=False),
            {"name": "color", "type": "color"},
        ]
        errors = validate_values(fields, {"stock": -2, "color": "#fff"})
        self.assertEqual(errors, {"sku": ["Value required"], "stock": ["Must be >= 0"]})
        self.assertEqual(first_errors(errors), {"sku": "Value required", "stock": "Must be >= 0"})
