"""Tests for option normalization, grouping and control descriptions."""
from __future__ import annotations

import random

from django.test import SimpleTestCase

from .field_types import FieldType
from .grouping import UNGROUPED_ID, Group, group_fields, normalize_groups
from .options import normalize_options, option_values, stringify
from .rendering import coerce_input, control_for, describe_field
from .schema import FieldSpec


class OptionTests(SimpleTestCase):
    def test_primitives_and_mappings(self) -> None:
        options = normalize_options(
            [
                "red",
                3,
                2.0,
                True,
                {"value": "xl", "label": "Extra large"},
                {"codigo": "M", "nombre": "Medium"},
                {"id": 7},
            ]
        )
        self.assertEqual(
            [option.as_dict() for option in options],
            [
                {"value": "red", "label": "red"},
                {"value": "3", "label": "3"},
                {"value": "2", "label": "2"},
                {"value": "true", "label": "true"},
                {"value": "xl", "label": "Extra large"},
                {"value": "M", "label": "Medium"},
                {"value": "7", "label": "7"},
            ],
        )

    def test_unresolvable_entries_are_dropped(self) -> None:
        self.assertEqual(option_values([{"label": "no value"}, {"value": None}, None, "ok"]), ["ok"])
        self.assertEqual(normalize_options("a,b"), [])
        self.assertEqual(normalize_options(None), [])

    def test_blank_value_is_a_valid_choice(self) -> None:
        options = normalize_options([{"value": "", "label": "None"}, ""])
        self.assertEqual(
            [option.as_dict() for option in options],
            [{"value": "", "label": "None"}, {"value": "", "label": ""}],
        )

    def test_stringify(self) -> None:
        self.assertEqual(stringify(True), "true")
        self.assertEqual(stringify(1.0), "1")
        self.assertEqual(stringify(1.5), "1.5")


class GroupingTests(SimpleTestCase):
    def test_order_is_independent_of_input_order(self) -> None:
        fields = [
            FieldSpec(name="Zeta", order=1),
            FieldSpec(name="álamo", order=1),
            FieldSpec(name="beta", order=1),
            FieldSpec(name="first", order=0),
        ]
        expected = ["first", "álamo", "beta", "Zeta"]
        for _ in range(5):
            shuffled = fields[:]
            random.shuffle(shuffled)
            groups = normalize_groups([{"id": "main", "title": "Main", "fields": shuffled}])
            self.assertEqual([spec.name for spec in groups[0].fields], expected)

    def test_mapping_input_keeps_group_order_and_merges_ungrouped(self) -> None:
        groups = normalize_groups(
            {
                "Logistics": [{"name": "weight", "order": 2}, {"name": "height", "order": 1}],
                "": [{"name": "notes"}],
                None: [{"name": "color"}],
            }
        )
        self.assertEqual([group.id for group in groups], ["Logistics", UNGROUPED_ID])
        self.assertEqual([spec.name for spec in groups[0].fields], ["height", "weight"])
        self.assertEqual([spec.name for spec in groups[1].fields], ["color", "notes"])
        self.assertEqual(groups[1].title, "Ungrouped")

    def test_list_input_fills_missing_group_attributes(self) -> None:
        groups = normalize_groups(
            [
                {"nombre": "Datos", "campos": [{"name": "b"}, {"name": "a"}], "descripcion": "Basic"},
                {"fields": []},
                "not a group",
            ]
        )
        self.assertEqual(len(groups), 2)
        self.assertEqual(groups[0].id, "group-0")
        self.assertEqual(groups[0].title, "Datos")
        self.assertEqual(groups[0].description, "Basic")
        self.assertEqual([spec.name for spec in groups[0].fields], ["a", "b"])
        self.assertEqual(groups[1].title, "Group 2")
        self.assertEqual(groups[1].columns, 2)

    def test_group_instances_are_accepted(self) -> None:
        group = Group(id="g", title="G", fields=[FieldSpec(name="b"), FieldSpec(name="a")])
        self.assertEqual([spec.name for spec in normalize_groups([group])[0].fields], ["a", "b"])
        self.assertEqual(normalize_groups(None), [])

    def test_group_fields_buckets_by_group(self) -> None:
        grouped = group_fields([FieldSpec(name="a", group="Main"), FieldSpec(name="b"), FieldSpec(name="c", group="Main")])
        self.assertEqual(list(grouped), ["Main", ""])
        self.assertEqual([spec.name for spec in grouped["Main"]], ["a", "c"])


class RenderingTests(SimpleTestCase):
    def test_controls(self) -> None:
        self.assertEqual(control_for(FieldType.LONG_TEXT).kind, "textarea")
        self.assertEqual(control_for("decimal").step, "0.01")
        self.assertTrue(control_for("multi_select").multiple)
        self.assertEqual(control_for("something_else").kind, "text_input")

    def test_coerce_input(self) -> None:
        self.assertEqual(coerce_input("integer", "12abc"), 12)
        self.assertEqual(coerce_input("integer", "abc"), "")
        self.assertEqual(coerce_input("decimal", "3.25"), 3.25)
        self.assertEqual(coerce_input("decimal", ""), "")
        self.assertEqual(coerce_input("decimal", "nan"), "")
        self.assertEqual(coerce_input("decimal", "-Infinity"), "")
        self.assertEqual(coerce_input("decimal", "1_000"), "")
        self.assertEqual(coerce_input("decimal", float("nan")), "")
        self.assertEqual(coerce_input("decimal", 4), 4)
        self.assertIs(coerce_input("boolean", "on"), True)
        self.assertEqual(coerce_input("multi_select", [1, "b"]), ["1", "b"])
        self.assertEqual(coerce_input("text", " raw "), " raw ")

    def test_describe_field(self) -> None:
        description = describe_field(
            FieldSpec(name="size", label="Size", field_type="select", required=True, options=["S", {"value": "M"}]),
            "S",
        )
        self.assertEqual(description["control"]["kind"], "single_choice")
        self.assertEqual(description["options"], [{"value": "S", "label": "S"}, {"value": "M", "label": "M"}])
        self.assertEqual(description["value"], "S")
        self.assertTrue(description["required"])
