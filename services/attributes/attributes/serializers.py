"""Serializers for the attribute service."""
from __future__ import annotations

import re
from typing import Any, Dict, List

from rest_framework import serializers

from .field_types import COLOR_RE, AppliesTo, FieldType, is_number
from .grouping import Group
from .models import FieldDefinition, FieldTemplate, TemplateApplication
from .options import normalize_options
from .schema import as_field_spec
from .validation import pattern_diagnostic, validate_value

FIELD_NAME_RE = re.compile(r"[a-z][a-z0-9_]*")
TEMPLATE_CODE_RE = re.compile(r"[A-Z0-9_-]+")
RULE_KEYS = ("min", "max", "minLength", "maxLength", "pattern")
TRUE_WORDS = {"true", "1", "yes", "si", "sí", "on"}
FALSE_WORDS = {"false", "0", "no", "off"}


def parse_default(field_type: str, raw: Any) -> Any:
    """Interpret an administrator-entered default for ``field_type``.

    Blank input means "no default". Values that cannot be read as the type
    are returned unchanged so validation reports them.
    """

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if field_type == FieldType.INTEGER and isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return raw
    if field_type == FieldType.DECIMAL and isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError:
            return raw
    if field_type == FieldType.BOOLEAN:
        if isinstance(raw, bool):
            return raw
        if is_number(raw):
            return raw != 0
        normalized = str(raw).strip().lower()
        if normalized in TRUE_WORDS:
            return True
        if normalized in FALSE_WORDS:
            return False
        return raw
    if field_type == FieldType.MULTI_SELECT:
        items = raw if isinstance(raw, (list, tuple)) else str(raw).split(",")
        return [str(item).strip() for item in items if str(item).strip()]
    if field_type in (FieldType.INTEGER, FieldType.DECIMAL):
        return raw
    return raw if isinstance(raw, str) else str(raw)


def clean_validation_rules(rules: Any) -> Dict[str, Any]:
    if rules is None:
        return {}
    if not isinstance(rules, dict):
        raise serializers.ValidationError("Must be a JSON object.")

    cleaned = {key: rules[key] for key in RULE_KEYS if rules.get(key) is not None}
    errors: List[str] = []
    for key in ("min", "max"):
        if key in cleaned and not is_number(cleaned[key]):
            errors.append(f"{key} must be numeric.")
    for key in ("minLength", "maxLength"):
        value = cleaned.get(key)
        if key in cleaned and (not isinstance(value, int) or isinstance(value, bool) or value < 0):
            errors.append(f"{key} must be an integer >= 0.")
    if "pattern" in cleaned and not isinstance(cleaned["pattern"], str):
        errors.append("pattern must be a string.")
    if errors:
        raise serializers.ValidationError(errors)

    if "min" in cleaned and "max" in cleaned and cleaned["min"] > cleaned["max"]:
        raise serializers.ValidationError("min cannot be greater than max.")
    if "minLength" in cleaned and "maxLength" in cleaned and cleaned["minLength"] > cleaned["maxLength"]:
        raise serializers.ValidationError("minLength cannot be greater than maxLength.")
    return cleaned


class FieldRulesMixin:
    """Save-time checks shared by field definitions and template entries."""

    def validate_name(self, value: str) -> str:
        name = value.strip().lower()
        if not FIELD_NAME_RE.fullmatch(name):
            raise serializers.ValidationError("Must be snake_case and start with a letter.")
        return name

    def validate_options(self, value: Any) -> List[Dict[str, str]]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise serializers.ValidationError("Must be a JSON array.")
        return [option.as_dict() for option in normalize_options(value)]

    def validate_validation_rules(self, value: Any) -> Dict[str, Any]:
        return clean_validation_rules(value)

    def check_default_value(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        instance = getattr(self, "instance", None)
        field_type = attrs.get("field_type") or getattr(instance, "field_type", FieldType.TEXT)
        if "default_value" not in attrs:
            return attrs
        default = parse_default(field_type, attrs["default_value"])
        attrs["default_value"] = default
        if default is None:
            return attrs

        options = attrs["options"] if "options" in attrs else getattr(instance, "options", [])
        rules = attrs["validation_rules"] if "validation_rules" in attrs else getattr(instance, "validation_rules", {})
        probe = as_field_spec(
            {"name": "default_value", "field_type": field_type, "options": options, "validation_rules": rules}
        )
        errors = validate_value(probe, default)
        if errors:
            raise serializers.ValidationError({"default_value": errors})
        return attrs


class FieldDefinitionSerializer(FieldRulesMixin, serializers.ModelSerializer):
    options = serializers.JSONField(required=False)
    validation_rules = serializers.JSONField(required=False)
    default_value = serializers.JSONField(required=False, allow_null=True)
    diagnostics = serializers.SerializerMethodField()

    class Meta:
        model = FieldDefinition
        fields = [
            "id",
            "name",
            "label",
            "description",
            "field_type",
            "applies_to",
            "group",
            "industry",
            "order",
            "placeholder",
            "help_text",
            "icon",
            "default_value",
            "options",
            "validation_rules",
            "required",
            "visible_in_list",
            "visible_in_detail",
            "is_active",
            "diagnostics",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {"order": {"min_value": 0}}

    def get_validators(self):  # type: ignore[override]
        # Scoped name uniqueness is checked in validate() to report it on "name".
        return []

    def get_diagnostics(self, obj: FieldDefinition) -> List[str]:
        diagnostic = pattern_diagnostic(obj.validation_rules)
        return [diagnostic] if diagnostic else []

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:  # type: ignore[override]
        attrs = super().validate(attrs)
        name = attrs.get("name", getattr(self.instance, "name", None))
        applies_to = attrs.get("applies_to", getattr(self.instance, "applies_to", AppliesTo.PRODUCT))
        duplicates = FieldDefinition.objects.filter(applies_to=applies_to, name=name)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError({"name": ["must be unique"]})
        return self.check_default_value(attrs)


class FieldConfigSerializer(FieldRulesMixin, serializers.Serializer):
    """One field blueprint inside a template."""

    name = serializers.CharField(max_length=120)
    label = serializers.CharField(max_length=150)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    field_type = serializers.ChoiceField(choices=FieldType.choices)
    applies_to = serializers.ChoiceField(choices=AppliesTo.choices, required=False, allow_null=True)
    group = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)
    industry = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)
    order = serializers.IntegerField(min_value=0, required=False)
    placeholder = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    help_text = serializers.CharField(max_length=250, required=False, allow_blank=True, allow_null=True)
    icon = serializers.CharField(max_length=80, required=False, allow_blank=True, allow_null=True)
    default_value = serializers.JSONField(required=False, allow_null=True)
    options = serializers.JSONField(required=False)
    validation_rules = serializers.JSONField(required=False)
    required = serializers.BooleanField(required=False)
    visible_in_list = serializers.BooleanField(required=False)
    visible_in_detail = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:  # type: ignore[override]
        return self.check_default_value(dict(attrs))


class FieldTemplateSerializer(serializers.ModelSerializer):
    field_configs = FieldConfigSerializer(many=True)

    class Meta:
        model = FieldTemplate
        fields = [
            "id",
            "code",
            "name",
            "description",
            "industry",
            "color",
            "field_configs",
            "is_active",
            "created_at",
            "updated_at",
        ]
        # Codes are compared after upper-casing, see validate_code().
        extra_kwargs = {"code": {"validators": []}}

    def validate_code(self, value: str) -> str:
        code = value.strip().upper()
        if not TEMPLATE_CODE_RE.fullmatch(code):
            raise serializers.ValidationError(
                "Must contain only uppercase letters, digits, hyphens or underscores."
            )
        duplicates = FieldTemplate.objects.filter(code=code)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("must be unique")
        return code

    def validate_color(self, value: Any) -> Any:
        if value and not COLOR_RE.fullmatch(value):
            raise serializers.ValidationError("Must be a valid hex color.")
        return value

    def validate_field_configs(self, value: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not value:
            raise serializers.ValidationError("Must include at least one field.")
        seen = set()
        for entry in value:
            if entry["name"] in seen:
                raise serializers.ValidationError(f"Contains duplicate names ({entry['name']}).")
            seen.add(entry["name"])
        return [dict(entry) for entry in value]

    def create(self, validated_data):  # type: ignore[override]
        field_configs = validated_data.pop("field_configs", [])
        return FieldTemplate.objects.create(field_configs=field_configs, **validated_data)

    def update(self, instance, validated_data):  # type: ignore[override]
        field_configs = validated_data.pop("field_configs", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if field_configs is not None:
            instance.field_configs = field_configs
        instance.save()
        return instance


class TemplateApplySerializer(serializers.Serializer):
    applies_to = serializers.ChoiceField(choices=AppliesTo.choices, required=False, allow_null=True)


class ValueValidationSerializer(serializers.Serializer):
    value = serializers.JSONField(required=False, allow_null=True)


class PayloadRequestSerializer(serializers.Serializer):
    values = serializers.DictField(child=serializers.JSONField(allow_null=True), required=False, default=dict)
    apply_defaults = serializers.BooleanField(required=False, default=False)


class GroupSerializer(serializers.Serializer):
    def to_representation(self, instance: Group) -> Dict[str, Any]:  # type: ignore[override]
        return instance.as_dict()


class TemplateApplicationSerializer(serializers.ModelSerializer):
    class Meta:
        model = TemplateApplication
        fields = [
            "id",
            "client_reference",
            "template_code",
            "applies_to",
            "status",
            "created_fields",
            "skipped_fields",
            "error_message",
            "created_at",
            "updated_at",
            "completed_at",
        ]


class TemplateApplicationRequestSerializer(serializers.Serializer):
    template_code = serializers.CharField(max_length=80)
    applies_to = serializers.ChoiceField(choices=AppliesTo.choices, required=False, allow_null=True)
    client_reference = serializers.UUIDField(required=False)

    def validate_template_code(self, value: str) -> str:
        return value.strip().upper()
