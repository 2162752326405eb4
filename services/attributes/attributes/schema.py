"""Plain value objects the attribute engine works on.

Field definitions reach the engine as model instances, serializer output,
template entries or hand-written dicts. They are converted to
:class:`FieldSpec` on ingestion so the engine never branches on input shape.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .field_types import AppliesTo, FieldType

FIELD_ATTRIBUTES = (
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
)

# Alternative spellings accepted from raw mappings.
ALIASES = {
    "field_type": ("type",),
    "is_active": ("active",),
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str = ""
    field_type: str = FieldType.TEXT.value
    applies_to: str = AppliesTo.PRODUCT.value
    group: Optional[str] = None
    order: int = 0
    required: bool = False
    visible_in_list: bool = False
    visible_in_detail: bool = True
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    icon: Optional[str] = None
    default_value: Any = None
    options: List[Any] = field(default_factory=list)
    validation_rules: Dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    description: Optional[str] = None
    industry: Optional[str] = None
    id: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in FIELD_ATTRIBUTES}


@dataclass(frozen=True)
class TemplateSpec:
    code: str
    name: str = ""
    description: Optional[str] = None
    industry: Optional[str] = None
    color: Optional[str] = None
    field_configs: List[Dict[str, Any]] = field(default_factory=list)
    is_active: bool = True


def _read(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        if name in source:
            return source[name]
        for alias in ALIASES.get(name, ()):
            if alias in source:
                return source[alias]
        return None
    return getattr(source, name, None)


def _as_int(value: Any, fallback: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _as_bool(value: Any, fallback: bool) -> bool:
    return fallback if value is None else bool(value)


def as_field_spec(source: Any) -> FieldSpec:
    """Coerce a model instance, mapping or :class:`FieldSpec` into a FieldSpec."""

    if isinstance(source, FieldSpec):
        return source

    raw = {name: _read(source, name) for name in FIELD_ATTRIBUTES}
    field_type = raw["field_type"]
    options = raw["options"]
    rules = raw["validation_rules"]
    return FieldSpec(
        id=raw["id"],
        name="" if raw["name"] is None else str(raw["name"]),
        label="" if raw["label"] is None else str(raw["label"]),
        description=raw["description"],
        field_type=str(getattr(field_type, "value", field_type) or FieldType.TEXT.value),
        applies_to=str(raw["applies_to"] or AppliesTo.PRODUCT.value),
        group=raw["group"] or None,
        industry=raw["industry"],
        order=_as_int(raw["order"]),
        placeholder=raw["placeholder"],
        help_text=raw["help_text"],
        icon=raw["icon"],
        default_value=raw["default_value"],
        options=list(options) if isinstance(options, (list, tuple)) else [],
        validation_rules=dict(rules) if isinstance(rules, Mapping) else {},
        required=_as_bool(raw["required"], False),
        visible_in_list=_as_bool(raw["visible_in_list"], False),
        visible_in_detail=_as_bool(raw["visible_in_detail"], True),
        is_active=_as_bool(raw["is_active"], True),
    )


def as_field_specs(sources: Any) -> List[FieldSpec]:
    if not sources:
        return []
    return [as_field_spec(source) for source in sources]


def as_template_spec(source: Any) -> TemplateSpec:
    if isinstance(source, TemplateSpec):
        return source
    configs = _read(source, "field_configs")
    return TemplateSpec(
        code=str(_read(source, "code") or ""),
        name=str(_read(source, "name") or ""),
        description=_read(source, "description"),
        industry=_read(source, "industry"),
        color=_read(source, "color"),
        field_configs=[dict(entry) for entry in configs if isinstance(entry, Mapping)]
        if isinstance(configs, (list, tuple))
        else [],
        is_active=_as_bool(_read(source, "is_active"), True),
    )
