"""Mapping from a field definition to the control an editing surface draws."""
from __future__ import annotations

import math
from typing import Any, Dict

from .field_types import LEADING_INT_RE, Control, FieldType, handler_for, is_finite_number, is_number
from .options import normalize_options, stringify
from .schema import as_field_spec


def control_for(field_type: Any) -> Control:
    return handler_for(field_type).control


def coerce_input(field_type: Any, raw: Any) -> Any:
    """Translate a raw control value into the value kept in the edit session.

    Number inputs that cannot be parsed become ``""`` so the control can be
    cleared while typing.
    """

    field_type = getattr(field_type, "value", field_type)
    if field_type == FieldType.INTEGER:
        if isinstance(raw, bool):
            return ""
        if isinstance(raw, int):
            return raw
        match = LEADING_INT_RE.match(str(raw)) if raw is not None else None
        return int(match.group(1)) if match else ""
    if field_type == FieldType.DECIMAL:
        if is_number(raw):
            return raw if is_finite_number(raw) else ""
        text = "" if raw is None else str(raw).strip()
        if "_" in text:
            return ""
        try:
            parsed = float(text)
        except ValueError:
            return ""
        return parsed if math.isfinite(parsed) else ""
    if field_type == FieldType.BOOLEAN:
        return bool(raw)
    if field_type == FieldType.MULTI_SELECT:
        if raw is None:
            return []
        if isinstance(raw, (list, tuple)):
            return [stringify(item) for item in raw]
        return [stringify(raw)]
    return raw


def describe_field(field: Any, value: Any = None) -> Dict[str, Any]:
    spec = as_field_spec(field)
    control = control_for(spec.field_type)
    return {
        "name": spec.name,
        "label": spec.label,
        "control": control._asdict(),
        "required": spec.required,
        "placeholder": spec.placeholder,
        "help_text": spec.help_text,
        "icon": spec.icon,
        "options": [option.as_dict() for option in normalize_options(spec.options)],
        "value": value,
    }
