"""Conversion of accepted attribute values into the stored payload."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from .field_types import OMIT, FieldType, handler_for
from .schema import as_field_spec
from .validation import is_empty


def build_payload(fields: Iterable[Any], values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the type-coerced attribute payload for ``values``.

    Only active fields contribute. Empty values are left out, except for
    booleans which are always stored because ``False`` is an answer. The
    values are assumed to have passed validation already. ``None`` is
    returned instead of an empty mapping.
    """

    payload: Dict[str, Any] = {}
    for spec in (as_field_spec(field) for field in fields or []):
        if not spec.name or not spec.is_active:
            continue
        raw = values.get(spec.name)
        if spec.field_type != FieldType.BOOLEAN and is_empty(raw):
            continue
        value = handler_for(spec.field_type).coerce(raw)
        if value is OMIT:
            continue
        payload[spec.name] = value
    return payload or None
