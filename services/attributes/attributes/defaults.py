"""Seeding of declared default values into an attribute value map."""
from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Mapping

from .grouping import Group, normalize_groups
from .schema import FieldSpec, as_field_spec


def flatten_groups(source: Iterable[Any]) -> List[FieldSpec]:
    """Return the fields of ``source``, which may mix groups and bare fields.

    A mapping of group name to fields is read as groups.
    """

    if isinstance(source, Mapping):
        source = normalize_groups(source)
    fields: List[FieldSpec] = []
    for item in source or []:
        if isinstance(item, Group):
            fields.extend(item.fields)
        else:
            fields.append(as_field_spec(item))
    return fields


def apply_defaults(source: Iterable[Any], current_values: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in defaults for fields whose name is absent from ``current_values``.

    Keys that are present are never overwritten, whatever their value. When
    no default applies the very same mapping is returned, so callers can
    compare identities to skip a re-render.
    """

    updated = dict(current_values)
    changed = False
    for field in flatten_groups(source):
        if not field.name or field.default_value is None or field.name in updated:
            continue
        updated[field.name] = copy.deepcopy(field.default_value)
        changed = True
    return updated if changed else current_values
