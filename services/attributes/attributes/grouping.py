"""Arrangement of field definitions into ordered presentation groups."""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .schema import FieldSpec, as_field_specs

UNGROUPED_ID = "ungrouped"
UNGROUPED_TITLE = "Ungrouped"
DEFAULT_COLUMNS = 2


@dataclass
class Group:
    id: str
    title: str
    description: str = ""
    icon: Optional[str] = None
    columns: int = DEFAULT_COLUMNS
    fields: List[FieldSpec] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "columns": self.columns,
            "fields": [spec.as_dict() for spec in self.fields],
        }


def collation_key(name: str) -> str:
    """Accent-stripped, case-folded form of ``name`` for locale-style sorting."""

    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def field_sort_key(spec: FieldSpec):
    return (spec.order, collation_key(spec.name), spec.name)


def sort_fields(fields: Iterable[Any]) -> List[FieldSpec]:
    return sorted(as_field_specs(fields), key=field_sort_key)


def _first(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]
    return None


def _ingest_list(groups: Iterable[Any]) -> List[Dict[str, Any]]:
    ingested = []
    for index, group in enumerate(groups):
        if isinstance(group, Group):
            ingested.append(dict(vars(group)))
            continue
        if not isinstance(group, Mapping):
            continue
        title = _first(group, "title", "nombre")
        fields = _first(group, "fields", "campos")
        ingested.append(
            {
                "id": str(_first(group, "id", "title") or f"group-{index}"),
                "title": str(title) if title is not None else f"Group {index + 1}",
                "description": _first(group, "description", "descripcion") or "",
                "icon": group.get("icon"),
                "columns": group.get("columns") or DEFAULT_COLUMNS,
                "fields": fields if isinstance(fields, (list, tuple)) else [],
            }
        )
    return ingested


def _ingest_mapping(groups: Mapping[Any, Any]) -> List[Dict[str, Any]]:
    ingested: List[Dict[str, Any]] = []
    ungrouped: Optional[Dict[str, Any]] = None
    for key, fields in groups.items():
        fields = list(fields) if isinstance(fields, (list, tuple)) else []
        if not key:
            if ungrouped is None:
                ungrouped = {"id": UNGROUPED_ID, "title": UNGROUPED_TITLE, "fields": []}
                ingested.append(ungrouped)
            ungrouped["fields"].extend(fields)
            continue
        ingested.append({"id": str(key), "title": str(key), "fields": fields})
    return ingested


def normalize_groups(source: Any) -> List[Group]:
    """Return ``source`` as a list of :class:`Group` with sorted fields.

    ``source`` is either a list of group objects or a mapping of group name to
    field list. Group order follows the input; fields inside a group are
    ordered by ``order`` then by name, case- and accent-insensitively.
    """

    if not source:
        return []
    if isinstance(source, Mapping):
        ingested = _ingest_mapping(source)
    elif isinstance(source, (list, tuple)):
        ingested = _ingest_list(source)
    else:
        return []

    return [
        Group(
            id=raw["id"],
            title=raw["title"],
            description=raw.get("description", ""),
            icon=raw.get("icon"),
            columns=raw.get("columns", DEFAULT_COLUMNS),
            fields=sort_fields(raw["fields"]),
        )
        for raw in ingested
    ]


def group_fields(fields: Iterable[Any]) -> Dict[str, List[FieldSpec]]:
    """Bucket fields by their ``group`` in encounter order; ungrouped use ``""``."""

    grouped: Dict[str, List[FieldSpec]] = {}
    for spec in as_field_specs(fields):
        grouped.setdefault(spec.group or "", []).append(spec)
    return grouped
