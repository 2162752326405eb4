"""Instantiation of field templates onto an entity class."""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

from . import repository
from .exceptions import ConfigurationError, InvalidScopeError, NotFoundError
from .field_types import AppliesTo, is_known_type
from .models import FieldDefinition, FieldTemplate
from .schema import TemplateSpec

logger = logging.getLogger(__name__)

FIELD_NAME_RE = re.compile(r"[a-z][a-z0-9_]*")

COPIED_KEYS = (
    "label",
    "description",
    "placeholder",
    "help_text",
    "icon",
    "default_value",
    "options",
    "validation_rules",
)


class AppliedTemplate(NamedTuple):
    template: FieldTemplate
    created: List[FieldDefinition]
    skipped: List[str]
    rejected: List[str]


def list_templates(is_active: Optional[bool] = None, industry: Optional[str] = None) -> List[FieldTemplate]:
    return repository.get_templates(is_active=is_active, industry=industry)


def get_template(code: str) -> FieldTemplate:
    return repository.get_template_by_code(code)


def _flag(entry: Mapping[str, Any], key: str, fallback: bool) -> bool:
    value = entry.get(key)
    return fallback if value is None else bool(value)


def _is_position(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_scope(entry: Mapping[str, Any], applies_to: Optional[str]) -> str:
    scope = applies_to or entry.get("applies_to") or AppliesTo.PRODUCT.value
    if scope not in AppliesTo.values:
        raise ConfigurationError(f"unknown scope {scope!r}")
    return scope


def expand_entry(template: TemplateSpec, entry: Mapping[str, Any], position: int) -> Dict[str, Any]:
    """Build FieldDefinition attributes for one template entry.

    Missing presentation attributes fall back to the template: the group to
    the template name, the industry to the template industry and the order to
    the entry's 1-based position.
    """

    name = str(entry.get("name") or "").strip().lower()
    if not FIELD_NAME_RE.fullmatch(name):
        raise ConfigurationError(f"entry {position} has an invalid name {name!r}")
    field_type = entry.get("field_type") or entry.get("type")
    if not is_known_type(field_type):
        raise ConfigurationError(f"entry {name} has an unknown type {field_type!r}")

    attributes = {key: entry[key] for key in COPIED_KEYS if entry.get(key) is not None}
    attributes.setdefault("label", name)
    attributes.update(
        name=name,
        field_type=field_type,
        group=entry.get("group") or template.name or None,
        industry=entry.get("industry") or template.industry,
        order=entry["order"] if _is_position(entry.get("order")) else position,
        required=_flag(entry, "required", False),
        visible_in_list=_flag(entry, "visible_in_list", False),
        visible_in_detail=_flag(entry, "visible_in_detail", True),
        is_active=_flag(entry, "is_active", True),
    )
    return attributes


def apply_template(code: str, applies_to: Optional[str] = None) -> AppliedTemplate:
    """Create the template's fields that do not exist yet in their scope.

    Existing fields are never modified, so applying a template again creates
    nothing. Malformed entries are logged and reported in ``rejected``.
    """

    if applies_to is not None and applies_to not in AppliesTo.values:
        raise InvalidScopeError(f"Unknown scope: {applies_to}")

    template = repository.get_template_by_code(code)
    if not template.is_active:
        raise NotFoundError(f"Template {template.code!r} is inactive")
    spec = template.to_spec()

    created: List[FieldDefinition] = []
    skipped: List[str] = []
    rejected: List[str] = []
    for position, entry in enumerate(spec.field_configs, start=1):
        try:
            attributes = expand_entry(spec, entry, position)
            scope = resolve_scope(entry, applies_to)
        except ConfigurationError as exc:
            logger.warning("Template %s: rejecting entry: %s", spec.code, exc)
            rejected.append(str(entry.get("name") or f"#{position}"))
            continue

        name = attributes.pop("name")
        field, was_created = repository.create_field_if_absent(scope, name, attributes)
        if was_created:
            created.append(field)
        else:
            skipped.append(name)

    logger.info(
        "Template %s applied: %d created, %d skipped, %d rejected",
        spec.code,
        len(created),
        len(skipped),
        len(rejected),
    )
    return AppliedTemplate(template, created, skipped, rejected)
