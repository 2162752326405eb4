"""Field-local validation of attribute values.

Validation never raises for a bad definition: results are returned as lists
of human-readable messages and an empty list means the value is accepted.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .field_types import handler_for, is_number
from .schema import FieldSpec, as_field_spec

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "Value required"


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _compile_pattern(pattern: Any) -> Optional["re.Pattern[str]"]:
    if not pattern or not isinstance(pattern, str):
        return None
    return re.compile(pattern)


def pattern_diagnostic(rules: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Describe why a ``pattern`` rule is being ignored, if it is."""

    if not rules:
        return None
    try:
        _compile_pattern(rules.get("pattern"))
    except re.error as exc:
        return f"pattern ignored: {exc}"
    return None


def _bound(rules: Mapping[str, Any], key: str) -> Optional[Any]:
    value = rules.get(key)
    return value if is_number(value) else None


def _rule_errors(field: FieldSpec, value: Any) -> List[str]:
    rules = field.validation_rules or {}
    errors: List[str] = []

    minimum = _bound(rules, "min")
    maximum = _bound(rules, "max")
    min_length = _bound(rules, "minLength")
    max_length = _bound(rules, "maxLength")

    if is_number(value):
        if minimum is not None and value < minimum:
            errors.append(f"Must be >= {minimum}")
        if maximum is not None and value > maximum:
            errors.append(f"Must be <= {maximum}")

    if isinstance(value, str):
        if min_length is not None and len(value) < min_length:
            errors.append(f"Must be at least {min_length} characters")
        if max_length is not None and len(value) > max_length:
            errors.append(f"Must be at most {max_length} characters")
        try:
            regex = _compile_pattern(rules.get("pattern"))
        except re.error as exc:
            logger.warning(
                "Ignoring invalid pattern on field %s: %s", field.name, exc,
                extra={"field": field.name, "pattern": rules.get("pattern")},
            )
            regex = None
        if regex is not None and regex.search(value) is None:
            errors.append("Invalid format")

    if isinstance(value, (list, tuple)):
        if min_length is not None and len(value) < min_length:
            errors.append(f"Must select at least {min_length} options")
        if max_length is not None and len(value) > max_length:
            errors.append(f"Must select at most {max_length} options")

    return errors


def validate_value(field: Any, value: Any) -> List[str]:
    """Return the error messages for ``value`` against ``field``."""

    spec = as_field_spec(field)
    empty = is_empty(value)

    # False is never empty, so a required boolean accepts an explicit "no".
    if empty:
        return [REQUIRED_MESSAGE] if spec.required else []

    errors: List[str] = []
    shape_error = handler_for(spec.field_type).shape_check(spec, value)
    if shape_error:
        errors.append(shape_error)
    errors.extend(_rule_errors(spec, value))
    return list(dict.fromkeys(errors))


def validate_values(fields: Iterable[Any], values: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Validate every active field, keyed by field name; valid fields are left out."""

    errors: Dict[str, List[str]] = {}
    for spec in (as_field_spec(field) for field in fields or []):
        if not spec.name or not spec.is_active:
            continue
        field_errors = validate_value(spec, values.get(spec.name))
        if field_errors:
            errors[spec.name] = field_errors
    return errors


def first_errors(errors: Mapping[str, List[str]]) -> Dict[str, str]:
    return {name: messages[0] for name, messages in errors.items() if messages}
