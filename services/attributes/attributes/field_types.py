"""The closed set of attribute field types and their per-type behaviour.

Every type maps to a single :class:`FieldTypeHandler` in :data:`HANDLERS`:
the shape check used by validation, the coercer used when building the
stored payload, and the control used by rendering. Adding a type means
adding one enum member and one table entry.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, NamedTuple, Optional

from django.db import models
from django.utils import formats
from django.utils.dateparse import parse_date, parse_datetime

from .options import normalize_options, stringify

if TYPE_CHECKING:  # pragma: no cover
    from .schema import FieldSpec


class FieldType(models.TextChoices):
    TEXT = "text", "Text"
    LONG_TEXT = "long_text", "Long text"
    INTEGER = "integer", "Integer"
    DECIMAL = "decimal", "Decimal"
    DATE = "date", "Date"
    BOOLEAN = "boolean", "Boolean"
    SELECT = "select", "Select"
    MULTI_SELECT = "multi_select", "Multiple select"
    EMAIL = "email", "Email"
    PHONE = "phone", "Phone"
    URL = "url", "URL"
    COLOR = "color", "Color"


class AppliesTo(models.TextChoices):
    PRODUCT = "product", "Product"
    CATEGORY = "category", "Category"
    SUPPLIER = "supplier", "Supplier"
    MOVEMENT = "movement", "Movement"
    ALERT = "alert", "Alert"


EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_RE = re.compile(r"[0-9()+\-\s]{6,20}")
URL_RE = re.compile(r"(https?://)?([\w-]+\.)+[\w-]+(/[\w\-./?%&=]*)?", re.IGNORECASE | re.ASCII)
COLOR_RE = re.compile(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")
LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
# Accepted besides ISO 8601 and the locale DATE_INPUT_FORMATS.
EXTRA_DATE_FORMATS = ("%Y/%m/%d", "%Y/%m/%d %H:%M", "%Y/%m/%d %H:%M:%S")

# Returned by coercers when the value must be left out of the payload.
OMIT = object()


class Control(NamedTuple):
    kind: str
    input_type: str
    multiple: bool = False
    step: Optional[str] = None


ShapeCheck = Callable[["FieldSpec", Any], Optional[str]]
Coercer = Callable[[Any], Any]


class FieldTypeHandler(NamedTuple):
    shape_check: ShapeCheck
    coerce: Coercer
    control: Control


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    return is_number(value)


def is_truthy(value: Any) -> bool:
    """Truthiness as browsers apply it to checkbox payloads."""

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return len(value) > 0
    return True


def is_valid_date(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    try:
        if parse_date(text) is not None or parse_datetime(text) is not None:
            return True
    except ValueError:
        return False
    for fmt in (*EXTRA_DATE_FORMATS, *formats.get_format("DATE_INPUT_FORMATS")):
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            continue
        return True
    return False


# Shape checks ---------------------------------------------------------------


def _check_text(field: "FieldSpec", value: Any) -> Optional[str]:
    return None


def _check_integer(field: "FieldSpec", value: Any) -> Optional[str]:
    if not is_finite_number(value) or (isinstance(value, float) and not value.is_integer()):
        return "Must be a whole number"
    return None


def _check_decimal(field: "FieldSpec", value: Any) -> Optional[str]:
    if not is_finite_number(value):
        return "Must be a valid number"
    return None


def _check_boolean(field: "FieldSpec", value: Any) -> Optional[str]:
    if not isinstance(value, bool):
        return "Must be true or false"
    return None


def _check_select(field: "FieldSpec", value: Any) -> Optional[str]:
    options = normalize_options(field.options)
    if not options:
        return None
    if stringify(value) not in {option.value for option in options}:
        return "Must select a valid option"
    return None


def _check_multi_select(field: "FieldSpec", value: Any) -> Optional[str]:
    if not isinstance(value, (list, tuple)):
        return "Must select valid options"
    options = normalize_options(field.options)
    if options:
        allowed = {option.value for option in options}
        if any(stringify(item) not in allowed for item in value):
            return "Contains invalid options"
    return None


def _check_date(field: "FieldSpec", value: Any) -> Optional[str]:
    if not is_valid_date(value):
        return "Must be a valid date"
    return None


def _pattern_check(pattern: "re.Pattern[str]", message: str) -> ShapeCheck:
    def check(field: "FieldSpec", value: Any) -> Optional[str]:
        if not isinstance(value, str) or pattern.fullmatch(value) is None:
            return message
        return None

    return check


# Coercers -------------------------------------------------------------------


def _coerce_text(value: Any) -> Any:
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed if trimmed else OMIT
    return value


def _coerce_integer(value: Any) -> Any:
    if is_number(value):
        if not is_finite_number(value):
            return OMIT
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value
    if isinstance(value, str):
        match = LEADING_INT_RE.match(value)
        return int(match.group(1)) if match else OMIT
    return OMIT


def _coerce_decimal(value: Any) -> Any:
    if is_number(value):
        return value if is_finite_number(value) else OMIT
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return OMIT
        return parsed if math.isfinite(parsed) else OMIT
    return OMIT


def _coerce_boolean(value: Any) -> Any:
    return is_truthy(value)


def _coerce_select(value: Any) -> Any:
    if isinstance(value, str) and value.strip():
        return value
    return OMIT


def _coerce_multi_select(value: Any) -> Any:
    if isinstance(value, (list, tuple)) and value:
        return [stringify(item) for item in value]
    return OMIT


HANDLERS: Dict[str, FieldTypeHandler] = {
    FieldType.TEXT.value: FieldTypeHandler(_check_text, _coerce_text, Control("text_input", "text")),
    FieldType.LONG_TEXT.value: FieldTypeHandler(_check_text, _coerce_text, Control("textarea", "textarea")),
    FieldType.INTEGER.value: FieldTypeHandler(
        _check_integer, _coerce_integer, Control("integer_spinner", "number", step="1")
    ),
    FieldType.DECIMAL.value: FieldTypeHandler(
        _check_decimal, _coerce_decimal, Control("decimal_spinner", "number", step="0.01")
    ),
    FieldType.DATE.value: FieldTypeHandler(_check_date, _coerce_text, Control("date_picker", "date")),
    FieldType.BOOLEAN.value: FieldTypeHandler(_check_boolean, _coerce_boolean, Control("toggle", "checkbox")),
    FieldType.SELECT.value: FieldTypeHandler(_check_select, _coerce_select, Control("single_choice", "select")),
    FieldType.MULTI_SELECT.value: FieldTypeHandler(
        _check_multi_select, _coerce_multi_select, Control("multi_choice", "select", multiple=True)
    ),
    FieldType.EMAIL.value: FieldTypeHandler(
        _pattern_check(EMAIL_RE, "Must be a valid email"), _coerce_text, Control("email_input", "email")
    ),
    FieldType.PHONE.value: FieldTypeHandler(
        _pattern_check(PHONE_RE, "Must be a valid phone number"), _coerce_text, Control("phone_input", "tel")
    ),
    FieldType.URL.value: FieldTypeHandler(
        _pattern_check(URL_RE, "Must be a valid URL"), _coerce_text, Control("url_input", "url")
    ),
    FieldType.COLOR.value: FieldTypeHandler(
        _pattern_check(COLOR_RE, "Must be a valid hex color"), _coerce_text, Control("color_picker", "color")
    ),
}


def handler_for(field_type: Any) -> FieldTypeHandler:
    """Return the handler for ``field_type``; unknown types behave as text."""

    return HANDLERS.get(getattr(field_type, "value", field_type), HANDLERS[FieldType.TEXT.value])


def is_known_type(field_type: Any) -> bool:
    return getattr(field_type, "value", field_type) in HANDLERS
