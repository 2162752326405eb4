"""Canonicalisation of select/multi_select option lists."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

VALUE_KEYS = ("value", "codigo", "id")
LABEL_KEYS = ("label", "nombre")


class Option(NamedTuple):
    value: str
    label: str

    def as_dict(self) -> Dict[str, str]:
        return {"value": self.value, "label": self.label}


def stringify(value: Any) -> str:
    """Render a scalar the way a browser form control would."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _first_present(entry: Dict[str, Any], keys: Iterable[str]) -> Optional[Any]:
    for key in keys:
        candidate = entry.get(key)
        if candidate is not None:
            return candidate
    return None


def _normalize_entry(entry: Any) -> Optional[Option]:
    if isinstance(entry, (str, int, float)):
        text = stringify(entry)
        return Option(text, text)
    if not isinstance(entry, dict):
        return None

    value = _first_present(entry, VALUE_KEYS)
    if value is None:
        return None
    label = _first_present(entry, LABEL_KEYS)
    if label is None:
        label = value
    return Option(stringify(value), stringify(label))


def normalize_options(raw: Any) -> List[Option]:
    """Return ``raw`` as a list of string ``(value, label)`` pairs.

    Entries are either primitives, used as both value and label, or mappings
    exposing ``value``/``codigo``/``id`` and ``label``/``nombre``. Entries that
    cannot be resolved are dropped so a bad configuration never breaks a form.
    """

    if not isinstance(raw, (list, tuple)):
        return []

    options: List[Option] = []
    for index, entry in enumerate(raw):
        option = _normalize_entry(entry)
        if option is None:
            logger.debug("Dropping unresolvable option at position %s: %r", index, entry)
            continue
        options.append(option)
    return options


def option_values(raw: Any) -> List[str]:
    return [option.value for option in normalize_options(raw)]
