"""Errors raised by the attribute engine."""
from __future__ import annotations


class AttributeEngineError(Exception):
    """Base class for attribute engine failures."""


class NotFoundError(AttributeEngineError, LookupError):
    """A template code or field id does not exist."""


class ConfigurationError(AttributeEngineError):
    """A field or template definition cannot be used as configured.

    Configuration problems are reported and skipped rather than raised to
    callers; instances describe rejected entries.
    """


class InvalidScopeError(AttributeEngineError, ValueError):
    """An entity class that no field definition can apply to."""
