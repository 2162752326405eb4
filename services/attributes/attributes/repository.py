"""ORM access for field definitions and templates."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from django.db import IntegrityError, transaction
from django.db.models import Q

from .exceptions import NotFoundError
from .grouping import group_fields
from .models import FieldDefinition, FieldTemplate
from .schema import FieldSpec

logger = logging.getLogger(__name__)


def get_field_definitions(
    applies_to: str,
    industry: Optional[str] = None,
    visible_in_list: Optional[bool] = None,
    visible_in_detail: Optional[bool] = None,
    include_inactive: bool = False,
    grouped: bool = False,
) -> Union[List[FieldDefinition], Dict[str, List[FieldSpec]]]:
    """Return the fields of a scope ordered by ``order`` and ``name``.

    With ``industry`` set, fields tagged with another industry are left out;
    untagged fields always apply. ``grouped`` returns a group name -> fields
    mapping in first-seen order.
    """

    queryset = FieldDefinition.objects.filter(applies_to=applies_to)
    if not include_inactive:
        queryset = queryset.filter(is_active=True)
    if industry:
        queryset = queryset.filter(Q(industry__icontains=industry) | Q(industry__isnull=True) | Q(industry=""))
    if visible_in_list is not None:
        queryset = queryset.filter(visible_in_list=visible_in_list)
    if visible_in_detail is not None:
        queryset = queryset.filter(visible_in_detail=visible_in_detail)

    fields = list(queryset.order_by("order", "name"))
    if grouped:
        return group_fields(fields)
    return fields


def get_templates(is_active: Optional[bool] = None, industry: Optional[str] = None) -> List[FieldTemplate]:
    queryset = FieldTemplate.objects.all()
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if industry:
        queryset = queryset.filter(industry__icontains=industry)
    return list(queryset.order_by("name"))


def get_template_by_code(code: str) -> FieldTemplate:
    normalized = str(code or "").strip().upper()
    try:
        return FieldTemplate.objects.get(code=normalized)
    except FieldTemplate.DoesNotExist as exc:
        raise NotFoundError(f"Template {normalized or code!r} not found") from exc


def create_field_if_absent(applies_to: str, name: str, defaults: Dict[str, Any]) -> Tuple[FieldDefinition, bool]:
    """Insert a field unless one with ``name`` already exists in the scope.

    Existing rows are returned untouched. A concurrent insert of the same
    name surfaces as an ``IntegrityError`` and is read back as existing.
    """

    try:
        with transaction.atomic():
            return FieldDefinition.objects.get_or_create(applies_to=applies_to, name=name, defaults=defaults)
    except IntegrityError:
        logger.info("Field %s.%s was created concurrently", applies_to, name)
        return FieldDefinition.objects.get(applies_to=applies_to, name=name), False
