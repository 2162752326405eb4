"""API views for custom attribute definitions and templates."""
from __future__ import annotations

import uuid
from typing import Any, Optional

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view
from rest_framework.exceptions import NotFound
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response

from . import repository
from .defaults import apply_defaults
from .exceptions import InvalidScopeError, NotFoundError
from .field_types import AppliesTo
from .grouping import normalize_groups
from .models import FieldDefinition, FieldTemplate, TemplateApplication
from .payload import build_payload
from .rendering import describe_field
from .serializers import (
    FieldDefinitionSerializer,
    FieldTemplateSerializer,
    GroupSerializer,
    PayloadRequestSerializer,
    TemplateApplicationRequestSerializer,
    TemplateApplicationSerializer,
    TemplateApplySerializer,
    ValueValidationSerializer,
)
from .tasks import process_template_application
from .template_engine import apply_template
from .validation import validate_value, validate_values

TRUE_PARAMS = {"1", "true", "yes"}
FALSE_PARAMS = {"0", "false", "no"}


def _bool_param(request: Request, name: str) -> Optional[bool]:
    raw = request.query_params.get(name)
    if raw is None:
        return None
    normalized = raw.strip().lower()
    if normalized in TRUE_PARAMS:
        return True
    if normalized in FALSE_PARAMS:
        return False
    return None


def _unknown_scope(applies_to: str) -> Response:
    return Response({"detail": f"Unknown scope: {applies_to}"}, status=status.HTTP_400_BAD_REQUEST)


class FieldDefinitionViewSet(viewsets.ModelViewSet):
    serializer_class = FieldDefinitionSerializer
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "label", "description"]
    ordering_fields = ["order", "name", "applies_to", "field_type", "created_at"]
    ordering = ["applies_to", "order", "name"]

    def get_queryset(self):  # type: ignore[override]
        queryset = FieldDefinition.objects.all()
        params = self.request.query_params
        for key in ("applies_to", "field_type", "group"):
            value = params.get(key)
            if value:
                queryset = queryset.filter(**{key: value})
        industry = params.get("industry")
        if industry:
            queryset = queryset.filter(industry__icontains=industry)
        is_active = _bool_param(self.request, "is_active")
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset

    def perform_destroy(self, instance: FieldDefinition) -> None:  # type: ignore[override]
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])

    @action(detail=True, methods=["post"], url_path="validate")
    def validate(self, request: Request, *args, **kwargs):  # type: ignore[override]
        """Check one submitted value against the field's rules."""

        field = self.get_object()
        body = ValueValidationSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        errors = validate_value(field, body.validated_data.get("value"))
        if errors:
            return Response({"valid": False, "errors": errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"valid": True})

    @action(detail=False, methods=["get"], url_path=r"scope/(?P<applies_to>[a-z_]+)", url_name="scope")
    def scope(self, request: Request, applies_to: str, *args, **kwargs):
        """Active fields of an entity class, optionally arranged in groups."""

        if applies_to not in AppliesTo.values:
            return _unknown_scope(applies_to)
        grouped = bool(_bool_param(request, "grouped"))
        fields = repository.get_field_definitions(
            applies_to,
            industry=request.query_params.get("industry") or None,
            visible_in_list=_bool_param(request, "visible_in_list"),
            visible_in_detail=_bool_param(request, "visible_in_detail"),
            grouped=grouped,
        )
        if grouped:
            return Response(GroupSerializer(normalize_groups(fields), many=True).data)
        return Response(self.get_serializer(fields, many=True).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"scope/(?P<applies_to>[a-z_]+)/form",
        url_name="scope-form",
    )
    def form(self, request: Request, applies_to: str, *args, **kwargs):
        """Grouped field descriptions with their controls and default values."""

        if applies_to not in AppliesTo.values:
            return _unknown_scope(applies_to)
        groups = normalize_groups(
            repository.get_field_definitions(
                applies_to,
                industry=request.query_params.get("industry") or None,
                visible_in_detail=True,
                grouped=True,
            )
        )
        values = apply_defaults(groups, {})
        return Response(
            [
                {
                    "id": group.id,
                    "title": group.title,
                    "columns": group.columns,
                    "fields": [describe_field(spec, values.get(spec.name)) for spec in group.fields],
                }
                for group in groups
            ]
        )

    @action(
        detail=False,
        methods=["post"],
        url_path=r"scope/(?P<applies_to>[a-z_]+)/payload",
        url_name="scope-payload",
    )
    def payload(self, request: Request, applies_to: str, *args, **kwargs):
        """Validate submitted values and return the typed attribute payload."""

        if applies_to not in AppliesTo.values:
            return _unknown_scope(applies_to)
        body = PayloadRequestSerializer(data=request.data)
        body.is_valid(raise_exception=True)

        fields = repository.get_field_definitions(applies_to)
        values = body.validated_data["values"]
        if body.validated_data["apply_defaults"]:
            values = apply_defaults(fields, values)

        errors = validate_values(fields, values)
        if errors:
            return Response({"errors": errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"attributes": build_payload(fields, values)})


class FieldTemplateViewSet(viewsets.ModelViewSet):
    serializer_class = FieldTemplateSerializer
    lookup_field = "code"
    lookup_value_regex = "[A-Za-z0-9_-]+"
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["code", "name", "industry"]
    ordering_fields = ["name", "code", "created_at"]
    ordering = ["name"]

    def get_queryset(self):  # type: ignore[override]
        queryset = FieldTemplate.objects.all()
        is_active = _bool_param(self.request, "is_active")
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        industry = self.request.query_params.get("industry")
        if industry:
            queryset = queryset.filter(industry__icontains=industry)
        return queryset

    def get_object(self):  # type: ignore[override]
        self.kwargs[self.lookup_field] = str(self.kwargs[self.lookup_field]).upper()
        return super().get_object()

    def perform_destroy(self, instance: FieldTemplate) -> None:  # type: ignore[override]
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])

    @action(detail=True, methods=["post"], url_path="apply")
    def apply(self, request: Request, code: str, *args, **kwargs):
        """Create the template's missing fields right away."""

        body = TemplateApplySerializer(data=request.data)
        body.is_valid(raise_exception=True)
        try:
            result = apply_template(code, body.validated_data.get("applies_to"))
        except NotFoundError as exc:
            raise NotFound(str(exc)) from exc
        except InvalidScopeError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "template": self.get_serializer(result.template).data,
                "created": FieldDefinitionSerializer(result.created, many=True).data,
                "skipped": result.skipped,
                "rejected": result.rejected,
            },
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


class TemplateApplicationViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = TemplateApplication.objects.all()
    serializer_class = TemplateApplicationSerializer
    lookup_field = "id"
    lookup_value_regex = r"[0-9a-f\-]+"

    def create(self, request: Request, *args, **kwargs):  # type: ignore[override]
        payload_serializer = TemplateApplicationRequestSerializer(data=request.data)
        payload_serializer.is_valid(raise_exception=True)
        data = payload_serializer.validated_data

        client_reference = data.get("client_reference")
        if client_reference is not None:
            application = TemplateApplication.objects.filter(client_reference=client_reference).first()
            if application is not None:
                return self._resubmit(application, data)

        application = TemplateApplication.objects.create(
            client_reference=client_reference or uuid.uuid4(),
            template_code=data["template_code"],
            applies_to=data.get("applies_to"),
        )
        process_template_application.delay(str(application.id))
        serializer = self.get_serializer(application)
        return Response(serializer.data, status=status.HTTP_202_ACCEPTED)

    def _resubmit(self, application: TemplateApplication, data: dict[str, Any]) -> Response:
        if application.status == TemplateApplication.FAILED:
            application.status = TemplateApplication.PENDING
            application.error_message = ""
            application.completed_at = None
            application.template_code = data["template_code"]
            application.applies_to = data.get("applies_to")
            application.created_fields = []
            application.skipped_fields = []
            application.save(
                update_fields=[
                    "status",
                    "error_message",
                    "completed_at",
                    "template_code",
                    "applies_to",
                    "created_fields",
                    "skipped_fields",
                    "updated_at",
                ]
            )
        if application.status in {TemplateApplication.PENDING, TemplateApplication.PROCESSING}:
            process_template_application.delay(str(application.id))
        status_code = (
            status.HTTP_200_OK
            if application.status == TemplateApplication.COMPLETED
            else status.HTTP_202_ACCEPTED
        )
        return Response(self.get_serializer(application).data, status=status_code)


@api_view(["GET"])
def health(request: Request):  # type: ignore[override]
    """Readiness endpoint for orchestration tooling."""

    return Response({"status": "ok"})
