"""Database models for the attribute service."""
from __future__ import annotations

import uuid

from django.db import models
from django.utils import timezone

from .field_types import AppliesTo, FieldType
from .schema import FieldSpec, TemplateSpec, as_field_spec, as_template_spec


class FieldDefinition(models.Model):
    """A custom attribute that decorates one entity class."""

    name = models.CharField(max_length=120)
    label = models.CharField(max_length=150)
    description = models.TextField(blank=True, null=True)
    field_type = models.CharField(max_length=32, choices=FieldType.choices, default=FieldType.TEXT)
    applies_to = models.CharField(max_length=32, choices=AppliesTo.choices, default=AppliesTo.PRODUCT)
    group = models.CharField(max_length=120, blank=True, null=True)
    industry = models.CharField(max_length=120, blank=True, null=True)
    order = models.IntegerField(default=0)
    placeholder = models.CharField(max_length=200, blank=True, null=True)
    help_text = models.CharField(max_length=250, blank=True, null=True)
    icon = models.CharField(max_length=80, blank=True, null=True)
    default_value = models.JSONField(blank=True, null=True)
    options = models.JSONField(default=list, blank=True)
    validation_rules = models.JSONField(default=dict, blank=True)
    required = models.BooleanField(default=False)
    visible_in_list = models.BooleanField(default=False)
    visible_in_detail = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "name"]
        constraints = [
            models.UniqueConstraint(fields=["applies_to", "name"], name="unique_field_name_per_scope"),
        ]
        indexes = [
            models.Index(fields=["applies_to", "is_active"], name="attr_field_scope_active_idx"),
            models.Index(fields=["group"], name="attr_field_group_idx"),
            models.Index(fields=["industry"], name="attr_field_industry_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.applies_to}.{self.name} ({self.field_type})"

    def to_spec(self) -> FieldSpec:
        return as_field_spec(self)


class FieldTemplate(models.Model):
    """A reusable bundle of field definitions, usually tailored to an industry."""

    code = models.CharField(max_length=80, unique=True)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, null=True)
    industry = models.CharField(max_length=120, blank=True, null=True)
    color = models.CharField(max_length=20, blank=True, null=True)
    field_configs = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name", "id"]
        indexes = [models.Index(fields=["industry"], name="attr_template_industry_idx")]

    def __str__(self) -> str:
        return f"{self.name} [{self.code}]"

    def to_spec(self) -> TemplateSpec:
        return as_template_spec(self)


class TemplateApplication(models.Model):
    """Queue-backed request to apply a template to an entity class."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (PROCESSING, "Processing"),
        (COMPLETED, "Completed"),
        (FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client_reference = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    template_code = models.CharField(max_length=80)
    applies_to = models.CharField(max_length=32, choices=AppliesTo.choices, blank=True, null=True)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=PENDING)
    created_fields = models.JSONField(default=list, blank=True)
    skipped_fields = models.JSONField(default=list, blank=True)
    error_message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="attr_application_status_idx"),
            models.Index(fields=["client_reference"], name="attr_application_ref_idx"),
        ]

    def mark_processing(self) -> None:
        self.status = self.PROCESSING
        self.save(update_fields=["status", "updated_at"])

    def mark_completed(self, created, skipped) -> None:
        self.status = self.COMPLETED
        self.created_fields = list(created)
        self.skipped_fields = list(skipped)
        self.completed_at = timezone.now()
        self.error_message = ""
        self.save(
            update_fields=[
                "status",
                "created_fields",
                "skipped_fields",
                "completed_at",
                "error_message",
                "updated_at",
            ]
        )

    def mark_failed(self, message: str) -> None:
        self.status = self.FAILED
        self.error_message = message
        self.completed_at = timezone.now()
        self.save(update_fields=["status", "error_message", "completed_at", "updated_at"])
