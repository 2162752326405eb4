# Generated manually for initial schema.
from __future__ import annotations

import uuid

from django.db import migrations, models

FIELD_TYPE_CHOICES = [
    ("text", "Text"),
    ("long_text", "Long text"),
    ("integer", "Integer"),
    ("decimal", "Decimal"),
    ("date", "Date"),
    ("boolean", "Boolean"),
    ("select", "Select"),
    ("multi_select", "Multiple select"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("url", "URL"),
    ("color", "Color"),
]

APPLIES_TO_CHOICES = [
    ("product", "Product"),
    ("category", "Category"),
    ("supplier", "Supplier"),
    ("movement", "Movement"),
    ("alert", "Alert"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="FieldDefinition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("label", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True, null=True)),
                ("field_type", models.CharField(choices=FIELD_TYPE_CHOICES, default="text", max_length=32)),
                ("applies_to", models.CharField(choices=APPLIES_TO_CHOICES, default="product", max_length=32)),
                ("group", models.CharField(blank=True, max_length=120, null=True)),
                ("industry", models.CharField(blank=True, max_length=120, null=True)),
                ("order", models.IntegerField(default=0)),
                ("placeholder", models.CharField(blank=True, max_length=200, null=True)),
                ("help_text", models.CharField(blank=True, max_length=250, null=True)),
                ("icon", models.CharField(blank=True, max_length=80, null=True)),
                ("default_value", models.JSONField(blank=True, null=True)),
                ("options", models.JSONField(blank=True, default=list)),
                ("validation_rules", models.JSONField(blank=True, default=dict)),
                ("required", models.BooleanField(default=False)),
                ("visible_in_list", models.BooleanField(default=False)),
                ("visible_in_detail", models.BooleanField(default=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["order", "name"],
                "indexes": [
                    models.Index(fields=["applies_to", "is_active"], name="attr_field_scope_active_idx"),
                    models.Index(fields=["group"], name="attr_field_group_idx"),
                    models.Index(fields=["industry"], name="attr_field_industry_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("applies_to", "name"), name="unique_field_name_per_scope"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FieldTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=80, unique=True)),
                ("name", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True, null=True)),
                ("industry", models.CharField(blank=True, max_length=120, null=True)),
                ("color", models.CharField(blank=True, max_length=20, null=True)),
                ("field_configs", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name", "id"],
                "indexes": [models.Index(fields=["industry"], name="attr_template_industry_idx")],
            },
        ),
        migrations.CreateModel(
            name="TemplateApplication",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("client_reference", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("template_code", models.CharField(max_length=80)),
                ("applies_to", models.CharField(blank=True, choices=APPLIES_TO_CHOICES, max_length=32, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=32,
                    ),
                ),
                ("created_fields", models.JSONField(blank=True, default=list)),
                ("skipped_fields", models.JSONField(blank=True, default=list)),
                ("error_message", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="attr_application_status_idx"),
                    models.Index(fields=["client_reference"], name="attr_application_ref_idx"),
                ],
            },
        ),
    ]
