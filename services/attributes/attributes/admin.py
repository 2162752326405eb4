from django.contrib import admin

from .models import FieldDefinition, FieldTemplate, TemplateApplication


@admin.register(FieldDefinition)
class FieldDefinitionAdmin(admin.ModelAdmin):
    list_display = ["applies_to", "name", "label", "field_type", "group", "order", "required", "is_active"]
    list_filter = ["applies_to", "field_type", "is_active", "industry"]
    search_fields = ["name", "label", "group"]
    ordering = ["applies_to", "order", "name"]


@admin.register(FieldTemplate)
class FieldTemplateAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "industry", "is_active", "updated_at"]
    list_filter = ["is_active", "industry"]
    search_fields = ["code", "name"]
    ordering = ["name"]


@admin.register(TemplateApplication)
class TemplateApplicationAdmin(admin.ModelAdmin):
    list_display = ["id", "template_code", "applies_to", "status", "created_at", "completed_at"]
    list_filter = ["status", "applies_to"]
    search_fields = ["template_code", "client_reference"]
    readonly_fields = ["created_fields", "skipped_fields", "error_message"]
