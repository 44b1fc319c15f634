# clinic_core/audit/admin.py
from django.contrib import admin

from clinic_core.audit.models import AuditEntry


@admin.register(AuditEntry)
class AuditEntryAdmin(admin.ModelAdmin):
    list_display = (
        "action",
        "entity_type",
        "entity_id",
        "actor",
        "occurred_at",
    )
    list_filter = ("action", "entity_type")
    search_fields = ("action", "entity_type", "entity_id")
    readonly_fields = ("actor", "action", "entity_type", "entity_id", "before", "after", "occurred_at")
    ordering = ("-occurred_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
