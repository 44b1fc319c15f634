from django.contrib import admin

from clinic_core.assignments.models import PatientAssignment


@admin.register(PatientAssignment)
class PatientAssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "role_slot", "principal", "active", "assigned_by", "created_at")
    list_filter = ("role_slot", "active")
    search_fields = ("patient__patient_code", "principal__username")
    list_select_related = ("patient", "principal", "assigned_by")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-created_at",)

    # history rows: swaps go through AssignmentService
    def has_delete_permission(self, request, obj=None):
        return False
