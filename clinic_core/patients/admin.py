from django.contrib import admin

from clinic_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = (
        "patient_code",
        "first_name",
        "last_name",
        "status",
        "deleted_at",
        "created_at",
    )
    list_filter = ("status",)
    search_fields = ("patient_code", "first_name", "last_name")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-created_at",)
