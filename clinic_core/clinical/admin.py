from django.contrib import admin

from clinic_core.clinical.models import ClinicalNote, Visit


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "provider", "visit_date", "procedure")
    search_fields = ("patient__patient_code", "procedure")
    list_select_related = ("patient", "provider")
    ordering = ("-visit_date",)


@admin.register(ClinicalNote)
class ClinicalNoteAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "author", "note_type", "verified_by", "created_at")
    list_filter = ("note_type",)
    list_select_related = ("patient", "author", "verified_by")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-created_at",)
