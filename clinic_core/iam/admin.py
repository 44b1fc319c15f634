# clinic_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from clinic_core.iam.models import Principal


@admin.register(Principal)
class PrincipalAdmin(UserAdmin):
    list_display = ("id", "username", "display_name", "role", "is_active", "date_joined")
    list_filter = ("role", "is_active")
    search_fields = ("username", "display_name", "email")
    ordering = ("username",)

    fieldsets = UserAdmin.fieldsets + (
        ("Clinic", {"fields": ("role", "display_name")}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ("Clinic", {"fields": ("role", "display_name")}),
    )

    # permanent removal goes through purge_principal (reassigns references first)
    def has_delete_permission(self, request, obj=None):
        return False
