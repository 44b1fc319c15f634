# clinic_core/iam/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models

from clinic_core.iam.constants import Role


class Principal(AbstractUser):
    """
    Staff account. Every clinical record that names an owner points here,
    so permanent removal goes through the purge service, never a bare delete().

    Lifecycle: active -> deactivated (is_active=False) -> purged.
    """
    role = models.CharField(max_length=32, choices=Role.choices, db_index=True)
    display_name = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = "iam_principal"
        indexes = [
            models.Index(fields=["role", "is_active"], name="iam_principal_role_active_idx"),
        ]

    def __str__(self) -> str:
        return self.display_name or self.username
