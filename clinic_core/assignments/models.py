# clinic_core/assignments/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from clinic_core.common.models import TimeStampedModel
from clinic_core.iam.constants import Role
from clinic_core.patients.models import Patient


class PatientAssignment(TimeStampedModel):
    """
    One care-team slot on one patient, held by one principal.

    Superseded rows are deactivated, never deleted, so the table doubles as
    the assignment history. At most one active row per (patient, role_slot).
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="assignments")
    principal = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="patient_assignments",
    )
    role_slot = models.CharField(max_length=32, choices=Role.choices)
    active = models.BooleanField(default=True, db_index=True)

    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assignments_made",
    )

    class Meta:
        db_table = "assignments_patient_assignment"
        constraints = [
            models.UniqueConstraint(
                fields=["patient", "role_slot"],
                condition=Q(active=True),
                name="uq_assignment_active_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["patient", "role_slot", "active"], name="assignment_slot_active_idx"),
            models.Index(fields=["principal", "active"], name="assignment_principal_idx"),
        ]

    def __str__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"{self.role_slot} on patient {self.patient_id} -> {self.principal_id} ({state})"
