# clinic_core/patients/models.py
from django.db import models

from clinic_core.common.models import TimeStampedModel


class PatientStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    COMPLETED = "COMPLETED", "Completed"
    CONSULTATION_ONLY = "CONSULTATION_ONLY", "Consultation only"


class Patient(TimeStampedModel):
    """
    Patient registry entry. Soft-deleted patients (deleted_at set) are
    treated as absent by every selector.
    """
    patient_code = models.CharField(max_length=32, unique=True)
    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)
    status = models.CharField(max_length=32, choices=PatientStatus.choices, default=PatientStatus.ACTIVE)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["last_name", "first_name"], name="patients_name_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name} ({self.patient_code})"
