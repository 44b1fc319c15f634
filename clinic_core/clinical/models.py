# clinic_core/clinical/models.py
from django.conf import settings
from django.db import models

from clinic_core.common.models import TimeStampedModel
from clinic_core.patients.models import Patient


class Visit(TimeStampedModel):
    """
    One chair-side visit. The provider must survive as long as the visit does,
    so purging a principal repoints provider before the principal row goes.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="visits")
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="visits_provided",
    )
    visit_date = models.DateField()
    procedure = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = "visits"
        indexes = [
            models.Index(fields=["patient", "visit_date"], name="visits_patient_date_idx"),
        ]


class NoteType(models.TextChoices):
    PROGRESS = "PROGRESS", "Progress"
    TREATMENT = "TREATMENT", "Treatment"
    OBSERVATION = "OBSERVATION", "Observation"


class ClinicalNote(TimeStampedModel):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="notes")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="notes_authored",
    )
    # verification is optional, losing the verifier just clears it
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notes_verified",
    )
    note_type = models.CharField(max_length=32, choices=NoteType.choices, default=NoteType.PROGRESS)
    body = models.TextField()

    class Meta:
        db_table = "notes"
        indexes = [
            models.Index(fields=["patient", "created_at"], name="notes_patient_created_idx"),
        ]
