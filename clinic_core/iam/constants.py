# clinic_core/iam/constants.py
from django.db import models


class Role(models.TextChoices):
    """
    Closed set of staff roles. Stored on Principal.role and used as the
    care-team slot name on patient assignments.
    """
    ADMIN = "ADMIN", "Administrator"
    ORTHODONTIST = "ORTHODONTIST", "Orthodontist"
    DENTAL_SURGEON = "DENTAL_SURGEON", "Dental surgeon"
    NURSE = "NURSE", "Nurse"
    RECEPTION = "RECEPTION", "Reception"
    STUDENT = "STUDENT", "Student"


# Roles that can occupy a care-team slot on a patient.
ASSIGNABLE_ROLES = frozenset({
    Role.ORTHODONTIST.value,
    Role.DENTAL_SURGEON.value,
    Role.NURSE.value,
    Role.STUDENT.value,
})
