# clinic_core/patients/selectors.py
from __future__ import annotations

from django.db.models import Exists, OuterRef, QuerySet

from clinic_core.access.matrix import ObjectType, Permission, capabilities_of, is_assignment_scoped
from clinic_core.assignments.models import PatientAssignment
from clinic_core.patients.models import Patient


def live_patients() -> QuerySet[Patient]:
    return Patient.objects.filter(deleted_at__isnull=True)


def patient_exists(patient_id) -> bool:
    return live_patients().filter(pk=patient_id).exists()


def visible_patients(principal) -> QuerySet[Patient]:
    """
    Patients a principal may list.

    Roles scoped on general patient data see only patients where they hold an
    active slot in their own role. Other roles with read see every live patient.
    Inactive principals and roles without read see nothing.
    """
    if principal is None or not getattr(principal, "is_active", False):
        return Patient.objects.none()

    role = getattr(principal, "role", None)
    if Permission.READ not in capabilities_of(role, ObjectType.PATIENT_GENERAL):
        return Patient.objects.none()

    qs = live_patients()
    if not is_assignment_scoped(role, ObjectType.PATIENT_GENERAL):
        return qs

    on_care_team = PatientAssignment.objects.filter(
        patient=OuterRef("pk"),
        principal_id=principal.pk,
        role_slot=role,
        active=True,
    )
    return qs.filter(Exists(on_care_team))
