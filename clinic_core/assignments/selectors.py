# clinic_core/assignments/selectors.py
from __future__ import annotations

from clinic_core.assignments.models import PatientAssignment


def active_assignment(*, patient_id, role_slot) -> PatientAssignment | None:
    return (
        PatientAssignment.objects.select_related("principal")
        .filter(patient_id=patient_id, role_slot=role_slot, active=True)
        .first()
    )


def list_active(*, patient_id) -> list[PatientAssignment]:
    qs = (
        PatientAssignment.objects.select_related("principal", "assigned_by")
        .filter(patient_id=patient_id, active=True)
        .order_by("role_slot", "-created_at", "-id")
    )
    return list(qs)


def is_assigned(*, patient_id, role_slot, principal_id) -> bool:
    return PatientAssignment.objects.filter(
        patient_id=patient_id,
        role_slot=role_slot,
        principal_id=principal_id,
        active=True,
    ).exists()
