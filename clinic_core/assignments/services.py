# clinic_core/assignments/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction

from clinic_core.access.errors import NotFound, RoleMismatch, Unavailable
from clinic_core.assignments.models import PatientAssignment
from clinic_core.audit.constants import AuditAction, AuditEntity
from clinic_core.audit.services import AuditRecord
from clinic_core.common.conf import access_setting
from clinic_core.iam.constants import ASSIGNABLE_ROLES
from clinic_core.iam.models import Principal
from clinic_core.patients.models import Patient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentChange:
    assignment: PatientAssignment
    previous: PatientAssignment | None
    changed: bool
    audit_record: AuditRecord | None


class AssignmentService:
    """
    Care-team slot writes.

    Notes:
    - One swap = one transaction: lock patient row, deactivate current holder, insert new row.
    - The partial unique constraint is the last line against two active rows; a lost race
      surfaces as IntegrityError and the whole swap is retried.
    - Re-assigning the current holder is a no-op (no new row, no audit record).
    - Auditing is the caller's job (log change.audit_record when change.changed).
    """

    @staticmethod
    def _swap(*, patient_id, role_slot: str, principal_id, acting_principal_id) -> AssignmentChange:
        patient = (
            Patient.objects.select_for_update()
            .filter(pk=patient_id, deleted_at__isnull=True)
            .first()
        )
        if patient is None:
            raise NotFound("Patient not found.")

        principal = Principal.objects.filter(pk=principal_id, is_active=True).first()
        if principal is None:
            raise NotFound("Selected staff member not found or inactive.")

        if principal.role != role_slot:
            raise RoleMismatch()

        if not Principal.objects.filter(pk=acting_principal_id).exists():
            raise NotFound("Acting principal not found.")

        current = (
            PatientAssignment.objects.select_for_update()
            .filter(patient=patient, role_slot=role_slot, active=True)
            .first()
        )

        if current is not None and current.principal_id == principal.pk:
            return AssignmentChange(assignment=current, previous=None, changed=False, audit_record=None)

        if current is not None:
            current.active = False
            current.save(update_fields=["active", "updated_at"])

        assignment = PatientAssignment.objects.create(
            patient=patient,
            principal=principal,
            role_slot=role_slot,
            active=True,
            assigned_by_id=acting_principal_id,
        )

        audit_record = AuditRecord(
            actor_id=acting_principal_id,
            action=AuditAction.ASSIGNMENT_SET,
            entity_type=AuditEntity.PATIENT,
            entity_id=str(patient.pk),
            before={
                "role_slot": role_slot,
                "principal_id": current.principal_id if current is not None else None,
            },
            after={
                "role_slot": role_slot,
                "principal_id": principal.pk,
                "assignment_id": assignment.pk,
            },
        )
        return AssignmentChange(
            assignment=assignment,
            previous=current,
            changed=True,
            audit_record=audit_record,
        )

    @staticmethod
    def set_assignment(*, patient_id, role_slot: str, principal_id, acting_principal_id) -> AssignmentChange:
        if role_slot not in ASSIGNABLE_ROLES:
            raise RoleMismatch(f"Role slot {role_slot!r} cannot be assigned to a patient.")

        attempts = max(1, int(access_setting("ASSIGNMENT_MAX_ATTEMPTS")))
        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return AssignmentService._swap(
                        patient_id=patient_id,
                        role_slot=role_slot,
                        principal_id=principal_id,
                        acting_principal_id=acting_principal_id,
                    )
            except IntegrityError:
                logger.warning(
                    "assignment swap collided: patient=%s slot=%s attempt=%s/%s",
                    patient_id,
                    role_slot,
                    attempt,
                    attempts,
                )

        raise Unavailable("Assignment could not be saved after concurrent updates. Retry later.")
