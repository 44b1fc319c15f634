# clinic_core/assignments/policy.py
"""
Who may staff a patient's care team.

- Reception and nurses fill any assignable slot.
- An orthodontist fills the surgeon and student slots, and only on patients
  where they hold the active orthodontist slot themselves.
- Everyone else is refused.
"""
from __future__ import annotations

import logging

from clinic_core.access.engine import ALLOW, Decision
from clinic_core.access.errors import DenyReason
from clinic_core.assignments.selectors import is_assigned
from clinic_core.iam.constants import Role
from clinic_core.iam.selectors import assignable_slots_for

logger = logging.getLogger("clinic_core.access")


def _deny(actor, patient_id, role_slot, reason: str) -> Decision:
    logger.info(
        "assignment refused: actor=%s role=%s patient=%s slot=%s reason=%s",
        getattr(actor, "pk", None),
        getattr(actor, "role", None),
        patient_id,
        role_slot,
        reason,
    )
    return Decision(allowed=False, reason=reason)


def check_assignment_policy(actor, patient_id, role_slot) -> Decision:
    if actor is None or not getattr(actor, "is_active", False):
        return _deny(actor, patient_id, role_slot, DenyReason.PRINCIPAL_INACTIVE)

    if role_slot not in assignable_slots_for(actor.role):
        return _deny(actor, patient_id, role_slot, DenyReason.CAPABILITY_DENIED)

    if actor.role == Role.ORTHODONTIST and not is_assigned(
        patient_id=patient_id,
        role_slot=Role.ORTHODONTIST,
        principal_id=actor.pk,
    ):
        return _deny(actor, patient_id, role_slot, DenyReason.INSTANCE_DENIED)

    return ALLOW
