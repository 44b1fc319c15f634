# clinic_core/access/engine.py
"""
Authorization engine.

Two layers:
1) capability: does the principal's role hold `permission` on `object_type`?
2) instance: for assignment-scoped roles on clinical data, is the principal
   currently assigned to the patient in their role slot?

Capability is checked first and short-circuits; the assignment lookup only
runs when a patient id is supplied and the (role, object type) pair is scoped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError

from clinic_core.access.errors import AccessDenied, DenyReason, Unavailable
from clinic_core.access.matrix import (
    capabilities_of,
    is_assignment_scoped,
    parse_object_type,
    parse_permission,
)
from clinic_core.assignments.selectors import is_assigned

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def _deny(principal, object_type, permission, patient_id, reason: str) -> Decision:
    logger.info(
        "access denied: principal=%s role=%s object_type=%s permission=%s patient=%s reason=%s",
        getattr(principal, "pk", None),
        getattr(principal, "role", None),
        object_type,
        permission,
        patient_id,
        reason,
    )
    return Decision(allowed=False, reason=reason)


def authorize(principal, object_type, permission, patient_id=None) -> Decision:
    if principal is None or not getattr(principal, "is_active", False):
        return _deny(principal, object_type, permission, patient_id, DenyReason.PRINCIPAL_INACTIVE)

    role = getattr(principal, "role", None)
    ot = parse_object_type(object_type)
    perm = parse_permission(permission)

    # unknown object type / permission never skip the check
    if ot is None or perm is None or perm not in capabilities_of(role, ot):
        return _deny(principal, object_type, permission, patient_id, DenyReason.CAPABILITY_DENIED)

    if patient_id is None:
        return ALLOW

    if not is_assignment_scoped(role, ot):
        return ALLOW

    try:
        assigned = is_assigned(patient_id=patient_id, role_slot=role, principal_id=principal.pk)
    except DatabaseError as exc:
        logger.warning("assignment lookup failed for patient=%s: %s", patient_id, exc)
        raise Unavailable() from exc

    if not assigned:
        return _deny(principal, ot.value, perm.value, patient_id, DenyReason.INSTANCE_DENIED)

    return ALLOW


def ensure_allowed(decision: Decision) -> None:
    if not decision.allowed:
        raise AccessDenied(reason=decision.reason)
