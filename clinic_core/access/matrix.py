# clinic_core/access/matrix.py
"""
Static capability matrix: Role x ObjectType -> set of Permission.

Built once at import and exposed read-only. Absence of a (role, object type)
pair means deny; the table only ever grants.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from clinic_core.iam.constants import Role


class ObjectType(str, Enum):
    PATIENT_GENERAL = "PATIENT_GENERAL"
    PATIENT_MEDICAL = "PATIENT_MEDICAL"
    PATIENT_RADIOGRAPHS = "PATIENT_RADIOGRAPHS"
    PATIENT_NOTES = "PATIENT_NOTES"
    PATIENT_TREATMENT = "PATIENT_TREATMENT"
    PATIENT_APPOINTMENTS = "PATIENT_APPOINTMENTS"
    USER_ACCOUNTS = "USER_ACCOUNTS"
    AUDIT_LOGS = "AUDIT_LOGS"


class Permission(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"


CLINICAL_OBJECT_TYPES = frozenset({
    ObjectType.PATIENT_GENERAL,
    ObjectType.PATIENT_MEDICAL,
    ObjectType.PATIENT_RADIOGRAPHS,
    ObjectType.PATIENT_NOTES,
    ObjectType.PATIENT_TREATMENT,
    ObjectType.PATIENT_APPOINTMENTS,
})

C, R, U, D, A = (
    Permission.CREATE,
    Permission.READ,
    Permission.UPDATE,
    Permission.DELETE,
    Permission.APPROVE,
)


def _freeze(rows: dict) -> Mapping[Role, Mapping[ObjectType, frozenset[Permission]]]:
    return MappingProxyType({
        role: MappingProxyType({ot: frozenset(perms) for ot, perms in grants.items() if perms})
        for role, grants in rows.items()
    })


CAPABILITIES = _freeze({
    Role.ADMIN: {
        ObjectType.PATIENT_GENERAL: {R, D},
        ObjectType.PATIENT_MEDICAL: {R},
        ObjectType.PATIENT_RADIOGRAPHS: {R},
        ObjectType.PATIENT_NOTES: {R},
        ObjectType.PATIENT_TREATMENT: {R},
        ObjectType.PATIENT_APPOINTMENTS: {R},
        ObjectType.USER_ACCOUNTS: {C, R, U, D},
        ObjectType.AUDIT_LOGS: {R},
    },
    Role.ORTHODONTIST: {
        ObjectType.PATIENT_GENERAL: {R, U},
        ObjectType.PATIENT_MEDICAL: {R, U},
        ObjectType.PATIENT_RADIOGRAPHS: {R, U, D},
        ObjectType.PATIENT_NOTES: {C, R, U, A},
        ObjectType.PATIENT_TREATMENT: {C, R, U, A},
        ObjectType.PATIENT_APPOINTMENTS: {R, U},
    },
    Role.DENTAL_SURGEON: {
        ObjectType.PATIENT_GENERAL: {R, U},
        ObjectType.PATIENT_MEDICAL: {R, U},
        ObjectType.PATIENT_RADIOGRAPHS: {R, U},
        ObjectType.PATIENT_NOTES: {C, R, U},
        ObjectType.PATIENT_TREATMENT: {C, R, U},
        ObjectType.PATIENT_APPOINTMENTS: {R, U},
    },
    Role.NURSE: {
        ObjectType.PATIENT_GENERAL: {R, U},
        ObjectType.PATIENT_APPOINTMENTS: {C, R, U},
    },
    Role.RECEPTION: {
        ObjectType.PATIENT_GENERAL: {C, R, U},
        ObjectType.PATIENT_APPOINTMENTS: {C, R, U},
    },
    Role.STUDENT: {
        ObjectType.PATIENT_GENERAL: {R},
        ObjectType.PATIENT_MEDICAL: {R},
        ObjectType.PATIENT_RADIOGRAPHS: {R},
        ObjectType.PATIENT_NOTES: {R},
        ObjectType.PATIENT_TREATMENT: {R},
        ObjectType.PATIENT_APPOINTMENTS: {R},
    },
})

# Roles whose clinical grants only apply to patients they are actively assigned to.
ASSIGNMENT_SCOPE = MappingProxyType({
    Role.ORTHODONTIST: CLINICAL_OBJECT_TYPES,
    Role.DENTAL_SURGEON: CLINICAL_OBJECT_TYPES,
    Role.STUDENT: CLINICAL_OBJECT_TYPES,
})

_EMPTY: frozenset[Permission] = frozenset()


def parse_role(value) -> Role | None:
    try:
        return Role(value)
    except ValueError:
        return None


def parse_object_type(value) -> ObjectType | None:
    try:
        return ObjectType(value)
    except ValueError:
        return None


def parse_permission(value) -> Permission | None:
    try:
        return Permission(value)
    except ValueError:
        return None


def capabilities_of(role, object_type) -> frozenset[Permission]:
    """
    Permissions granted to `role` on `object_type`.
    Unknown roles or object types yield the empty set.
    """
    r = parse_role(role)
    ot = parse_object_type(object_type)
    if r is None or ot is None:
        return _EMPTY
    return CAPABILITIES.get(r, {}).get(ot, _EMPTY)


def permissions_for_role(role) -> dict[str, list[str]]:
    """
    Whole matrix row for a role, JSON friendly (object type -> sorted permission values).
    """
    r = parse_role(role)
    if r is None:
        return {}
    return {
        ot.value: sorted(p.value for p in perms)
        for ot, perms in CAPABILITIES.get(r, {}).items()
    }


def is_assignment_scoped(role, object_type) -> bool:
    r = parse_role(role)
    ot = parse_object_type(object_type)
    if r is None or ot is None:
        return False
    return ot in ASSIGNMENT_SCOPE.get(r, frozenset())
