# clinic_core/iam/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from clinic_core.iam.constants import ASSIGNABLE_ROLES, Role
from clinic_core.iam.models import Principal


def get_principal(principal_id) -> Principal | None:
    return Principal.objects.filter(pk=principal_id).first()


def list_active_principals_by_role(role) -> QuerySet[Principal]:
    return Principal.objects.filter(role=role, is_active=True).order_by("display_name", "username")


def assignable_slots_for(role) -> frozenset:
    """
    Care-team slots a principal in `role` may fill on a patient.
    Orthodontists only staff their own team (surgeon + student).
    """
    if role in (Role.RECEPTION, Role.NURSE):
        return ASSIGNABLE_ROLES
    if role == Role.ORTHODONTIST:
        return frozenset({Role.DENTAL_SURGEON.value, Role.STUDENT.value})
    return frozenset()


def list_assignable_staff(*, acting_role) -> QuerySet[Principal]:
    slots = assignable_slots_for(acting_role)
    return (
        Principal.objects.filter(role__in=sorted(slots), is_active=True)
        .order_by("role", "display_name", "username")
    )
