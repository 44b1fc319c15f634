# clinic_core/iam/services/principals.py
from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction

from clinic_core.access.engine import authorize, ensure_allowed
from clinic_core.access.errors import NotFound, SelfDeletionForbidden
from clinic_core.access.matrix import ObjectType, Permission
from clinic_core.audit.constants import AuditAction, AuditEntity
from clinic_core.audit.services import AuditRecord
from clinic_core.iam.models import Principal
from clinic_core.iam.selectors import get_principal


@dataclass(frozen=True)
class PrincipalChange:
    principal: Principal
    changed: bool
    audit_record: AuditRecord | None


class PrincipalService:
    """
    Activation lifecycle. Deactivation is the soft step that must come before
    a permanent purge; it keeps every reference intact.
    Callers log change.audit_record when change.changed.
    """

    @staticmethod
    def _set_active(*, principal_id, acting_principal_id, active: bool, action: str) -> PrincipalChange:
        if str(principal_id) == str(acting_principal_id):
            raise SelfDeletionForbidden()

        acting = get_principal(acting_principal_id)
        if acting is None:
            raise NotFound("Acting principal not found.")
        ensure_allowed(authorize(acting, ObjectType.USER_ACCOUNTS, Permission.UPDATE))

        with transaction.atomic():
            principal = Principal.objects.select_for_update().filter(pk=principal_id).first()
            if principal is None:
                raise NotFound("User not found.")

            if principal.is_active == active:
                return PrincipalChange(principal=principal, changed=False, audit_record=None)

            principal.is_active = active
            principal.save(update_fields=["is_active"])

        return PrincipalChange(
            principal=principal,
            changed=True,
            audit_record=AuditRecord(
                actor_id=acting.pk,
                action=action,
                entity_type=AuditEntity.PRINCIPAL,
                entity_id=str(principal.pk),
                before={"is_active": not active},
                after={"is_active": active},
            ),
        )

    @staticmethod
    def deactivate(*, principal_id, acting_principal_id) -> PrincipalChange:
        return PrincipalService._set_active(
            principal_id=principal_id,
            acting_principal_id=acting_principal_id,
            active=False,
            action=AuditAction.PRINCIPAL_DEACTIVATED,
        )

    @staticmethod
    def reactivate(*, principal_id, acting_principal_id) -> PrincipalChange:
        return PrincipalService._set_active(
            principal_id=principal_id,
            acting_principal_id=acting_principal_id,
            active=True,
            action=AuditAction.PRINCIPAL_REACTIVATED,
        )
