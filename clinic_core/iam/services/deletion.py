# clinic_core/iam/services/deletion.py
"""
Permanent principal removal.

A deactivated principal can still be named as provider, author, assigner...
across any number of tables. Before the row goes, every reference whose
delete rule would block the delete is repointed at the acting administrator.
The set of references is discovered at call time, never listed here.

Order of checks (all before any write):
  1) self purge              -> SelfDeletionForbidden
  2) acting principal        -> NotFound / AccessDenied (delete on USER_ACCOUNTS)
  3) target                  -> NotFound / MustDeactivateFirst

Then, in one transaction: lock target, repoint blocking references, delete.
The audit entry is written after the transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from django.db import IntegrityError, OperationalError, connection, transaction
from django.db.models import ProtectedError, RestrictedError

from clinic_core.access.engine import authorize, ensure_allowed
from clinic_core.access.errors import (
    MustDeactivateFirst,
    NotFound,
    SelfDeletionForbidden,
    Unavailable,
    Unreassignable,
)
from clinic_core.access.matrix import ObjectType, Permission
from clinic_core.audit.constants import AuditAction, AuditEntity
from clinic_core.audit.services import AuditRecorder
from clinic_core.common.conf import access_setting
from clinic_core.iam.introspection import ForeignKeyReference, SchemaIntrospector, get_introspector
from clinic_core.iam.models import Principal
from clinic_core.iam.selectors import get_principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReassignedReference:
    table: str
    column: str
    rows: int


@dataclass
class ReassignmentPlan:
    target_id: int
    reassigned_to: int
    references: list[ReassignedReference] = field(default_factory=list)

    def add(self, table: str, column: str, rows: int) -> None:
        if rows > 0:
            self.references.append(ReassignedReference(table=table, column=column, rows=rows))

    def by_table(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for ref in self.references:
            totals[ref.table] = totals.get(ref.table, 0) + ref.rows
        return totals

    @property
    def total_rows(self) -> int:
        return sum(ref.rows for ref in self.references)

    def as_audit_payload(self) -> dict[str, Any]:
        return {
            "reassigned_to": self.reassigned_to,
            "references": [
                {"table": r.table, "column": r.column, "rows": r.rows}
                for r in self.references
            ],
            "tables": self.by_table(),
        }


def _repoint(ref: ForeignKeyReference, *, from_id, to_id) -> int:
    qn = connection.ops.quote_name
    sql = f"UPDATE {qn(ref.table)} SET {qn(ref.column)} = %s WHERE {qn(ref.column)} = %s"
    with connection.cursor() as cursor:
        cursor.execute(sql, [to_id, from_id])
        return max(cursor.rowcount or 0, 0)


def _purge_once(*, target_id, acting_id, introspector: SchemaIntrospector) -> tuple[ReassignmentPlan, dict]:
    principal_table = Principal._meta.db_table
    principal_pk = Principal._meta.pk.column

    with transaction.atomic():
        target = Principal.objects.select_for_update().filter(pk=target_id).first()
        if target is None:
            raise NotFound("User not found.")
        if target.is_active:
            raise MustDeactivateFirst()

        snapshot = {"id": target.pk, "role": target.role}
        plan = ReassignmentPlan(target_id=target.pk, reassigned_to=acting_id)

        for ref in introspector.list_foreign_keys_referencing(principal_table, principal_pk):
            if ref.table == principal_table:
                continue
            if not ref.requires_reassignment:
                continue
            rows = _repoint(ref, from_id=target.pk, to_id=acting_id)
            plan.add(ref.table, ref.column, rows)

        # CASCADE / SET NULL relations are applied by the ORM collector here
        target.delete()

    return plan, snapshot


def permanently_delete_principal(
    *,
    target_id,
    acting_principal_id,
    introspector: SchemaIntrospector | None = None,
) -> ReassignmentPlan:
    if str(target_id) == str(acting_principal_id):
        raise SelfDeletionForbidden("You cannot delete your own account.")

    acting = get_principal(acting_principal_id)
    if acting is None:
        raise NotFound("Acting principal not found.")
    ensure_allowed(authorize(acting, ObjectType.USER_ACCOUNTS, Permission.DELETE))

    target = get_principal(target_id)
    if target is None:
        raise NotFound("User not found.")
    if target.is_active:
        raise MustDeactivateFirst()

    introspector = introspector or get_introspector()
    attempts = max(1, int(access_setting("DELETION_MAX_ATTEMPTS")))

    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            plan, snapshot = _purge_once(
                target_id=target.pk,
                acting_id=acting.pk,
                introspector=introspector,
            )
            break
        except OperationalError as exc:
            last_error = exc
            logger.warning(
                "principal purge attempt %s/%s failed: target=%s error=%s",
                attempt,
                attempts,
                target.pk,
                exc,
            )
        except (ProtectedError, RestrictedError, IntegrityError) as exc:
            logger.warning("principal purge blocked by unreassignable reference: target=%s error=%s", target.pk, exc)
            raise Unreassignable() from exc
    else:
        raise Unavailable("User could not be deleted right now. Retry later.") from last_error

    AuditRecorder.record(
        actor_id=acting.pk,
        action=AuditAction.PRINCIPAL_PURGED,
        entity_type=AuditEntity.PRINCIPAL,
        entity_id=snapshot["id"],
        before=snapshot,
        after=plan.as_audit_payload(),
    )

    logger.info(
        "principal purged: target=%s by=%s reassigned=%s",
        snapshot["id"],
        acting.pk,
        plan.by_table(),
    )
    return plan
