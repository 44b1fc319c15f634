# clinic_core/audit/selectors.py
from __future__ import annotations

from datetime import datetime

from django.db.models import QuerySet

from clinic_core.audit.models import AuditEntry


def list_audit_entries(
    *,
    actor_id: int | None = None,
    entity_type: str | None = None,
    action: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
) -> QuerySet[AuditEntry]:
    qs = AuditEntry.objects.select_related("actor")

    if actor_id is not None:
        qs = qs.filter(actor_id=actor_id)
    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if action:
        qs = qs.filter(action=action)
    if since is not None:
        qs = qs.filter(occurred_at__gte=since)
    if until is not None:
        qs = qs.filter(occurred_at__lte=until)

    return qs.order_by("-occurred_at", "-id")
