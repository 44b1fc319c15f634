# clinic_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.db import transaction

from clinic_core.audit.models import AuditEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    actor_id: int | None
    action: str
    entity_type: str
    entity_id: str | None = None
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None


class AuditRecorder:
    """
    Central audit writer.

    Best-effort: the write runs in its own savepoint and any failure (database
    or unserializable snapshot) is logged, never raised. An audit outage must not undo the change it describes.
    """

    @staticmethod
    def record(
        *,
        actor_id: int | None,
        action: str,
        entity_type: str,
        entity_id=None,
        before: Optional[Dict[str, Any]] = None,
        after: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry | None:
        try:
            with transaction.atomic():
                return AuditEntry.objects.create(
                    actor_id=actor_id,
                    action=action,
                    entity_type=entity_type,
                    entity_id=str(entity_id) if entity_id is not None else None,
                    before=before,
                    after=after,
                )
        except Exception:
            logger.exception(
                "audit write failed: action=%s entity=%s:%s actor=%s",
                action,
                entity_type,
                entity_id,
                actor_id,
            )
            return None

    @staticmethod
    def log(record: AuditRecord) -> AuditEntry | None:
        return AuditRecorder.record(
            actor_id=record.actor_id,
            action=record.action,
            entity_type=record.entity_type,
            entity_id=record.entity_id,
            before=record.before,
            after=record.after,
        )
