import logging
from datetime import datetime, timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError
from django.utils.timezone import now

from clinic_core.audit.models import AuditEntry, AuditEntryImmutable
from clinic_core.audit.selectors import list_audit_entries
from clinic_core.audit.services import AuditRecord, AuditRecorder

pytestmark = pytest.mark.django_db


def test_record_persists_entry(admin):
    entry = AuditRecorder.record(
        actor_id=admin.id,
        action="principal.deactivated",
        entity_type="Principal",
        entity_id=42,
        before={"is_active": True},
        after={"is_active": False},
    )

    assert entry is not None
    entry.refresh_from_db()
    assert entry.actor_id == admin.id
    assert entry.entity_id == "42"
    assert entry.after == {"is_active": False}
    assert entry.occurred_at is not None


def test_log_accepts_record(admin):
    entry = AuditRecorder.log(
        AuditRecord(actor_id=admin.id, action="assignment.set", entity_type="Patient", entity_id="7")
    )

    assert AuditEntry.objects.get(pk=entry.pk).action == "assignment.set"


def test_entries_are_write_once(admin):
    entry = AuditRecorder.record(actor_id=admin.id, action="assignment.set", entity_type="Patient")

    entry.action = "tampered"
    with pytest.raises(AuditEntryImmutable):
        entry.save()

    with pytest.raises(AuditEntryImmutable):
        entry.delete()

    with pytest.raises(AuditEntryImmutable):
        AuditEntry.objects.filter(pk=entry.pk).update(action="tampered")

    with pytest.raises(AuditEntryImmutable):
        AuditEntry.objects.all().delete()

    assert AuditEntry.objects.get(pk=entry.pk).action == "assignment.set"


def test_write_failure_is_logged_and_swallowed(admin, caplog):
    caplog.set_level(logging.ERROR, logger="clinic_core.audit")

    with mock.patch.object(AuditEntry.objects, "create", side_effect=DatabaseError("disk full")):
        entry = AuditRecorder.record(actor_id=admin.id, action="assignment.set", entity_type="Patient")

    assert entry is None
    assert any("audit write failed" in r.getMessage() for r in caplog.records)
    # the surrounding transaction is still usable
    assert AuditEntry.objects.count() == 0


def test_model_snapshots_with_dates_and_decimals_are_stored(admin):
    entry = AuditRecorder.record(
        actor_id=admin.id,
        action="principal.deactivated",
        entity_type="Principal",
        entity_id=admin.id,
        before={"seen_at": datetime(2024, 1, 1, 9, 30), "balance": Decimal("12.50")},
    )

    assert entry is not None
    stored = AuditEntry.objects.get(pk=entry.pk)
    assert stored.before == {"seen_at": "2024-01-01T09:30:00", "balance": "12.50"}


def test_unserializable_snapshot_is_logged_and_swallowed(admin, caplog):
    caplog.set_level(logging.ERROR, logger="clinic_core.audit")

    entry = AuditRecorder.record(
        actor_id=admin.id,
        action="assignment.set",
        entity_type="Patient",
        after={"handle": object()},
    )

    assert entry is None
    assert any("audit write failed" in r.getMessage() for r in caplog.records)
    assert AuditEntry.objects.count() == 0


def test_list_audit_entries_filters(admin, nurse):
    AuditRecorder.record(actor_id=admin.id, action="principal.deactivated", entity_type="Principal", entity_id=1)
    AuditRecorder.record(actor_id=nurse.id, action="assignment.set", entity_type="Patient", entity_id=2)
    AuditRecorder.record(actor_id=admin.id, action="assignment.set", entity_type="Patient", entity_id=3)

    assert list_audit_entries(actor_id=admin.id).count() == 2
    assert list_audit_entries(entity_type="Patient").count() == 2
    assert list_audit_entries(action="assignment.set", actor_id=admin.id).count() == 1

    newest = list_audit_entries().first()
    assert newest.entity_id == "3"

    assert list_audit_entries(since=now() + timedelta(minutes=5)).count() == 0
    assert list_audit_entries(until=now() + timedelta(minutes=5)).count() == 3
