# clinic_core/iam/tests/test_purge_principal.py
from datetime import date

import pytest
from django.core.management import CommandError, call_command
from django.db import OperationalError, connection

from clinic_core.access.errors import (
    AccessDenied,
    MustDeactivateFirst,
    NotFound,
    SelfDeletionForbidden,
    Unavailable,
    Unreassignable,
)
from clinic_core.assignments.models import PatientAssignment
from clinic_core.audit.constants import AuditAction
from clinic_core.audit.models import AuditEntry
from clinic_core.audit.services import AuditRecorder
from clinic_core.clinical.models import ClinicalNote, Visit
from clinic_core.conftest import make_principal
from clinic_core.iam.constants import Role
from clinic_core.iam.introspection import ForeignKeyReference, ModelRegistryIntrospector
from clinic_core.iam.models import Principal
from clinic_core.iam.services.deletion import permanently_delete_principal

pytestmark = pytest.mark.django_db


@pytest.fixture
def departed(db):
    return make_principal("surgeon_left", Role.DENTAL_SURGEON, is_active=False)


@pytest.fixture
def history(departed, patient, nurse):
    """
    3 visits provided + 2 notes authored by the departed surgeon,
    plus one note they verified.
    """
    visits = [
        Visit.objects.create(patient=patient, provider=departed, visit_date=date(2024, 3, d), procedure="Scaling")
        for d in (4, 11, 18)
    ]
    notes = [
        ClinicalNote.objects.create(patient=patient, author=departed, body=f"Progress {i}")
        for i in range(2)
    ]
    verified = ClinicalNote.objects.create(patient=patient, author=nurse, verified_by=departed, body="Checked")
    return visits, notes, verified


def _purge(target, acting, **kwargs):
    return permanently_delete_principal(target_id=target.id, acting_principal_id=acting.id, **kwargs)


def test_purge_reassigns_history_and_records_one_audit_entry(admin, departed, history):
    visits, notes, verified = history

    plan = _purge(departed, admin)

    assert plan.by_table() == {"visits": 3, "notes": 2}
    assert plan.total_rows == 5
    assert not Principal.objects.filter(pk=departed.pk).exists()

    assert set(Visit.objects.values_list("provider_id", flat=True)) == {admin.id}
    assert ClinicalNote.objects.filter(author=admin).count() == 2
    verified.refresh_from_db()
    assert verified.verified_by_id is None

    entries = AuditEntry.objects.filter(action=AuditAction.PRINCIPAL_PURGED)
    assert entries.count() == 1
    entry = entries.get()
    assert entry.actor_id == admin.id
    assert entry.entity_id == str(departed.pk)
    assert entry.before == {"id": departed.pk, "role": "DENTAL_SURGEON"}
    assert entry.after["tables"] == {"visits": 3, "notes": 2}
    assert entry.after["reassigned_to"] == admin.id
    assert {"table": "visits", "column": "provider_id", "rows": 3} in entry.after["references"]


def test_active_principal_must_be_deactivated_first(admin, surgeon, patient):
    Visit.objects.create(patient=patient, provider=surgeon, visit_date=date(2024, 5, 1))

    with pytest.raises(MustDeactivateFirst):
        _purge(surgeon, admin)

    assert Principal.objects.filter(pk=surgeon.pk).exists()
    assert Visit.objects.get().provider_id == surgeon.id
    assert not AuditEntry.objects.exists()


def test_self_purge_is_always_forbidden(admin):
    with pytest.raises(SelfDeletionForbidden):
        _purge(admin, admin)

    admin.is_active = False
    admin.save(update_fields=["is_active"])

    with pytest.raises(SelfDeletionForbidden):
        _purge(admin, admin)


def test_acting_principal_needs_delete_on_user_accounts(nurse, departed, history):
    with pytest.raises(AccessDenied):
        _purge(departed, nurse)

    assert Principal.objects.filter(pk=departed.pk).exists()


def test_unknown_target_or_actor(admin, departed):
    with pytest.raises(NotFound):
        permanently_delete_principal(target_id=999999, acting_principal_id=admin.id)

    with pytest.raises(NotFound):
        permanently_delete_principal(target_id=departed.id, acting_principal_id=999999)


class NotesOnlyIntrospector:
    def list_foreign_keys_referencing(self, table, column):
        return [ForeignKeyReference("notes", "author_id", "RESTRICT")]


def test_unreassignable_reference_rolls_back_everything(admin, departed, history):
    with pytest.raises(Unreassignable):
        _purge(departed, admin, introspector=NotesOnlyIntrospector())

    assert Principal.objects.filter(pk=departed.pk).exists()
    # the notes repoint was undone with the rest
    assert ClinicalNote.objects.filter(author=departed).count() == 2
    assert Visit.objects.filter(provider=departed).count() == 3
    assert not AuditEntry.objects.filter(action=AuditAction.PRINCIPAL_PURGED).exists()


def _create_referrals_table(*, unique):
    # a table no model declares, added after the app was built
    column = "referred_by_id INTEGER NOT NULL"
    if unique:
        column += " UNIQUE"
    with connection.cursor() as cursor:
        cursor.execute(
            "CREATE TABLE clinic_referrals ("
            " id INTEGER PRIMARY KEY,"
            f" {column} REFERENCES iam_principal(id) ON DELETE RESTRICT"
            ")"
        )


def _referrals():
    with connection.cursor() as cursor:
        cursor.execute("SELECT id, referred_by_id FROM clinic_referrals ORDER BY id")
        return cursor.fetchall()


def _add_referral(pk, principal):
    with connection.cursor() as cursor:
        cursor.execute("INSERT INTO clinic_referrals (id, referred_by_id) VALUES (%s, %s)", [pk, principal.pk])


def test_table_added_outside_the_models_is_found_and_repointed(admin, departed, history):
    _create_referrals_table(unique=False)
    _add_referral(1, departed)
    _add_referral(2, departed)

    plan = _purge(departed, admin)

    assert plan.by_table() == {"visits": 3, "notes": 2, "clinic_referrals": 2}
    assert _referrals() == [(1, admin.id), (2, admin.id)]
    assert not Principal.objects.filter(pk=departed.pk).exists()


def test_uniqueness_conflict_while_repointing_rolls_back_everything(admin, departed, history):
    _create_referrals_table(unique=True)
    _add_referral(1, departed)
    _add_referral(2, admin)

    with pytest.raises(Unreassignable):
        _purge(departed, admin)

    assert Principal.objects.filter(pk=departed.pk).exists()
    assert _referrals() == [(1, departed.id), (2, admin.id)]
    assert Visit.objects.filter(provider=departed).count() == 3
    assert ClinicalNote.objects.filter(author=departed).count() == 2
    assert not AuditEntry.objects.filter(action=AuditAction.PRINCIPAL_PURGED).exists()


class FlakyIntrospector:
    def __init__(self, failures):
        self.failures = failures
        self.calls = 0
        self.inner = ModelRegistryIntrospector()

    def list_foreign_keys_referencing(self, table, column):
        self.calls += 1
        if self.calls <= self.failures:
            raise OperationalError("deadlock detected")
        return self.inner.list_foreign_keys_referencing(table, column)


def test_transient_failure_is_retried(admin, departed, history):
    introspector = FlakyIntrospector(failures=1)

    plan = _purge(departed, admin, introspector=introspector)

    assert introspector.calls == 2
    assert plan.by_table() == {"visits": 3, "notes": 2}


def test_persistent_failure_surfaces_unavailable(admin, departed, history, settings):
    settings.ACCESS_CONTROL = {"DELETION_MAX_ATTEMPTS": 2}
    introspector = FlakyIntrospector(failures=10)

    with pytest.raises(Unavailable):
        _purge(departed, admin, introspector=introspector)

    assert introspector.calls == 2
    assert Principal.objects.filter(pk=departed.pk).exists()


def test_assignments_follow_their_delete_rules(admin, reception, patient, assign):
    leaving = make_principal("student_leaving", Role.STUDENT)
    assign(patient, leaving)
    # a historical row the leaving principal created for someone else
    trainee = make_principal("student_next", Role.STUDENT)
    staffed_row = PatientAssignment.objects.create(
        patient=patient,
        principal=trainee,
        role_slot=Role.STUDENT,
        active=False,
        assigned_by=leaving,
    )

    leaving.is_active = False
    leaving.save(update_fields=["is_active"])

    plan = _purge(leaving, admin)

    # own slot rows cascade, rows they created are repointed
    assert not PatientAssignment.objects.filter(principal_id=leaving.id).exists()
    staffed_row.refresh_from_db()
    assert staffed_row.assigned_by_id == admin.id
    assert plan.by_table() == {"assignments_patient_assignment": 1}


def test_audit_trail_survives_actor_purge(admin, departed):
    AuditRecorder.record(actor_id=departed.id, action="assignment.set", entity_type="Patient", entity_id=1)

    _purge(departed, admin)

    entry = AuditEntry.objects.get(action="assignment.set")
    assert entry.actor_id is None


def test_management_command_purges(admin, departed, history, capsys):
    call_command("purge_principal", str(departed.id), "--acting", str(admin.id))

    out = capsys.readouterr().out
    assert "visits.provider_id: 3 row(s)" in out
    assert f"Principal {departed.id} purged" in out
    assert not Principal.objects.filter(pk=departed.pk).exists()


def test_management_command_reports_refusal(admin, surgeon):
    with pytest.raises(CommandError) as exc:
        call_command("purge_principal", str(surgeon.id), "--acting", str(admin.id))

    assert "must_deactivate_first" in str(exc.value)
