# clinic_core/assignments/tests/test_assignments_api.py
import pytest

from clinic_core.audit.constants import AuditAction
from clinic_core.audit.models import AuditEntry
from clinic_core.conftest import auth_client

pytestmark = pytest.mark.django_db


def _url(patient_id):
    return f"/api/v1/patients/{patient_id}/assignments/"


def test_reception_assigns_and_repeat_is_noop(reception, student, patient):
    client = auth_client(reception)
    payload = {"role_slot": "STUDENT", "principal_id": student.id}

    r1 = client.post(_url(patient.id), payload, format="json")
    assert r1.status_code == 201, r1.data
    assert r1.data["principal_id"] == student.id
    assert r1.data["role_slot"] == "STUDENT"

    r2 = client.post(_url(patient.id), payload, format="json")
    assert r2.status_code == 200, r2.data
    assert r2.data["id"] == r1.data["id"]

    # audit only for the real change
    assert AuditEntry.objects.filter(action=AuditAction.ASSIGNMENT_SET).count() == 1


def test_list_returns_active_team(reception, surgeon, nurse, patient, assign):
    assign(patient, surgeon)
    assign(patient, nurse)

    r = auth_client(reception).get(_url(patient.id))
    assert r.status_code == 200, r.data
    assert [row["role_slot"] for row in r.data] == ["DENTAL_SURGEON", "NURSE"]


def test_unassigned_trainee_gets_generic_denial(student, patient):
    r = auth_client(student).get(_url(patient.id))

    assert r.status_code == 403
    assert r.data["error"]["code"] == "permission_denied"
    assert r.data["error"]["message"] == "Access denied."
    assert "request_id" in r.data["error"]


def test_assigned_trainee_can_read_team(student, patient, assign):
    assign(patient, student)

    r = auth_client(student).get(_url(patient.id))
    assert r.status_code == 200, r.data
    assert r.data[0]["principal_id"] == student.id


def test_non_assignable_slot_is_role_mismatch(reception, admin, patient):
    r = auth_client(reception).post(
        _url(patient.id), {"role_slot": "ADMIN", "principal_id": admin.id}, format="json"
    )

    assert r.status_code == 400
    assert r.data["error"]["code"] == "role_mismatch"


def test_principal_role_must_match_slot(reception, nurse, patient):
    r = auth_client(reception).post(
        _url(patient.id), {"role_slot": "STUDENT", "principal_id": nurse.id}, format="json"
    )

    assert r.status_code == 400
    assert r.data["error"]["code"] == "role_mismatch"


def test_orthodontist_outside_team_is_denied(orthodontist, student, patient):
    r = auth_client(orthodontist).post(
        _url(patient.id), {"role_slot": "STUDENT", "principal_id": student.id}, format="json"
    )

    assert r.status_code == 403
    assert r.data["error"]["message"] == "Access denied."


def test_orthodontist_on_team_assigns_student(orthodontist, student, patient, assign):
    assign(patient, orthodontist)

    r = auth_client(orthodontist).post(
        _url(patient.id), {"role_slot": "STUDENT", "principal_id": student.id}, format="json"
    )
    assert r.status_code == 201, r.data
    assert r.data["assigned_by_id"] == orthodontist.id


def test_missing_patient_is_404(reception):
    r = auth_client(reception).get(_url(999999))

    assert r.status_code == 404
    assert r.data["error"]["code"] == "not_found"


def test_requires_authentication(patient):
    from rest_framework.test import APIClient

    r = APIClient().get(_url(patient.id))
    assert r.status_code in (401, 403)
