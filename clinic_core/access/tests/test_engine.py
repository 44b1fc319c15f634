import logging
from unittest import mock

import pytest
from django.db import OperationalError

from clinic_core.access.engine import authorize, ensure_allowed
from clinic_core.access.errors import AccessDenied, DenyReason, Unavailable
from clinic_core.access.matrix import ObjectType, Permission

pytestmark = pytest.mark.django_db


def test_trainee_denied_until_assigned_then_allowed(student, patient, assign):
    d = authorize(student, ObjectType.PATIENT_NOTES, Permission.READ, patient_id=patient.id)
    assert not d.allowed
    assert d.reason == DenyReason.INSTANCE_DENIED

    assign(patient, student)

    d = authorize(student, ObjectType.PATIENT_NOTES, Permission.READ, patient_id=patient.id)
    assert d.allowed
    assert d.reason is None


def test_assignment_on_one_patient_does_not_leak_to_another(surgeon, patient, other_patient, assign):
    assign(patient, surgeon)

    assert authorize(surgeon, ObjectType.PATIENT_TREATMENT, Permission.UPDATE, patient_id=patient.id)
    d = authorize(surgeon, ObjectType.PATIENT_TREATMENT, Permission.UPDATE, patient_id=other_patient.id)
    assert d.reason == DenyReason.INSTANCE_DENIED


def test_front_desk_update_on_medical_is_capability_denied_regardless_of_assignment(nurse, reception, patient, assign):
    assign(patient, nurse)

    for principal in (nurse, reception):
        d = authorize(principal, ObjectType.PATIENT_MEDICAL, Permission.UPDATE, patient_id=patient.id)
        assert not d.allowed
        assert d.reason == DenyReason.CAPABILITY_DENIED


def test_capability_denial_short_circuits_assignment_lookup(student, patient):
    with mock.patch("clinic_core.access.engine.is_assigned") as lookup:
        d = authorize(student, ObjectType.PATIENT_NOTES, Permission.UPDATE, patient_id=patient.id)

    assert d.reason == DenyReason.CAPABILITY_DENIED
    lookup.assert_not_called()


def test_no_patient_means_capability_only(student):
    assert authorize(student, ObjectType.PATIENT_RADIOGRAPHS, Permission.READ).allowed


def test_unscoped_roles_skip_instance_check(admin, reception, patient):
    with mock.patch("clinic_core.access.engine.is_assigned") as lookup:
        assert authorize(admin, ObjectType.PATIENT_NOTES, Permission.READ, patient_id=patient.id).allowed
        assert authorize(reception, ObjectType.PATIENT_GENERAL, Permission.UPDATE, patient_id=patient.id).allowed

    lookup.assert_not_called()


def test_unknown_permission_or_object_type_denies(admin):
    assert authorize(admin, ObjectType.USER_ACCOUNTS, "publish").reason == DenyReason.CAPABILITY_DENIED
    assert authorize(admin, "PATIENT_BILLING", Permission.READ).reason == DenyReason.CAPABILITY_DENIED


def test_inactive_principal_is_denied(surgeon, patient, assign):
    assign(patient, surgeon)
    surgeon.is_active = False
    surgeon.save(update_fields=["is_active"])

    d = authorize(surgeon, ObjectType.PATIENT_NOTES, Permission.READ, patient_id=patient.id)
    assert d.reason == DenyReason.PRINCIPAL_INACTIVE


def test_store_failure_is_unavailable_not_deny(student, patient):
    with mock.patch("clinic_core.access.engine.is_assigned", side_effect=OperationalError("db down")):
        with pytest.raises(Unavailable):
            authorize(student, ObjectType.PATIENT_NOTES, Permission.READ, patient_id=patient.id)


def test_denials_are_logged_with_reason(student, patient, caplog):
    caplog.set_level(logging.INFO, logger="clinic_core.access")

    authorize(student, ObjectType.PATIENT_NOTES, Permission.READ, patient_id=patient.id)

    assert any("instance-denied" in r.getMessage() for r in caplog.records)


def test_ensure_allowed_raises_with_generic_message(student, patient):
    d = authorize(student, ObjectType.PATIENT_NOTES, Permission.READ, patient_id=patient.id)

    with pytest.raises(AccessDenied) as exc:
        ensure_allowed(d)

    assert exc.value.reason == DenyReason.INSTANCE_DENIED
    assert exc.value.detail == "Access denied."
