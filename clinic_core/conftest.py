# clinic_core/conftest.py
import pytest
from rest_framework.test import APIClient

from clinic_core.assignments.services import AssignmentService
from clinic_core.iam.constants import Role
from clinic_core.iam.models import Principal
from clinic_core.patients.models import Patient


def make_principal(username: str, role: str, *, is_active: bool = True) -> Principal:
    return Principal.objects.create_user(
        username=username,
        password="pass123",
        role=role,
        display_name=username.replace("_", " ").title(),
        is_active=is_active,
    )


def auth_client(principal) -> APIClient:
    c = APIClient()
    c.force_authenticate(user=principal)
    return c


@pytest.fixture
def admin(db):
    return make_principal("admin_ana", Role.ADMIN)


@pytest.fixture
def orthodontist(db):
    return make_principal("ortho_omar", Role.ORTHODONTIST)


@pytest.fixture
def surgeon(db):
    return make_principal("surgeon_sam", Role.DENTAL_SURGEON)


@pytest.fixture
def nurse(db):
    return make_principal("nurse_nia", Role.NURSE)


@pytest.fixture
def reception(db):
    return make_principal("front_desk_fay", Role.RECEPTION)


@pytest.fixture
def student(db):
    return make_principal("student_stu", Role.STUDENT)


@pytest.fixture
def patient(db):
    return Patient.objects.create(patient_code="P-0001", first_name="Lina", last_name="Haddad")


@pytest.fixture
def other_patient(db):
    return Patient.objects.create(patient_code="P-0002", first_name="Karim", last_name="Saleh")


@pytest.fixture
def assign(reception):
    """
    Put a principal on a patient's care team in their own role slot.
    """

    def _assign(patient, principal, *, by=None):
        return AssignmentService.set_assignment(
            patient_id=patient.id,
            role_slot=principal.role,
            principal_id=principal.id,
            acting_principal_id=(by or reception).id,
        )

    return _assign


@pytest.fixture
def api_client(admin):
    return auth_client(admin)
