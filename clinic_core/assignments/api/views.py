# clinic_core/assignments/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound as DRFNotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from clinic_core.access.engine import ensure_allowed
from clinic_core.access.errors import RoleMismatch
from clinic_core.access.matrix import ObjectType, Permission
from clinic_core.assignments.api.serializers import AssignmentSetSerializer, PatientAssignmentSerializer
from clinic_core.assignments.policy import check_assignment_policy
from clinic_core.assignments.selectors import list_active
from clinic_core.assignments.services import AssignmentService
from clinic_core.audit.services import AuditRecorder
from clinic_core.common.permissions import ObjectTypePermission
from clinic_core.iam.constants import ASSIGNABLE_ROLES
from clinic_core.patients.selectors import patient_exists


class PatientAssignmentsView(APIView):
    """
    Care team of one patient.

    GET  -> active assignments (read on the patient's general record)
    POST -> fill or swap one slot; 201 when a new row was written, 200 for a no-op
    """
    permission_classes = [IsAuthenticated, ObjectTypePermission]
    access_object_type = ObjectType.PATIENT_GENERAL
    # staffing rules are enforced by the assignment policy, not the matrix
    access_method_permissions = {"POST": Permission.READ}

    serializer_class = PatientAssignmentSerializer

    def _require_patient(self, patient_id: int) -> None:
        if not patient_exists(patient_id):
            raise DRFNotFound("Patient not found.")

    @extend_schema(tags=["Assignments"], responses={200: PatientAssignmentSerializer(many=True)})
    def get(self, request, patient_id: int):
        self._require_patient(patient_id)
        rows = list_active(patient_id=patient_id)
        return Response(PatientAssignmentSerializer(rows, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Assignments"],
        request=AssignmentSetSerializer,
        responses={200: PatientAssignmentSerializer, 201: PatientAssignmentSerializer},
    )
    def post(self, request, patient_id: int):
        self._require_patient(patient_id)

        ser = AssignmentSetSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        role_slot = ser.validated_data["role_slot"]

        if role_slot not in ASSIGNABLE_ROLES:
            raise RoleMismatch(f"Role slot {role_slot!r} cannot be assigned to a patient.")

        ensure_allowed(check_assignment_policy(request.user, patient_id, role_slot))

        change = AssignmentService.set_assignment(
            patient_id=patient_id,
            role_slot=role_slot,
            principal_id=ser.validated_data["principal_id"],
            acting_principal_id=request.user.pk,
        )

        if change.changed:
            AuditRecorder.log(change.audit_record)

        return Response(
            PatientAssignmentSerializer(change.assignment).data,
            status=status.HTTP_201_CREATED if change.changed else status.HTTP_200_OK,
        )
