# clinic_core/iam/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from clinic_core.access.matrix import ObjectType, Permission, is_assignment_scoped, permissions_for_role
from clinic_core.audit.services import AuditRecorder
from clinic_core.common.permissions import ObjectTypePermission
from clinic_core.iam.api.serializers import (
    MyPermissionsSerializer,
    PrincipalSerializer,
    ReassignmentPlanSerializer,
)
from clinic_core.iam.selectors import list_assignable_staff
from clinic_core.iam.services import PrincipalService, permanently_delete_principal

TRUTHY = {"1", "true", "True", "yes"}


class PrincipalDetailView(APIView):
    """
    DELETE /principals/<id>/              -> deactivate (soft)
    DELETE /principals/<id>/?permanent=1  -> purge, reassigning linked records to the caller
    """
    permission_classes = [IsAuthenticated, ObjectTypePermission]
    access_object_type = ObjectType.USER_ACCOUNTS

    serializer_class = PrincipalSerializer

    @extend_schema(
        tags=["Principals"],
        parameters=[
            OpenApiParameter(
                name="permanent",
                type=OpenApiTypes.BOOL,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Permanently delete a deactivated principal.",
            ),
        ],
        responses={200: ReassignmentPlanSerializer},
    )
    def delete(self, request, principal_id: int):
        if request.query_params.get("permanent") in TRUTHY:
            plan = permanently_delete_principal(
                target_id=principal_id,
                acting_principal_id=request.user.pk,
            )
            return Response(ReassignmentPlanSerializer(plan).data, status=status.HTTP_200_OK)

        change = PrincipalService.deactivate(
            principal_id=principal_id,
            acting_principal_id=request.user.pk,
        )
        if change.changed:
            AuditRecorder.log(change.audit_record)
        return Response(PrincipalSerializer(change.principal).data, status=status.HTTP_200_OK)


class PrincipalReactivateView(APIView):
    permission_classes = [IsAuthenticated, ObjectTypePermission]
    access_object_type = ObjectType.USER_ACCOUNTS
    access_method_permissions = {"POST": Permission.UPDATE}

    serializer_class = PrincipalSerializer

    @extend_schema(tags=["Principals"], request=None, responses={200: PrincipalSerializer})
    def post(self, request, principal_id: int):
        change = PrincipalService.reactivate(
            principal_id=principal_id,
            acting_principal_id=request.user.pk,
        )
        if change.changed:
            AuditRecorder.log(change.audit_record)
        return Response(PrincipalSerializer(change.principal).data, status=status.HTTP_200_OK)


class AssignableStaffView(APIView):
    """
    Active staff the caller may put on a care team (empty for roles that cannot assign).
    """
    permission_classes = [IsAuthenticated]
    serializer_class = PrincipalSerializer

    @extend_schema(tags=["Principals"], responses={200: PrincipalSerializer(many=True)})
    def get(self, request):
        qs = list_assignable_staff(acting_role=request.user.role)
        return Response(PrincipalSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class MyPermissionsView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MyPermissionsSerializer

    @extend_schema(tags=["Principals"], responses={200: MyPermissionsSerializer})
    def get(self, request):
        role = request.user.role
        data = {
            "role": role,
            "permissions": permissions_for_role(role),
            "assignment_scoped": [ot.value for ot in ObjectType if is_assignment_scoped(role, ot)],
        }
        return Response(MyPermissionsSerializer(data).data, status=status.HTTP_200_OK)
