# clinic_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from clinic_core.assignments.api.views import PatientAssignmentsView
from clinic_core.audit.api.views import AuditEntryListView
from clinic_core.iam.api.views import (
    AssignableStaffView,
    MyPermissionsView,
    PrincipalDetailView,
    PrincipalReactivateView,
)

urlpatterns = [
    # Auth
    path("auth/token/", TokenObtainPairView.as_view(), name="auth-token"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="auth-token-refresh"),

    # Principals
    path("me/permissions/", MyPermissionsView.as_view(), name="me-permissions"),
    path("principals/assignable/", AssignableStaffView.as_view(), name="principals-assignable"),
    path("principals/<int:principal_id>/", PrincipalDetailView.as_view(), name="principal-detail"),
    path(
        "principals/<int:principal_id>/reactivate/",
        PrincipalReactivateView.as_view(),
        name="principal-reactivate",
    ),

    # Care team
    path(
        "patients/<int:patient_id>/assignments/",
        PatientAssignmentsView.as_view(),
        name="patient-assignments",
    ),

    # Audit
    path("audit/entries/", AuditEntryListView.as_view(), name="audit-entries"),
]
