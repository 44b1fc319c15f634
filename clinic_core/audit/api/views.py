# clinic_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from clinic_core.access.matrix import ObjectType
from clinic_core.audit.api.serializers import AuditEntrySerializer
from clinic_core.audit.filters import AuditEntryFilter
from clinic_core.audit.models import AuditEntry
from clinic_core.audit.selectors import list_audit_entries
from clinic_core.common.permissions import ObjectTypePermission


class AuditEntryListView(generics.ListAPIView):
    """
    Paginated audit trail, newest first.
    """
    permission_classes = [IsAuthenticated, ObjectTypePermission]
    access_object_type = ObjectType.AUDIT_LOGS

    serializer_class = AuditEntrySerializer
    queryset = AuditEntry.objects.none()
    filterset_class = AuditEntryFilter
    ordering_fields = ["occurred_at", "action", "entity_type"]

    def get_queryset(self):
        return list_audit_entries()

    @extend_schema(tags=["Audit"])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
