# clinic_core/common/permissions.py

from __future__ import annotations

from rest_framework.permissions import BasePermission

from clinic_core.access.engine import authorize
from clinic_core.access.errors import GENERIC_DENIAL_MESSAGE
from clinic_core.access.matrix import Permission

DEFAULT_METHOD_PERMISSIONS = {
    "GET": Permission.READ,
    "HEAD": Permission.READ,
    "OPTIONS": Permission.READ,
    "POST": Permission.CREATE,
    "PUT": Permission.UPDATE,
    "PATCH": Permission.UPDATE,
    "DELETE": Permission.DELETE,
}


class ObjectTypePermission(BasePermission):
    """
    DRF adapter over the authorization engine.

    Views declare:
      - access_object_type: ObjectType guarded by the view
      - access_method_permissions (optional): HTTP method -> Permission override
      - patient_id URL kwarg (optional): turns on the instance (care-team) check

    Denials come back as a plain 403 with the generic message; the engine logs
    the precise reason. Unknown methods deny.
    """
    message = GENERIC_DENIAL_MESSAGE

    def _permission_for(self, request, view):
        overrides = getattr(view, "access_method_permissions", None) or {}
        method = request.method.upper()
        return overrides.get(method) or DEFAULT_METHOD_PERMISSIONS.get(method)

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        object_type = getattr(view, "access_object_type", None)
        permission = self._permission_for(request, view)
        if object_type is None or permission is None:
            return False

        kwargs = getattr(view, "kwargs", {}) or {}
        decision = authorize(user, object_type, permission, patient_id=kwargs.get("patient_id"))
        return decision.allowed
