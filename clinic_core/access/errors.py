# clinic_core/access/errors.py
"""
Error taxonomy for the access-control core.

Authorization denials are NOT exceptions: `authorize()` returns a Decision
and callers branch on it. The classes below cover validation failures of the
mutating operations (assignment swap, principal lifecycle, purge) plus the
one infrastructure fault (`Unavailable`) that must never be read as
Allow or Deny.

Each class carries the HTTP-facing attributes the DRF exception handler
uses to build the standard error envelope.
"""
from __future__ import annotations

from typing import Any


class DenyReason:
    """
    Machine-readable reasons carried by a denied Decision.
    Logged verbatim; never shown to the caller.
    """
    CAPABILITY_DENIED = "capability-denied"
    INSTANCE_DENIED = "instance-denied"
    PRINCIPAL_INACTIVE = "principal-inactive"


GENERIC_DENIAL_MESSAGE = "Access denied."


class AccessControlError(Exception):
    status_code = 400
    default_code = "access_control_error"
    default_detail = "Request could not be completed."
    retryable = False

    def __init__(self, detail: str | None = None, *, details: Any = None):
        self.detail = detail or self.default_detail
        self.details = details
        super().__init__(self.detail)


class RoleMismatch(AccessControlError):
    default_code = "role_mismatch"
    default_detail = "Assignment role must match the selected principal's role."


class NotFound(AccessControlError):
    status_code = 404
    default_code = "not_found"
    default_detail = "Not found."


class MustDeactivateFirst(AccessControlError):
    status_code = 409
    default_code = "must_deactivate_first"
    default_detail = "Principal must be deactivated before permanent deletion."


class SelfDeletionForbidden(AccessControlError):
    default_code = "self_deletion_forbidden"
    default_detail = "You cannot deactivate or delete your own account."


class Unreassignable(AccessControlError):
    status_code = 409
    default_code = "unreassignable"
    default_detail = (
        "This user cannot be permanently deleted due to linked records "
        "that could not be reassigned."
    )


class AccessDenied(AccessControlError):
    """
    Raised only where a Deny must abort an operation (purge, HTTP adapters).
    The precise reason stays on the instance for logs; the message is generic
    so callers cannot tell capability denials from instance denials.
    """
    status_code = 403
    default_code = "permission_denied"
    default_detail = GENERIC_DENIAL_MESSAGE

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(GENERIC_DENIAL_MESSAGE)


class Unavailable(AccessControlError):
    status_code = 503
    default_code = "unavailable"
    default_detail = "Access control store is temporarily unavailable. Retry later."
    retryable = True
