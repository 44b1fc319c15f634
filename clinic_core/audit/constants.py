# clinic_core/audit/constants.py


class AuditAction:
    ASSIGNMENT_SET = "assignment.set"
    PRINCIPAL_DEACTIVATED = "principal.deactivated"
    PRINCIPAL_REACTIVATED = "principal.reactivated"
    PRINCIPAL_PURGED = "principal.purged"


class AuditEntity:
    PATIENT = "Patient"
    PRINCIPAL = "Principal"
