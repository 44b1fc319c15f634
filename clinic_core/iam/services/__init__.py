from clinic_core.iam.services.deletion import ReassignmentPlan, permanently_delete_principal
from clinic_core.iam.services.principals import PrincipalChange, PrincipalService

__all__ = [
    "PrincipalChange",
    "PrincipalService",
    "ReassignmentPlan",
    "permanently_delete_principal",
]
