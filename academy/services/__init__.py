from .auth import AuthService
from .audit import AuditService
from .access import ElevatedAccess, get_elevated_access
from .invitations import (
    IssuanceService,
    VerificationService,
    AcceptanceService,
    InvitationManager,
)
from .signup import SignupService

__all__ = [
    "AuthService",
    "AuditService",
    "ElevatedAccess",
    "get_elevated_access",
    "IssuanceService",
    "VerificationService",
    "AcceptanceService",
    "InvitationManager",
    "SignupService",
]
