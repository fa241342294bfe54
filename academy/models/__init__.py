from .profile import Profile, UserRole, ProfileStatus
from .invitation import Invitation, InvitationStatus
from .audit import AuditEvent

__all__ = [
    "Profile",
    "UserRole",
    "ProfileStatus",
    "Invitation",
    "InvitationStatus",
    "AuditEvent",
]
