from .auth import Token, SignupRequest, SignupResponse
from .profile import ProfileResponse
from .invitation import (
    InvitationCreate,
    InvitationTokenRequest,
    IssuedInvitationResponse,
    InvitationCreateResponse,
    InvitationSummaryResponse,
    InvitationVerifyResponse,
    InvitationAcceptResponse,
    InvitationListItemResponse,
    InvitationListResponse,
    InvitationResendResponse,
    MessageResponse,
)

__all__ = [
    "Token",
    "SignupRequest",
    "SignupResponse",
    "ProfileResponse",
    "InvitationCreate",
    "InvitationTokenRequest",
    "IssuedInvitationResponse",
    "InvitationCreateResponse",
    "InvitationSummaryResponse",
    "InvitationVerifyResponse",
    "InvitationAcceptResponse",
    "InvitationListItemResponse",
    "InvitationListResponse",
    "InvitationResendResponse",
    "MessageResponse",
]
