from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class InvitationCreate(BaseModel):
    """Role and email are checked by the issuance service, not here."""
    email: str
    role: str


class InvitationTokenRequest(BaseModel):
    token: str


class IssuedInvitationResponse(BaseModel):
    id: str
    email: str
    role: str
    token: str
    expires_at: datetime
    invite_url: str

    class Config:
        from_attributes = True


class InvitationCreateResponse(BaseModel):
    message: str
    invitation: IssuedInvitationResponse


class InvitationSummaryResponse(BaseModel):
    """What an unauthenticated visitor following the link may see. No id, token or used_at."""
    email: str
    role: str
    invited_by: str
    expires_at: datetime

    class Config:
        from_attributes = True


class InvitationVerifyResponse(BaseModel):
    valid: bool
    invitation: InvitationSummaryResponse


class InvitationAcceptResponse(BaseModel):
    message: str
    invitation_id: str


class InvitationListItemResponse(BaseModel):
    id: str
    email: str
    role: str
    status: str  # pending, used, expired
    invited_by: str
    inviter_name: str
    expires_at: datetime
    used_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class InvitationListResponse(BaseModel):
    invitations: List[InvitationListItemResponse]


class InvitationResendResponse(BaseModel):
    invitation: IssuedInvitationResponse
    invite_url: str


class MessageResponse(BaseModel):
    message: str
