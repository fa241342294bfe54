"""Invitation API endpoints.

Issuing, listing, resending and deleting require an approved admin or
course leader. Verify and accept are PUBLIC: the token is the credential.
"""
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Request, status

from ..errors import InvitationError
from ..models.profile import Profile
from ..schemas.invitation import (
    InvitationAcceptResponse,
    InvitationCreate,
    InvitationCreateResponse,
    InvitationListResponse,
    InvitationResendResponse,
    InvitationTokenRequest,
    InvitationVerifyResponse,
    MessageResponse,
)
from ..services.access import ElevatedAccess, get_elevated_access
from ..services.invitations import (
    AcceptanceService,
    InvitationManager,
    IssuanceService,
    VerificationService,
)
from .auth import require_inviter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invitations", tags=["invitations"])


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@router.get("", response_model=InvitationListResponse)
def list_invitations(
    access: ElevatedAccess = Depends(get_elevated_access),
    current_profile: Profile = Depends(require_inviter),
):
    """Admins see every invitation; course leaders see their own plus all student invitations."""
    items = InvitationManager(access).list_for(current_profile)
    return {"invitations": [asdict(item) for item in items]}


@router.post("", response_model=InvitationCreateResponse, status_code=status.HTTP_201_CREATED)
def create_invitation(
    payload: InvitationCreate,
    access: ElevatedAccess = Depends(get_elevated_access),
    current_profile: Profile = Depends(require_inviter),
):
    issued = IssuanceService(access).issue(
        email=payload.email,
        role=payload.role,
        inviter_id=current_profile.id,
    )
    return {
        "message": "Invitation created successfully",
        "invitation": asdict(issued),
    }


@router.post("/verify", response_model=InvitationVerifyResponse)
def verify_invitation(
    payload: InvitationTokenRequest,
    request: Request,
    access: ElevatedAccess = Depends(get_elevated_access),
):
    """
    Check a token before showing the sign-up form.

    Read-only and safe to repeat.
    """
    try:
        summary = VerificationService(access).verify(payload.token)
    except InvitationError as exc:
        logger.info(
            "Invitation verification refused",
            extra={
                "ip": get_client_ip(request),
                "status_code": exc.status_code,
                "rejection_reason": type(exc).__name__,
            },
        )
        raise
    return {"valid": True, "invitation": asdict(summary)}


@router.post("/accept", response_model=InvitationAcceptResponse)
def accept_invitation(
    payload: InvitationTokenRequest,
    request: Request,
    access: ElevatedAccess = Depends(get_elevated_access),
):
    """
    Consume an invitation.

    Unknown, already-used and expired tokens all return the same 404.
    """
    try:
        accepted = AcceptanceService(access).accept(payload.token)
    except InvitationError as exc:
        logger.warning(
            "Invitation acceptance refused",
            extra={
                "ip": get_client_ip(request),
                "status_code": exc.status_code,
                "rejection_reason": type(exc).__name__,
            },
        )
        raise
    return {
        "message": "Invitation accepted successfully",
        "invitation_id": accepted.id,
    }


@router.put("/{invitation_id}", response_model=InvitationResendResponse)
def resend_invitation(
    invitation_id: str,
    access: ElevatedAccess = Depends(get_elevated_access),
    current_profile: Profile = Depends(require_inviter),
):
    """Issue a fresh token and a new 7-day window for an unused invitation."""
    issued = InvitationManager(access).resend(invitation_id, current_profile)
    return {"invitation": asdict(issued), "invite_url": issued.invite_url}


@router.delete("/{invitation_id}", response_model=MessageResponse)
def delete_invitation(
    invitation_id: str,
    access: ElevatedAccess = Depends(get_elevated_access),
    current_profile: Profile = Depends(require_inviter),
):
    InvitationManager(access).delete(invitation_id, current_profile)
    return {"message": "Invitation deleted successfully"}
