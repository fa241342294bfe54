import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.profile import Profile, UserRole
from ..schemas.auth import SignupRequest, SignupResponse, Token
from ..schemas.profile import ProfileResponse
from ..services.access import ElevatedAccess, get_elevated_access
from ..services.auth import AuthService
from ..services.signup import SignupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

INVITER_ROLES = {UserRole.ADMIN.value, UserRole.COURSE_LEADER.value}


def get_current_profile(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[Profile]:
    if not token:
        return None
    payload = AuthService.decode_token(token)
    if not payload:
        return None
    profile_id = payload.get("sub")
    if not profile_id:
        return None
    return AuthService.get_profile_by_id(db, str(profile_id))


def require_auth(
    current_profile: Optional[Profile] = Depends(get_current_profile),
) -> Profile:
    if not current_profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_profile


def require_inviter(
    current_profile: Profile = Depends(require_auth),
) -> Profile:
    if current_profile.role not in INVITER_ROLES or not current_profile.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return current_profile


@router.post("/login", response_model=Token)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    client_ip = request.client.host if request.client else "unknown"

    profile = AuthService.authenticate_profile(db, form_data.username, form_data.password)
    if not profile:
        logger.info(f"Failed login attempt: email={form_data.username} ip={client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not profile.is_approved:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is not approved",
        )
    logger.info(f"Successful login: profile_id={profile.id} role={profile.role}")
    return Token(access_token=AuthService.create_token_for(profile))


@router.get("/me", response_model=ProfileResponse)
def get_me(current_profile: Profile = Depends(require_auth)):
    return current_profile


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    request_data: SignupRequest,
    access: ElevatedAccess = Depends(get_elevated_access),
):
    """
    Create an account from an invitation token.

    This is a PUBLIC endpoint - the token is the only credential. The account
    gets the invitation's email and role, and the invitation is consumed.
    """
    profile = SignupService(access).register(
        token=request_data.token,
        full_name=request_data.full_name,
        password=request_data.password,
    )
    return SignupResponse(
        message="Account created successfully",
        access_token=AuthService.create_token_for(profile),
    )
