"""Invitation lifecycle: issuance, verification, acceptance and management.

All services here run with ``ElevatedAccess``: they see every invitation row
and enforce the role hierarchy themselves before asking the store to persist
anything. Store failures are mapped to ``PersistenceError``/``TransientError``
at this boundary; the raw driver error only goes to the log.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, List, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..errors import (
    AlreadyUsedError,
    AuthorizationError,
    ConflictError,
    ExpiredError,
    NotFoundError,
    PersistenceError,
    TransientError,
    ValidationError,
)
from ..models.invitation import Invitation, InvitationStatus, as_utc
from ..models.profile import Profile, UserRole
from .access import ElevatedAccess
from .audit import AuditService
from .auth import normalize_email
from .tokens import build_invite_url, generate_invitation_token

logger = logging.getLogger(__name__)

INVITER_PLACEHOLDER = "an administrator"

# Which roles each inviter role may grant
GRANTABLE_ROLES = {
    UserRole.ADMIN.value: frozenset(r.value for r in UserRole),
    UserRole.COURSE_LEADER.value: frozenset({UserRole.STUDENT.value}),
}

_email_adapter = TypeAdapter(EmailStr)


@dataclass
class IssuedInvitation:
    id: str
    email: str
    role: str
    token: str
    expires_at: datetime
    invite_url: str


@dataclass
class InvitationSummary:
    email: str
    role: str
    invited_by: str
    expires_at: datetime


@dataclass
class AcceptedInvitation:
    id: str
    email: str


@dataclass
class InvitationListItem:
    id: str
    email: str
    role: str
    status: str
    invited_by: str
    inviter_name: str
    expires_at: datetime
    used_at: Optional[datetime]
    created_at: datetime


def inviter_display_name(inviter: Optional[Profile]) -> str:
    """Full name, then email, then a generic placeholder."""
    if inviter is not None:
        if inviter.full_name and inviter.full_name.strip():
            return inviter.full_name.strip()
        if inviter.email:
            return inviter.email
    return INVITER_PLACEHOLDER


def can_grant(inviter_role: str, role: str) -> bool:
    return role in GRANTABLE_ROLES.get(inviter_role, frozenset())


def validate_email(email: str) -> str:
    candidate = (email or "").strip()
    try:
        _email_adapter.validate_python(candidate)
    except PydanticValidationError:
        raise ValidationError("Invalid email address")
    return normalize_email(candidate)


def validate_role(role: str) -> str:
    try:
        return UserRole(role).value
    except ValueError:
        raise ValidationError("Invalid role. Must be one of: student, course_leader, admin")


@contextmanager
def store_errors(db: Session, operation: str, message: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except OperationalError:
        db.rollback()
        logger.exception("Invitation store unavailable", extra={"operation": operation})
        raise TransientError()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Invitation store rejected operation", extra={"operation": operation})
        raise PersistenceError(message)


class InvitationServiceBase:
    def __init__(
        self,
        access: ElevatedAccess,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.access = access
        self.db = access.db
        self.settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _sibling(self, cls):
        return cls(self.access, settings=self.settings, clock=self._clock)

    def now(self) -> datetime:
        return self._clock()

    def _expiry_from(self, now: datetime) -> datetime:
        return now + timedelta(days=self.settings.invitation_expiry_days)

    def _email_has_account(self, email: str) -> bool:
        return self.db.query(Profile.id).filter(Profile.email == normalize_email(email)).first() is not None


class IssuanceService(InvitationServiceBase):
    def issue(self, email: str, role: str, inviter_id: str) -> IssuedInvitation:
        email = validate_email(email)
        role = validate_role(role)

        with store_errors(self.db, "issue.lookup"):
            inviter = self.db.query(Profile).filter(Profile.id == inviter_id).first()

        if inviter is None or not inviter.is_approved or inviter.role not in GRANTABLE_ROLES:
            logger.warning(
                "Invitation issuance rejected",
                extra={"inviter_id": inviter_id, "rejection_reason": "INVITER_NOT_PERMITTED"},
            )
            raise AuthorizationError("Forbidden")

        if not can_grant(inviter.role, role):
            logger.warning(
                "Invitation issuance rejected",
                extra={"inviter_id": inviter_id, "role": role, "rejection_reason": "ROLE_NOT_GRANTABLE"},
            )
            raise AuthorizationError("Course leaders can only invite students")

        now = self.now()
        with store_errors(self.db, "issue.conflicts"):
            account_exists = self._email_has_account(email)
            pending = (
                self.db.query(Invitation.id)
                .filter(
                    Invitation.email == email,
                    Invitation.used_at.is_(None),
                    Invitation.expires_at >= now,
                )
                .first()
            )

        if account_exists:
            raise ConflictError("User with this email already exists")
        if pending is not None:
            raise ConflictError("Pending invitation already exists for this email")

        token = generate_invitation_token()
        invitation = Invitation(
            email=email,
            role=role,
            token=token,
            invited_by=inviter.id,
            expires_at=self._expiry_from(now),
            created_at=now,
            updated_at=now,
        )

        with store_errors(self.db, "issue.insert", "Failed to create invitation"):
            self.db.add(invitation)
            self.db.flush()
            AuditService.log_invitation_event(self.db, "INVITATION_CREATED", invitation, actor_id=inviter.id)
            self.db.commit()

        logger.info(
            "Invitation created",
            extra={"invitation_id": invitation.id, "role": role, "inviter_id": inviter.id},
        )

        return IssuedInvitation(
            id=invitation.id,
            email=invitation.email,
            role=invitation.role,
            token=token,
            expires_at=as_utc(invitation.expires_at),
            invite_url=build_invite_url(token, self.settings.app_base_url),
        )


class VerificationService(InvitationServiceBase):
    def verify(self, token: str) -> InvitationSummary:
        if not token:
            raise ValidationError("Invalid token format")

        with store_errors(self.db, "verify"):
            invitation = self.db.query(Invitation).filter(Invitation.token == token).first()

            if invitation is None:
                raise NotFoundError("Invalid invitation token")

            status = invitation.status_at(self.now())
            if status == InvitationStatus.USED:
                raise AlreadyUsedError("This invitation has already been used")
            if status == InvitationStatus.EXPIRED:
                raise ExpiredError("This invitation has expired")

            if self._email_has_account(invitation.email):
                raise ConflictError("An account with this email already exists")

            inviter_name = inviter_display_name(invitation.inviter)

        return InvitationSummary(
            email=invitation.email,
            role=invitation.role,
            invited_by=inviter_name,
            expires_at=as_utc(invitation.expires_at),
        )


class AcceptanceService(InvitationServiceBase):
    def accept(self, token: str, commit: bool = True) -> AcceptedInvitation:
        """
        Mark the invitation as used with a single conditional update.

        The predicate (token matches, unused, unexpired) and the write are
        evaluated together by the store, so of two racing calls exactly one
        sees a row affected. Unknown, used and expired tokens all come back
        as the same ``NotFoundError``.

        With ``commit=False`` the caller owns the transaction (sign-up creates
        the account in the same one).
        """
        if not token:
            raise ValidationError("Invalid token format")

        now = self.now()
        with store_errors(self.db, "accept", "Failed to accept invitation"):
            updated = (
                self.db.query(Invitation)
                .filter(
                    Invitation.token == token,
                    Invitation.used_at.is_(None),
                    Invitation.expires_at >= now,
                )
                .update({Invitation.used_at: now, Invitation.updated_at: now}, synchronize_session=False)
            )

            if updated == 1:
                row = self.db.query(Invitation.id, Invitation.email).filter(Invitation.token == token).one()
                AuditService.log_event(
                    self.db,
                    action="INVITATION_ACCEPTED",
                    metadata={"invitation_id": row.id, "email": row.email},
                )
                if commit:
                    self.db.commit()

        if updated != 1:
            self.db.rollback()
            logger.warning("Invitation acceptance rejected", extra={"rejection_reason": "NOT_FOUND_OR_USED"})
            raise NotFoundError("Invitation not found or already used")

        logger.info("Invitation accepted", extra={"invitation_id": row.id})
        return AcceptedInvitation(id=row.id, email=row.email)


class InvitationManager(InvitationServiceBase):
    """Listing, resending, deleting and purging invitations."""

    def _require_manager(self, actor: Profile) -> None:
        if not actor.is_approved or actor.role not in GRANTABLE_ROLES:
            raise AuthorizationError("Forbidden")

    def _get_owned(self, invitation_id: str, actor: Profile, verb: str) -> Invitation:
        self._require_manager(actor)
        with store_errors(self.db, f"{verb}.lookup"):
            invitation = self.db.query(Invitation).filter(Invitation.id == invitation_id).first()
        if invitation is None:
            raise NotFoundError("Invitation not found")
        # Admins manage any invitation, course leaders only their own
        if actor.role != UserRole.ADMIN.value and invitation.invited_by != actor.id:
            raise AuthorizationError(f"Not authorized to {verb} this invitation")
        if invitation.used_at is not None:
            raise ConflictError(f"Cannot {verb} used invitation")
        return invitation

    def list_for(self, viewer: Profile) -> List[InvitationListItem]:
        self._require_manager(viewer)
        now = self.now()

        with store_errors(self.db, "list", "Failed to fetch invitations"):
            query = self.db.query(Invitation).order_by(Invitation.created_at.desc())
            if viewer.role == UserRole.COURSE_LEADER.value:
                query = query.filter(
                    or_(Invitation.invited_by == viewer.id, Invitation.role == UserRole.STUDENT.value)
                )
            invitations = query.all()

            return [
                InvitationListItem(
                    id=inv.id,
                    email=inv.email,
                    role=inv.role,
                    status=inv.status_at(now).value,
                    invited_by=inv.invited_by,
                    inviter_name=inviter_display_name(inv.inviter),
                    expires_at=as_utc(inv.expires_at),
                    used_at=as_utc(inv.used_at),
                    created_at=as_utc(inv.created_at),
                )
                for inv in invitations
            ]

    def resend(self, invitation_id: str, actor: Profile) -> IssuedInvitation:
        """Rotate the token and restart the expiry window. The old link stops working."""
        invitation = self._get_owned(invitation_id, actor, "resend")

        now = self.now()
        token = generate_invitation_token()
        with store_errors(self.db, "resend", "Failed to resend invitation"):
            invitation.token = token
            invitation.expires_at = self._expiry_from(now)
            invitation.updated_at = now
            AuditService.log_invitation_event(self.db, "INVITATION_RESENT", invitation, actor_id=actor.id)
            self.db.commit()
            self.db.refresh(invitation)

        logger.info("Invitation resent", extra={"invitation_id": invitation.id, "actor_id": actor.id})

        return IssuedInvitation(
            id=invitation.id,
            email=invitation.email,
            role=invitation.role,
            token=token,
            expires_at=as_utc(invitation.expires_at),
            invite_url=build_invite_url(token, self.settings.app_base_url),
        )

    def delete(self, invitation_id: str, actor: Profile) -> None:
        invitation = self._get_owned(invitation_id, actor, "delete")

        with store_errors(self.db, "delete", "Failed to delete invitation"):
            AuditService.log_invitation_event(self.db, "INVITATION_DELETED", invitation, actor_id=actor.id)
            self.db.delete(invitation)
            self.db.commit()

        logger.info("Invitation deleted", extra={"invitation_id": invitation_id, "actor_id": actor.id})

    def purge_expired(self) -> int:
        """Hard-delete unused invitations past their expiry. Used ones stay as audit trail."""
        now = self.now()
        with store_errors(self.db, "purge", "Failed to purge invitations"):
            removed = (
                self.db.query(Invitation)
                .filter(Invitation.used_at.is_(None), Invitation.expires_at < now)
                .delete(synchronize_session=False)
            )
            AuditService.log_event(self.db, action="INVITATIONS_PURGED", metadata={"count": removed})
            self.db.commit()

        logger.info("Expired invitations purged", extra={"count": removed})
        return removed
