"""Invitation model for invitation-only account creation."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base


class InvitationStatus(str, Enum):
    PENDING = "pending"
    USED = "used"
    EXPIRED = "expired"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class Invitation(Base):
    """
    One-time credential granting the right to create an account with a role.

    Tokens are single-use: ``used_at`` is set exactly once by the acceptance
    update and never cleared. Expiry is derived from ``expires_at``, never stored.
    """
    __tablename__ = "invitations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, index=True)
    role = Column(String(50), nullable=False)
    token = Column(String(128), unique=True, nullable=False, index=True)
    invited_by = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    inviter = relationship("Profile", back_populates="invitations_sent")

    def status_at(self, now: datetime) -> InvitationStatus:
        if self.used_at is not None:
            return InvitationStatus.USED
        if now > as_utc(self.expires_at):
            return InvitationStatus.EXPIRED
        return InvitationStatus.PENDING
