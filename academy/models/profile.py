import uuid
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from ..database import Base


class UserRole(str, Enum):
    STUDENT = "student"
    COURSE_LEADER = "course_leader"
    ADMIN = "admin"


class ProfileStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    """An academy account. Only created from an accepted invitation (or the CLI bootstrap)."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default=UserRole.STUDENT.value)
    status = Column(String(50), nullable=False, default=ProfileStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    invitations_sent = relationship("Invitation", back_populates="inviter")
    audit_events = relationship("AuditEvent", back_populates="actor")

    @property
    def is_approved(self) -> bool:
        return self.status == ProfileStatus.APPROVED.value
