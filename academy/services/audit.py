import json
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session

from ..models.audit import AuditEvent
from ..models.invitation import Invitation


class AuditService:
    @staticmethod
    def log_event(
        db: Session,
        action: str,
        actor_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            action=action,
            actor_id=actor_id,
            metadata_json=json.dumps(metadata, default=str) if metadata else None,
        )
        db.add(event)
        return event

    @staticmethod
    def log_invitation_event(
        db: Session,
        action: str,
        invitation: Invitation,
        actor_id: Optional[str] = None,
    ) -> AuditEvent:
        # Never record the token itself
        return AuditService.log_event(
            db,
            action=action,
            actor_id=actor_id,
            metadata={
                "invitation_id": invitation.id,
                "email": invitation.email,
                "role": invitation.role,
                "expires_at": invitation.expires_at,
            },
        )
