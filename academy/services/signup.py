"""Account creation from an invitation.

Verification, profile creation and acceptance share one transaction: if
acceptance loses a race with another sign-up for the same token, the
profile insert is rolled back with it.
"""
import logging

from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError
from ..models.profile import Profile, ProfileStatus, UserRole
from .audit import AuditService
from .auth import AuthService
from .invitations import (
    AcceptanceService,
    InvitationServiceBase,
    VerificationService,
    store_errors,
)

logger = logging.getLogger(__name__)


class SignupService(InvitationServiceBase):
    def register(self, token: str, full_name: str, password: str) -> Profile:
        invitation = self._sibling(VerificationService).verify(token)

        profile = AuthService.build_profile(
            email=invitation.email,
            password=password,
            role=UserRole(invitation.role),
            full_name=(full_name or "").strip() or None,
            # The invitation is the approval
            status=ProfileStatus.APPROVED,
        )
        self.db.add(profile)

        with store_errors(self.db, "signup.insert", "Failed to create account"):
            try:
                self.db.flush()
            except IntegrityError:
                # Another sign-up registered the email between verify and flush
                self.db.rollback()
                raise ConflictError("An account with this email already exists")

        # A failed acceptance rolls back the pending profile insert too
        accepted = self._sibling(AcceptanceService).accept(token, commit=False)

        with store_errors(self.db, "signup", "Failed to create account"):
            AuditService.log_event(
                self.db,
                action="ACCOUNT_CREATED_FROM_INVITATION",
                actor_id=profile.id,
                metadata={"invitation_id": accepted.id, "role": profile.role},
            )
            self.db.commit()
            self.db.refresh(profile)

        logger.info(
            "Account created from invitation",
            extra={"profile_id": profile.id, "invitation_id": accepted.id, "role": profile.role},
        )
        return profile
