"""Error taxonomy for the invitation services.

Services raise these; the web layer renders them as ``{"error": message}``
with the attached status code. Messages are safe to show to callers.
"""
from typing import Optional

from fastapi import status


class InvitationError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invitation request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(InvitationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class AuthenticationError(InvitationError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class AuthorizationError(InvitationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(InvitationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Invalid invitation token"


class AlreadyUsedError(InvitationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "This invitation has already been used"


class ExpiredError(InvitationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "This invitation has expired"


class ConflictError(InvitationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "An account with this email already exists"


class PersistenceError(InvitationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class TransientError(PersistenceError):
    """Store timed out or was unreachable; reads and inserts may be retried."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable, please retry"
