from .auth import router as auth_router
from .invitations import router as invitations_router

__all__ = ["auth_router", "invitations_router"]
