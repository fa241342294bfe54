"""Invitation token generation.

Tokens are the only credential needed to verify or accept an invitation, so
they come straight from ``secrets`` and are never derived from the invitation id.
"""
import secrets

from ..config import get_settings

DEFAULT_TOKEN_BYTES = 32


def generate_invitation_token(nbytes: int | None = None) -> str:
    # base64url without padding: [A-Za-z0-9_-] only, safe in a path segment as-is
    if nbytes is None:
        nbytes = get_settings().invitation_token_bytes or DEFAULT_TOKEN_BYTES
    return secrets.token_urlsafe(nbytes)


def build_invite_url(token: str, base_url: str | None = None) -> str:
    base = (base_url or get_settings().app_base_url).rstrip("/")
    return f"{base}/invite/{token}"
