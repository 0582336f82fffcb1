# noteflow/auth.py
"""Shared authentication dependencies."""

import secrets
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from noteflow.config import Settings, get_settings
from noteflow.services.trash.errors import Unauthenticated


@dataclass(frozen=True)
class CurrentUser:
    """Identity verified upstream by the auth gateway."""

    user_id: str
    email: str | None = None


def get_current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
) -> CurrentUser:
    """Read the gateway-verified identity headers. Raises Unauthenticated if absent."""
    if not x_user_id or not x_user_id.strip():
        raise Unauthenticated()
    email = x_user_email.strip() if x_user_email else None
    return CurrentUser(user_id=x_user_id.strip(), email=email or None)


def require_admin_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Gate the admin trash routes on the X-API-Key header.

    An unset ADMIN_API_KEY rejects every request with 500 rather than
    leaving sweeps and audit purges open.
    """
    if not settings.ADMIN_API_KEY:
        raise HTTPException(status_code=500, detail="Admin API key is not configured on this server")

    if x_api_key is None or not secrets.compare_digest(x_api_key.encode(), settings.ADMIN_API_KEY.encode()):
        raise HTTPException(status_code=401, detail="Invalid or missing admin API key")
