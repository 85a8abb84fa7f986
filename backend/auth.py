from __future__ import annotations

from fastapi import Header, HTTPException

from backend.settings import get_settings


async def require_user(
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    x_backend_token: str | None = Header(default=None, alias="X-Backend-Token"),
) -> str:
    """Owner id of the request: the caller's normalized e-mail."""
    settings = get_settings()
    if not x_backend_token or x_backend_token != settings.backend_session_secret:
        raise HTTPException(status_code=401, detail="Invalid backend token")
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(status_code=401, detail="Missing user email")
    email = x_user_email.strip().lower()
    if settings.allowed_emails and email not in settings.allowed_emails:
        raise HTTPException(status_code=403, detail="User not allowed")
    return email


def ensure_owner(payload_user_id: str | None, user_id: str) -> None:
    if payload_user_id is not None and payload_user_id.strip().lower() != user_id:
        raise HTTPException(status_code=403, detail="Cannot write rows for another user")
