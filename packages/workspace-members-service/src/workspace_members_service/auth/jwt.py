"""JWT token creation and verification."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from workspace_members_service.settings import settings

ACCESS = "access"
REFRESH = "refresh"
INVITATION = "invitation"


def _now_utc() -> datetime:
    return datetime.now(UTC)


def _encode(payload: dict, expires_delta: timedelta) -> str:
    now = _now_utc()
    payload = {**payload, "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: UUID,
    company_id: UUID,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token scoped to one company."""
    return _encode(
        {
            "sub": str(user_id),
            "company": str(company_id),
            "email": email,
            "role": role,
            "type": ACCESS,
        },
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(
    user_id: UUID,
    company_id: UUID,
    expires_delta: timedelta | None = None,
) -> str:
    return _encode(
        {"sub": str(user_id), "company": str(company_id), "type": REFRESH},
        expires_delta or timedelta(days=settings.refresh_token_expire_days),
    )


def create_invitation_token(
    user_id: UUID,
    company_id: UUID,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Token embedded in the accept link of an invitation mail."""
    return _encode(
        {"sub": str(user_id), "company": str(company_id), "role": role, "type": INVITATION},
        expires_delta or timedelta(days=settings.invitation_token_expire_days),
    )


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
