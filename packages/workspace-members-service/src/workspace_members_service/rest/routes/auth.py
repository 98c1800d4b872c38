"""Auth endpoints: login, refresh, /me."""

from __future__ import annotations

from uuid import UUID

import jwt
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from workspace_members_service.auth.deps import CurrentUserDep
from workspace_members_service.auth.jwt import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from workspace_members_service.auth.passwords import verify_password
from workspace_members_service.db.deps import AccountsRepoDep

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    user_id: str
    company_id: str
    email: str
    role: str


def issue_tokens(user_id: UUID, company_id: UUID, email: str, role: str) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user_id, company_id, email, role),
        refresh_token=create_refresh_token(user_id, company_id),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, repo: AccountsRepoDep) -> TokenResponse:
    """Verify credentials and return JWT tokens."""
    user = await repo.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    membership = await repo.get_first_membership(user.id)
    if not membership:
        raise HTTPException(status_code=403, detail="User has no company membership")

    company_id, role = membership
    return issue_tokens(user.id, company_id, user.email, role)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest, repo: AccountsRepoDep) -> TokenResponse:
    """Exchange a refresh token for a new token pair with the current role."""
    try:
        payload = decode_token(request.refresh_token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token") from exc

    if payload.get("type") != REFRESH:
        raise HTTPException(status_code=401, detail="Not a refresh token")

    try:
        user_id = UUID(payload["sub"])
        company_id = UUID(payload["company"])
    except (KeyError, ValueError) as exc:
        raise HTTPException(status_code=401, detail="Malformed token payload") from exc

    user = await repo.get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    role = await repo.get_membership_role(company_id, user.id)
    if not role:
        raise HTTPException(status_code=401, detail="User is no longer a company member")

    return issue_tokens(user.id, company_id, user.email, role)


@router.get("/me", response_model=MeResponse)
async def me(current_user: CurrentUserDep) -> MeResponse:
    return MeResponse(
        user_id=str(current_user.user_id),
        company_id=str(current_user.company_id),
        email=current_user.email,
        role=current_user.role,
    )
