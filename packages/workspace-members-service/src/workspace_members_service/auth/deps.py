"""FastAPI auth dependencies."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request

from workspace_members.config import WorkspaceRole
from workspace_members_service.auth.jwt import ACCESS, decode_token
from workspace_members_service.auth.models import CurrentUser


def _user_from_token(token: str) -> CurrentUser:
    """Decode a Bearer JWT and return the CurrentUser."""
    try:
        payload = decode_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid or expired token") from exc

    if payload.get("type") != ACCESS:
        raise HTTPException(status_code=401, detail="Not an access token")

    try:
        user_id = UUID(payload["sub"])
        company_id = UUID(payload["company"])
    except (KeyError, ValueError) as exc:
        raise HTTPException(status_code=401, detail="Malformed token payload") from exc

    return CurrentUser(
        user_id=user_id,
        company_id=company_id,
        email=payload.get("email", ""),
        role=payload.get("role", ""),
    )


async def get_current_user(request: Request) -> CurrentUser:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")
    return _user_from_token(auth_header.removeprefix("Bearer ").strip())


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


async def require_company_admin(company_id: UUID, current_user: CurrentUserDep) -> CurrentUser:
    """Only administrators of the company in the path may manage its members."""
    if current_user.company_id != company_id:
        raise HTTPException(status_code=403, detail="Not a member of this company")
    if current_user.role != WorkspaceRole.ADMIN.value:
        raise HTTPException(
            status_code=403,
            detail=f"Role '{current_user.role}' is not permitted. Required: admin",
        )
    return current_user


CompanyAdminDep = Annotated[CurrentUser, Depends(require_company_admin)]
