"""Invitation acceptance endpoint."""

from __future__ import annotations

from uuid import UUID

import jwt
import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator

from workspace_members.config import WorkspaceRole
from workspace_members_service.auth.jwt import INVITATION, decode_token
from workspace_members_service.db.deps import AccountsRepoDep, SessionDep
from workspace_members_service.rest.routes.auth import TokenResponse, issue_tokens

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/invitations", tags=["invitations"])


class AcceptInvitationRequest(BaseModel):
    token: str
    password: str

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v


@router.post("/accept", response_model=TokenResponse)
async def accept_invitation(
    request: AcceptInvitationRequest, repo: AccountsRepoDep, session: SessionDep
) -> TokenResponse:
    """Set the invited user's password and sign them in."""
    try:
        payload = decode_token(request.token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=400, detail="Invalid or expired invitation") from exc

    if payload.get("type") != INVITATION:
        raise HTTPException(status_code=400, detail="Not an invitation token")

    try:
        user_id = UUID(payload["sub"])
        company_id = UUID(payload["company"])
        role = WorkspaceRole(payload["role"])
    except (KeyError, ValueError) as exc:
        raise HTTPException(status_code=400, detail="Malformed invitation") from exc

    user = await repo.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Invited user not found")
    if not await repo.has_role(company_id, user.id, role):
        raise HTTPException(status_code=410, detail="Invitation is no longer valid")

    await repo.accept_invitation(user, request.password)
    await session.commit()
    logger.info("invitation_accepted", user_id=str(user.id), company_id=str(company_id))

    return issue_tokens(user.id, company_id, user.email, role.value)
