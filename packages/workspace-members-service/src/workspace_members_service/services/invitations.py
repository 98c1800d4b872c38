"""Invite a single member into a company."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_members.config import WorkspaceRole
from workspace_members.messages import InvitationMessage
from workspace_members.service import ActingUser
from workspace_members.store.base import CreatedMember, InvitationQueue
from workspace_members.validation import normalize, validate_entry
from workspace_members_service.db.repositories.accounts import AccountsRepo

logger = structlog.get_logger(__name__)

EMAIL_TAKEN_MESSAGE = "Email has already been taken"


@dataclass
class InviteResult:
    success: bool
    field: str | None = None
    error: str | None = None

    @classmethod
    def failure(cls, field: str, error: str) -> InviteResult:
        return cls(success=False, field=field, error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "message": "Member invited successfully"}
        return {"success": False, "field": self.field, "error": self.error}


class MemberInviter:
    """Create a brand new user with one role and queue their invitation mail."""

    def __init__(self, repo: AccountsRepo, session: AsyncSession, queue: InvitationQueue) -> None:
        self._repo = repo
        self._session = session
        self._queue = queue

    async def invite(
        self, company_id: UUID, email: str | None, role: str | None, acting_user: ActingUser
    ) -> InviteResult:
        email = normalize(email)
        role = normalize(role)

        errors = validate_entry(email, role)
        if errors:
            return InviteResult.failure(errors[0].field, errors[0].message)
        if email == normalize(acting_user.email):
            return InviteResult.failure("email", "Cannot invite yourself")
        if await self._repo.get_user_by_email(email) is not None:
            return InviteResult.failure("email", EMAIL_TAKEN_MESSAGE)

        workspace_role = WorkspaceRole(role)
        try:
            user = await self._repo.create_user(email, invited_by_id=acting_user.id)
            member = await self._repo.add_role(company_id, user.id, workspace_role)
            await self._session.commit()
        except IntegrityError:
            await self._session.rollback()
            logger.warning("member_invite_conflict", company_id=str(company_id), email=email)
            return InviteResult.failure("email", EMAIL_TAKEN_MESSAGE)

        created = CreatedMember(
            id=member.id, user_id=user.id, role=workspace_role, external_id=member.external_id
        )
        await self._queue.enqueue([InvitationMessage.for_existing_user(created, email)])
        logger.info("member_invited", company_id=str(company_id), role=role, user_id=str(user.id))
        return InviteResult(success=True)
