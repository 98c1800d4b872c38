"""Invitation job: create invited accounts and send invitation mails."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from workspace_members.config import WorkspaceRole
from workspace_members.messages import (
    EXISTING_USER_INVITATION,
    NEW_USER_INVITATION,
    InvitationMessage,
)
from workspace_members_service.db.repositories.accounts import AccountsRepo
from workspace_members_service.mail.mailer import InvitationMailer

logger = structlog.get_logger(__name__)


class InvitationDispatcher:
    """Processes one queued batch of invitation messages.

    Each entry uses its own session and commits independently. A failing
    entry is logged and the rest of the batch still goes out.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        mailer: InvitationMailer,
        repo_factory: Callable[[AsyncSession], AccountsRepo] = AccountsRepo,
    ) -> None:
        self._session_factory = session_factory
        self._mailer = mailer
        self._repo_factory = repo_factory

    async def perform(self, invitations: Iterable[Mapping[str, Any]]) -> int:
        """Process every entry and return how many mails were sent."""
        sent = 0
        for payload in invitations:
            try:
                message = InvitationMessage.from_payload(payload)
                if message.kind == NEW_USER_INVITATION:
                    delivered = await self._invite_new_user(message)
                elif message.kind == EXISTING_USER_INVITATION:
                    delivered = await self._invite_existing_user(message)
                else:
                    logger.warning("invitation_type_unknown", type=payload.get("type"))
                    continue
            except Exception:
                logger.warning(
                    "invitation_entry_failed",
                    email=payload.get("email"),
                    type=payload.get("type"),
                    exc_info=True,
                )
                continue
            sent += int(delivered)
        return sent

    async def _invite_new_user(self, message: InvitationMessage) -> bool:
        role = WorkspaceRole(message.role)
        async with self._session_factory() as session:
            repo = self._repo_factory(session)
            company = await repo.get_company(message.company_id)
            if company is None:
                logger.warning("invitation_company_missing", company_id=str(message.company_id))
                return False
            inviter = await repo.get_user(message.current_user_id)

            try:
                user = await repo.create_user(message.email, invited_by_id=message.current_user_id)
                await repo.add_role(company.id, user.id, role)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.warning("invited_user_not_created", email=message.email, role=role.value)
                return False

            return await self._mailer.send_invitation(user, company, role.value, inviter)

    async def _invite_existing_user(self, message: InvitationMessage) -> bool:
        async with self._session_factory() as session:
            repo = self._repo_factory(session)
            member = await repo.get_role_member(
                message.company_member_type or "", message.company_member_id
            )
            if member is None:
                # Lawyer rows may be removed before the job runs.
                if message.company_member_type != "CompanyLawyer":
                    logger.warning(
                        "invitation_member_missing",
                        company_member_id=str(message.company_member_id),
                        company_member_type=message.company_member_type,
                    )
                return False

            user = await repo.get_user(member.user_id)
            company = await repo.get_company(member.company_id)
            if user is None or company is None:
                logger.warning("invitation_member_incomplete", company_member_id=str(member.id))
                return False

            return await self._mailer.send_invitation(user, company, message.role)
