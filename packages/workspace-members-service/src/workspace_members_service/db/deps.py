"""FastAPI dependency injection for database sessions, repositories and services."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_members.service import WorkspaceMemberReconciler
from workspace_members.store.base import MembershipStore
from workspace_members_service.db.engine import get_session_factory
from workspace_members_service.db.repositories.accounts import AccountsRepo
from workspace_members_service.db.repositories.members import SqlMembershipStore
from workspace_members_service.jobs.deps import InvitationQueueDep
from workspace_members_service.services.invitations import MemberInviter
from workspace_members_service.settings import settings


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async DB session, auto-closing on exit."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_accounts_repo(session: SessionDep) -> AccountsRepo:
    return AccountsRepo(session)


def get_membership_store(session: SessionDep) -> MembershipStore:
    return SqlMembershipStore(session)


AccountsRepoDep = Annotated[AccountsRepo, Depends(get_accounts_repo)]
MembershipStoreDep = Annotated[MembershipStore, Depends(get_membership_store)]


def get_reconciler(
    store: MembershipStoreDep, queue: InvitationQueueDep
) -> WorkspaceMemberReconciler:
    return WorkspaceMemberReconciler(store, queue, settings.reconcile_config())


def get_member_inviter(
    repo: AccountsRepoDep, session: SessionDep, queue: InvitationQueueDep
) -> MemberInviter:
    return MemberInviter(repo, session, queue)


ReconcilerDep = Annotated[WorkspaceMemberReconciler, Depends(get_reconciler)]
MemberInviterDep = Annotated[MemberInviter, Depends(get_member_inviter)]
