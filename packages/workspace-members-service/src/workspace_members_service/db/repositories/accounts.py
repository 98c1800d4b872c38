"""Repository for users, companies and single role rows."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_members.config import WorkspaceRole
from workspace_members_service.auth.passwords import hash_password
from workspace_members_service.db.models import (
    MEMBER_TYPE_MODELS,
    ROLE_MODELS,
    CompanyModel,
    UserModel,
)


class AccountsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Users and companies
    # ------------------------------------------------------------------

    async def get_user(self, user_id: UUID) -> UserModel | None:
        return await self._session.get(UserModel, user_id)

    async def get_user_by_email(self, email: str) -> UserModel | None:
        result = await self._session.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
        )
        return result.scalars().first()

    async def get_company(self, company_id: UUID) -> CompanyModel | None:
        return await self._session.get(CompanyModel, company_id)

    async def create_user(self, email: str, invited_by_id: UUID | None = None) -> UserModel:
        """Create a user; invited users start without a password."""
        user = UserModel(
            email=email.strip().lower(),
            invited_by_id=invited_by_id,
            invitation_created_at=datetime.now(UTC) if invited_by_id else None,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def accept_invitation(self, user: UserModel, password: str) -> UserModel:
        user.password_hash = hash_password(password)
        user.invitation_accepted_at = datetime.now(UTC)
        await self._session.flush()
        return user

    # ------------------------------------------------------------------
    # Role rows
    # ------------------------------------------------------------------

    async def add_role(self, company_id: UUID, user_id: UUID, role: WorkspaceRole):
        member = ROLE_MODELS[role](company_id=company_id, user_id=user_id)
        self._session.add(member)
        await self._session.flush()
        return member

    async def get_role_member(self, member_type: str, member_id: UUID):
        model = MEMBER_TYPE_MODELS.get(member_type)
        if model is None:
            return None
        return await self._session.get(model, member_id)

    async def has_role(self, company_id: UUID, user_id: UUID, role: WorkspaceRole) -> bool:
        model = ROLE_MODELS[role]
        result = await self._session.execute(
            select(model.id).where(model.company_id == company_id, model.user_id == user_id)
        )
        return result.first() is not None

    async def get_membership_role(self, company_id: UUID, user_id: UUID) -> str | None:
        """Return the user's role in a company; admin wins over lawyer."""
        for role in (WorkspaceRole.ADMIN, WorkspaceRole.LAWYER):
            if await self.has_role(company_id, user_id, role):
                return role.value
        return None

    async def get_first_membership(self, user_id: UUID) -> tuple[UUID, str] | None:
        """Get the first (company_id, role) for a user, admin memberships first."""
        for role in (WorkspaceRole.ADMIN, WorkspaceRole.LAWYER):
            model = ROLE_MODELS[role]
            result = await self._session.execute(
                select(model.company_id)
                .where(model.user_id == user_id)
                .order_by(model.created_at)
                .limit(1)
            )
            company_id = result.scalar_one_or_none()
            if company_id is not None:
                return company_id, role.value
        return None

    async def list_members(self, company_id: UUID) -> list[tuple[str, object, UserModel]]:
        """Return ``(role, role_row, user)`` for every admin and lawyer, ordered by email."""
        members: list[tuple[str, object, UserModel]] = []
        for role, model in ROLE_MODELS.items():
            result = await self._session.execute(
                select(model, UserModel)
                .join(UserModel, UserModel.id == model.user_id)
                .where(model.company_id == company_id)
            )
            members.extend((role.value, row, user) for row, user in result.all())
        members.sort(key=lambda m: (m[2].email, m[0]))
        return members
