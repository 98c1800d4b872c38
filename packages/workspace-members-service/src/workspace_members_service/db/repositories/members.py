"""SQL-backed MembershipStore used by the reconciler."""

from __future__ import annotations

from collections.abc import AsyncIterator, Collection, Sequence
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import and_, delete, func, insert, select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from workspace_members.config import WorkspaceRole
from workspace_members.errors import RoleWriteError
from workspace_members.identifiers import generate_external_id
from workspace_members.planning import ExistingUserSnapshot
from workspace_members.store.base import CreatedMember, RoleRow
from workspace_members_service.db.models import (
    ROLE_MODELS,
    CompanyAdministratorModel,
    CompanyLawyerModel,
    UserModel,
)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _sqlstate(exc: IntegrityError | DataError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def to_role_write_error(exc: IntegrityError | DataError) -> RoleWriteError:
    """Translate a database write failure into the message reported per row."""
    code = _sqlstate(exc)
    if code == UNIQUE_VIOLATION:
        return RoleWriteError("User has already been taken", field="user_id")
    if code == FOREIGN_KEY_VIOLATION:
        return RoleWriteError("Company or user must exist", field="base")
    return RoleWriteError()


class SqlMembershipStore:
    """MembershipStore over one AsyncSession.

    Every insert runs inside a SAVEPOINT so a rejected statement only
    discards its own rows and the outer transaction keeps going.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
        except BaseException:
            await self._session.rollback()
            raise
        await self._session.commit()

    async def load_snapshots(
        self, company_id: UUID, emails: Collection[str]
    ) -> dict[str, ExistingUserSnapshot]:
        if not emails:
            return {}

        admin = aliased(CompanyAdministratorModel)
        lawyer = aliased(CompanyLawyerModel)
        stmt = (
            select(
                UserModel.id,
                UserModel.email,
                admin.id.is_not(None).label("is_admin"),
                lawyer.id.is_not(None).label("is_lawyer"),
            )
            .outerjoin(admin, and_(admin.user_id == UserModel.id, admin.company_id == company_id))
            .outerjoin(lawyer, and_(lawyer.user_id == UserModel.id, lawyer.company_id == company_id))
            .where(func.lower(UserModel.email).in_([e.lower() for e in emails]))
        )
        result = await self._session.execute(stmt)

        return {
            row.email.lower(): ExistingUserSnapshot(
                user_id=row.id,
                email=row.email,
                currently_admin=bool(row.is_admin),
                currently_lawyer=bool(row.is_lawyer),
            )
            for row in result.all()
        }

    async def delete_roles(
        self, company_id: UUID, role: WorkspaceRole, user_ids: Sequence[UUID]
    ) -> int:
        model = ROLE_MODELS[role]
        result = await self._session.execute(
            delete(model).where(model.company_id == company_id, model.user_id.in_(list(user_ids)))
        )
        return result.rowcount or 0

    async def insert_roles(
        self, company_id: UUID, role: WorkspaceRole, rows: Sequence[RoleRow]
    ) -> list[CreatedMember]:
        model = ROLE_MODELS[role]
        stmt = (
            insert(model)
            .values([
                {"company_id": company_id, "user_id": row.user_id, "external_id": row.external_id}
                for row in rows
            ])
            .returning(model.id, model.user_id, model.external_id)
        )
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
                inserted = result.all()
        except (IntegrityError, DataError) as exc:
            raise to_role_write_error(exc) from exc

        return [
            CreatedMember(id=r.id, user_id=r.user_id, role=role, external_id=r.external_id)
            for r in inserted
        ]

    async def insert_role(
        self, company_id: UUID, role: WorkspaceRole, user_id: UUID
    ) -> CreatedMember:
        model = ROLE_MODELS[role]
        row = model(company_id=company_id, user_id=user_id, external_id=generate_external_id())
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except (IntegrityError, DataError) as exc:
            raise to_role_write_error(exc) from exc

        return CreatedMember(id=row.id, user_id=row.user_id, role=role, external_id=row.external_id)
