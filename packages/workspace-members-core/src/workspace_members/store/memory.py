"""In-memory membership store and invitation queue for testing."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Collection, Sequence
from contextlib import asynccontextmanager
from uuid import UUID

from workspace_members.config import WorkspaceRole
from workspace_members.errors import RoleWriteError
from workspace_members.identifiers import generate_external_id
from workspace_members.messages import InvitationMessage
from workspace_members.planning import ExistingUserSnapshot
from workspace_members.store.base import CreatedMember, RoleRow


class InMemoryMembershipStore:
    """Simple in-memory membership store for testing and development.

    Enforces the ``(company_id, user_id)`` uniqueness of each role table and
    restores role rows when a transaction exits with an exception. Every
    write statement is recorded in ``writes`` as ``(operation, role, rows)``.
    """

    def __init__(self) -> None:
        self._users: dict[UUID, str] = {}
        self._roles: dict[WorkspaceRole, dict[tuple[UUID, UUID], CreatedMember]] = {
            role: {} for role in WorkspaceRole
        }
        self.writes: list[tuple[str, WorkspaceRole, int]] = []
        self.snapshot_queries = 0
        self.commits = 0
        self.rollbacks = 0

    # ------------------------------------------------------------------
    # Seeding / inspection helpers
    # ------------------------------------------------------------------

    def add_user(self, email: str, user_id: UUID | None = None) -> UUID:
        uid = user_id or uuid.uuid4()
        self._users[uid] = email
        return uid

    def grant(self, company_id: UUID, user_id: UUID, role: WorkspaceRole) -> CreatedMember:
        member = CreatedMember(
            id=uuid.uuid4(), user_id=user_id, role=role, external_id=generate_external_id()
        )
        self._roles[role][(company_id, user_id)] = member
        return member

    def has_role(self, company_id: UUID, user_id: UUID, role: WorkspaceRole) -> bool:
        return (company_id, user_id) in self._roles[role]

    def members(self, company_id: UUID, role: WorkspaceRole) -> list[CreatedMember]:
        return [m for (cid, _), m in self._roles[role].items() if cid == company_id]

    # ------------------------------------------------------------------
    # MembershipStore protocol
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        saved = {role: dict(rows) for role, rows in self._roles.items()}
        try:
            yield
        except BaseException:
            self._roles = saved
            self.rollbacks += 1
            raise
        self.commits += 1

    async def load_snapshots(
        self, company_id: UUID, emails: Collection[str]
    ) -> dict[str, ExistingUserSnapshot]:
        self.snapshot_queries += 1
        wanted = {e.lower() for e in emails}
        snapshots: dict[str, ExistingUserSnapshot] = {}
        for user_id, email in self._users.items():
            key = email.lower()
            if key not in wanted:
                continue
            snapshots[key] = ExistingUserSnapshot(
                user_id=user_id,
                email=email,
                currently_admin=self.has_role(company_id, user_id, WorkspaceRole.ADMIN),
                currently_lawyer=self.has_role(company_id, user_id, WorkspaceRole.LAWYER),
            )
        return snapshots

    async def delete_roles(
        self, company_id: UUID, role: WorkspaceRole, user_ids: Sequence[UUID]
    ) -> int:
        table = self._roles[role]
        removed = 0
        for user_id in user_ids:
            if table.pop((company_id, user_id), None) is not None:
                removed += 1
        self.writes.append(("delete", role, removed))
        return removed

    async def insert_roles(
        self, company_id: UUID, role: WorkspaceRole, rows: Sequence[RoleRow]
    ) -> list[CreatedMember]:
        table = self._roles[role]
        keys = [(company_id, row.user_id) for row in rows]
        if len(set(keys)) != len(keys) or any(key in table for key in keys):
            raise RoleWriteError("duplicate key value violates unique constraint")

        created = [
            CreatedMember(id=uuid.uuid4(), user_id=row.user_id, role=role, external_id=row.external_id)
            for row in rows
        ]
        for key, member in zip(keys, created):
            table[key] = member
        self.writes.append(("insert_many", role, len(created)))
        return created

    async def insert_role(
        self, company_id: UUID, role: WorkspaceRole, user_id: UUID
    ) -> CreatedMember:
        table = self._roles[role]
        if (company_id, user_id) in table:
            raise RoleWriteError("User has already been taken", field="user_id")
        member = CreatedMember(
            id=uuid.uuid4(), user_id=user_id, role=role, external_id=generate_external_id()
        )
        table[(company_id, user_id)] = member
        self.writes.append(("insert", role, 1))
        return member


class InMemoryInvitationQueue:
    """Collects enqueued invitation batches instead of sending them anywhere."""

    def __init__(self) -> None:
        self.jobs: list[list[InvitationMessage]] = []

    async def enqueue(self, invitations: Sequence[InvitationMessage]) -> str:
        self.jobs.append(list(invitations))
        return str(uuid.uuid4())
