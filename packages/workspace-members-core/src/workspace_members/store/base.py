"""Protocols for pluggable membership storage and invitation queues."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from workspace_members.config import WorkspaceRole
from workspace_members.planning import ExistingUserSnapshot

if TYPE_CHECKING:
    from workspace_members.messages import InvitationMessage

COMPANY_MEMBER_TYPES: dict[WorkspaceRole, str] = {
    WorkspaceRole.ADMIN: "CompanyAdministrator",
    WorkspaceRole.LAWYER: "CompanyLawyer",
}


@dataclass(frozen=True)
class RoleRow:
    """A role row to insert as part of a bulk statement."""

    user_id: UUID
    external_id: str


@dataclass(frozen=True)
class CreatedMember:
    """A role row the store has just written."""

    id: UUID
    user_id: UUID
    role: WorkspaceRole
    external_id: str

    @property
    def company_member_type(self) -> str:
        return COMPANY_MEMBER_TYPES[self.role]


class MembershipStore(Protocol):
    """Backend interface for reading and writing company role rows.

    ``insert_roles`` and ``insert_role`` must be failure-isolated: when they
    raise :class:`~workspace_members.errors.RoleWriteError` nothing they
    attempted is left behind, and the surrounding transaction stays usable.
    """

    def transaction(self) -> AbstractAsyncContextManager[None]: ...
    async def load_snapshots(
        self, company_id: UUID, emails: Collection[str]
    ) -> dict[str, ExistingUserSnapshot]: ...
    async def delete_roles(
        self, company_id: UUID, role: WorkspaceRole, user_ids: Sequence[UUID]
    ) -> int: ...
    async def insert_roles(
        self, company_id: UUID, role: WorkspaceRole, rows: Sequence[RoleRow]
    ) -> list[CreatedMember]: ...
    async def insert_role(
        self, company_id: UUID, role: WorkspaceRole, user_id: UUID
    ) -> CreatedMember: ...


class InvitationQueue(Protocol):
    """Hands a batch of invitation messages to the asynchronous mail job."""

    async def enqueue(self, invitations: Sequence[InvitationMessage]) -> str: ...
