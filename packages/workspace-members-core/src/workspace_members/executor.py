"""Apply an operation plan against a membership store."""

from __future__ import annotations

from uuid import UUID

import structlog

from workspace_members.config import ReconcileConfig, WorkspaceRole
from workspace_members.errors import MemberError, RoleWriteError
from workspace_members.identifiers import generate_external_id
from workspace_members.messages import InvitationMessage
from workspace_members.planning import ExistingUserSnapshot, OperationPlan
from workspace_members.store.base import CreatedMember, MembershipStore, RoleRow

logger = structlog.get_logger(__name__)


class PlanExecutor:
    """Runs one plan inside the caller's transaction and tallies the outcome.

    Removals run before additions so a user moving between role tables never
    collides with their old row. Short create lists are inserted row by row;
    longer ones go through bulk statements of ``batch_size`` rows, falling
    back to row-by-row inserts for any batch the store rejects.
    """

    def __init__(
        self,
        store: MembershipStore,
        config: ReconcileConfig,
        company_id: UUID,
        acting_user_id: UUID,
    ) -> None:
        self._store = store
        self._config = config
        self._company_id = company_id
        self._acting_user_id = acting_user_id
        self.invited_count = 0
        self.updated_count = 0
        self.errors: list[MemberError] = []
        self.pending_invitations: list[InvitationMessage] = []

    async def execute(self, plan: OperationPlan) -> None:
        await self._remove_existing_roles(plan)

        for role, users in plan.creations():
            await self._create_roles(users, role)

        for email, role in plan.users_to_invite:
            self._queue_new_user(email, role)

    # ------------------------------------------------------------------
    # Removals
    # ------------------------------------------------------------------

    async def _remove_existing_roles(self, plan: OperationPlan) -> None:
        if plan.remove_admin_user_ids:
            await self._store.delete_roles(
                self._company_id, WorkspaceRole.ADMIN, plan.remove_admin_user_ids
            )
        if plan.remove_lawyer_user_ids:
            await self._store.delete_roles(
                self._company_id, WorkspaceRole.LAWYER, plan.remove_lawyer_user_ids
            )

    # ------------------------------------------------------------------
    # Additions
    # ------------------------------------------------------------------

    async def _create_roles(self, users: list[ExistingUserSnapshot], role: WorkspaceRole) -> None:
        if not users:
            return

        if len(users) < self._config.bulk_insert_threshold:
            for user in users:
                await self._create_one(user, role)
            return

        size = self._config.batch_size
        for start in range(0, len(users), size):
            await self._create_batch(users[start:start + size], role)

    async def _create_batch(self, batch: list[ExistingUserSnapshot], role: WorkspaceRole) -> None:
        rows = [RoleRow(user_id=u.user_id, external_id=generate_external_id()) for u in batch]
        try:
            created = await self._store.insert_roles(self._company_id, role, rows)
        except RoleWriteError as exc:
            logger.warning(
                "bulk_insert_failed_falling_back",
                role=role.value,
                rows=len(rows),
                error=exc.message,
            )
            for user in batch:
                await self._create_one(user, role)
            return

        emails = {u.user_id: u.email for u in batch}
        for member in created:
            self._record_created(member, emails[member.user_id])

    async def _create_one(self, user: ExistingUserSnapshot, role: WorkspaceRole) -> None:
        try:
            member = await self._store.insert_role(self._company_id, role, user.user_id)
        except RoleWriteError as exc:
            self.errors.append(MemberError(email=user.email, field=exc.field, message=exc.message))
            return
        self._record_created(member, user.email)

    def _record_created(self, member: CreatedMember, email: str) -> None:
        if self._config.notify_existing_members:
            self.pending_invitations.append(InvitationMessage.for_existing_user(member, email))
            self.invited_count += 1
        else:
            self.updated_count += 1

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    def _queue_new_user(self, email: str, role: str) -> None:
        self.pending_invitations.append(
            InvitationMessage.for_new_user(
                email=email,
                role=role,
                company_id=self._company_id,
                current_user_id=self._acting_user_id,
            )
        )
        self.invited_count += 1
