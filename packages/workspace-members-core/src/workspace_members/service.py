"""Workspace member reconciliation entry point."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import structlog

from workspace_members.config import ReconcileConfig
from workspace_members.dedupe import build_role_map
from workspace_members.errors import UNEXPECTED_ERROR_MESSAGE, MemberError
from workspace_members.executor import PlanExecutor
from workspace_members.planning import build_plan
from workspace_members.store.base import InvitationQueue, MembershipStore
from workspace_members.validation import MembershipRequest, coerce_requests, validate_members

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ActingUser:
    """The user performing the reconciliation."""

    id: UUID
    email: str


@dataclass
class ReconcileResult:
    success: bool
    invited_count: int = 0
    updated_count: int = 0
    errors: list[MemberError] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return self.invited_count + self.updated_count

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {
                "success": True,
                "invited_count": self.invited_count,
                "updated_count": self.updated_count,
                "total_processed": self.total_processed,
            }
        return {
            "success": False,
            "errors": [e.to_dict() for e in self.errors],
            "invited_count": self.invited_count,
            "updated_count": self.updated_count,
        }


class WorkspaceMemberReconciler:
    """Bring a company's admin/lawyer roles in line with a target member list.

    1. Validate every row (nothing else happens if any row is invalid)
    2. Deduplicate by normalized email, last role wins, acting user dropped
    3. Load existing users and their roles in one query
    4. Plan removals, additions and invitations
    5. Execute the plan in one transaction
    6. After commit, enqueue one invitation job if anything is pending
    """

    def __init__(
        self,
        store: MembershipStore,
        queue: InvitationQueue,
        config: ReconcileConfig | None = None,
    ) -> None:
        self._store = store
        self._queue = queue
        self._config = config or ReconcileConfig()

    async def perform(
        self,
        company_id: UUID,
        members: Sequence[MembershipRequest | Mapping[str, Any]] | None,
        acting_user: ActingUser,
    ) -> ReconcileResult:
        requests = coerce_requests(members)

        validation_errors = validate_members(requests)
        if validation_errors:
            return ReconcileResult(success=False, errors=validation_errors)

        executor = PlanExecutor(self._store, self._config, company_id, acting_user.id)
        try:
            async with self._store.transaction():
                role_map = build_role_map(requests, exclude_email=acting_user.email)
                snapshots = await self._store.load_snapshots(company_id, list(role_map))
                plan = build_plan(role_map, snapshots)
                if plan.is_empty:
                    logger.info("workspace_members_unchanged", company_id=str(company_id))
                else:
                    await executor.execute(plan)

            if executor.pending_invitations:
                await self._queue.enqueue(executor.pending_invitations)
        except Exception:
            logger.exception("workspace_member_reconciliation_failed", company_id=str(company_id))
            return ReconcileResult(
                success=False,
                invited_count=executor.invited_count,
                updated_count=executor.updated_count,
                errors=[MemberError(field="base", message=UNEXPECTED_ERROR_MESSAGE)],
            )

        logger.info(
            "workspace_members_reconciled",
            company_id=str(company_id),
            requested=len(requests),
            invited=executor.invited_count,
            updated=executor.updated_count,
            failed=len(executor.errors),
        )
        return ReconcileResult(
            success=not executor.errors,
            invited_count=executor.invited_count,
            updated_count=executor.updated_count,
            errors=executor.errors,
        )
