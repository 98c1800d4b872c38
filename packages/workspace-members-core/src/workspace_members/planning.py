"""Diff target roles against current roles and build an operation plan."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from uuid import UUID

from workspace_members.config import WorkspaceRole


@dataclass(frozen=True)
class ExistingUserSnapshot:
    """A persisted user and their current roles in one company."""

    user_id: UUID
    email: str
    currently_admin: bool = False
    currently_lawyer: bool = False


@dataclass
class OperationPlan:
    """Role removals and additions to apply, plus emails to invite."""

    remove_admin_user_ids: list[UUID] = field(default_factory=list)
    remove_lawyer_user_ids: list[UUID] = field(default_factory=list)
    admins_to_create: list[ExistingUserSnapshot] = field(default_factory=list)
    lawyers_to_create: list[ExistingUserSnapshot] = field(default_factory=list)
    users_to_invite: list[tuple[str, str]] = field(default_factory=list)

    def creations(self) -> list[tuple[WorkspaceRole, list[ExistingUserSnapshot]]]:
        return [
            (WorkspaceRole.ADMIN, self.admins_to_create),
            (WorkspaceRole.LAWYER, self.lawyers_to_create),
        ]

    @property
    def is_empty(self) -> bool:
        return not (
            self.remove_admin_user_ids
            or self.remove_lawyer_user_ids
            or self.admins_to_create
            or self.lawyers_to_create
            or self.users_to_invite
        )


def role_already_correct(target_role: str, has_admin: bool, has_lawyer: bool) -> bool:
    """True only when the user holds exactly the target role and not the other one.

    A user holding both roles is never considered correct, so reconciling
    them always collapses the account to a single role.
    """
    if target_role == WorkspaceRole.ADMIN.value:
        return has_admin and not has_lawyer
    if target_role == WorkspaceRole.LAWYER.value:
        return has_lawyer and not has_admin
    return False


def build_plan(
    role_map: Mapping[str, str],
    snapshots: Mapping[str, ExistingUserSnapshot],
) -> OperationPlan:
    plan = OperationPlan()

    for email, role in role_map.items():
        user = snapshots.get(email)
        if user is None:
            plan.users_to_invite.append((email, role))
            continue

        if role_already_correct(role, user.currently_admin, user.currently_lawyer):
            continue

        if user.currently_admin:
            plan.remove_admin_user_ids.append(user.user_id)
        if user.currently_lawyer:
            plan.remove_lawyer_user_ids.append(user.user_id)

        if role == WorkspaceRole.ADMIN.value:
            plan.admins_to_create.append(user)
        elif role == WorkspaceRole.LAWYER.value:
            plan.lawyers_to_create.append(user)

    return plan
