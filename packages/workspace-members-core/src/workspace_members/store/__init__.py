"""Storage backends for workspace membership."""

from __future__ import annotations

from workspace_members.store.base import (
    COMPANY_MEMBER_TYPES,
    CreatedMember,
    InvitationQueue,
    MembershipStore,
    RoleRow,
)

__all__ = [
    "COMPANY_MEMBER_TYPES",
    "CreatedMember",
    "InvitationQueue",
    "MembershipStore",
    "RoleRow",
]
