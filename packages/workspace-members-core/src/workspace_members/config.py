"""Configuration for workspace member reconciliation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class WorkspaceRole(str, Enum):
    """Roles that can be granted through workspace membership."""
    ADMIN = "admin"
    LAWYER = "lawyer"


MANAGEABLE_ROLES: frozenset[str] = frozenset(role.value for role in WorkspaceRole)


class ReconcileConfig(BaseModel):
    """Tunables for a single reconciliation call."""
    batch_size: int = Field(default=100, ge=1, description="Rows per bulk insert statement")
    bulk_insert_threshold: int = Field(
        default=10, ge=1, description="Create lists shorter than this are inserted row by row"
    )
    notify_existing_members: bool = Field(
        default=False,
        description="Queue an invitation mail when an existing user is granted a role",
    )
