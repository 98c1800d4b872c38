"""Auth domain models."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from workspace_members.service import ActingUser


@dataclass
class CurrentUser:
    user_id: UUID
    company_id: UUID
    email: str
    role: str  # "admin" | "lawyer"

    def as_acting_user(self) -> ActingUser:
        return ActingUser(id=self.user_id, email=self.email)
