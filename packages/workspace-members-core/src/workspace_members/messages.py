"""Invitation messages queued for the invitation mail job."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from workspace_members.store.base import CreatedMember

NEW_USER_INVITATION = "new_user_invitation"
EXISTING_USER_INVITATION = "existing_user_invitation"


def _uuid_or_none(value: Any) -> UUID | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, UUID) else UUID(str(value))


@dataclass(frozen=True)
class InvitationMessage:
    """One invitation to deliver after the reconciliation transaction commits.

    New-user invitations carry the company and inviting user so the job can
    create the account itself; existing-user invitations point at the role
    row that was just created.
    """

    kind: str
    email: str
    role: str
    company_id: UUID | None = None
    current_user_id: UUID | None = None
    company_member_id: UUID | None = None
    company_member_type: str | None = None
    user_id: UUID | None = None

    @classmethod
    def for_new_user(
        cls, email: str, role: str, company_id: UUID, current_user_id: UUID
    ) -> InvitationMessage:
        return cls(
            kind=NEW_USER_INVITATION,
            email=email,
            role=role,
            company_id=company_id,
            current_user_id=current_user_id,
        )

    @classmethod
    def for_existing_user(cls, member: CreatedMember, email: str) -> InvitationMessage:
        return cls(
            kind=EXISTING_USER_INVITATION,
            email=email,
            role=member.role.value,
            company_member_id=member.id,
            company_member_type=member.company_member_type,
            user_id=member.user_id,
        )

    def to_payload(self) -> dict[str, str]:
        """Serialize with the field names the mail job reads."""
        if self.kind == NEW_USER_INVITATION:
            return {
                "email": self.email,
                "role": self.role,
                "company_id": str(self.company_id),
                "current_user_id": str(self.current_user_id),
                "type": self.kind,
            }
        return {
            "company_member_id": str(self.company_member_id),
            "company_member_type": self.company_member_type or "",
            "user_id": str(self.user_id),
            "role": self.role,
            "email": self.email,
            "type": self.kind,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> InvitationMessage:
        return cls(
            kind=str(payload.get("type", "")),
            email=str(payload.get("email", "")),
            role=str(payload.get("role", "")),
            company_id=_uuid_or_none(payload.get("company_id")),
            current_user_id=_uuid_or_none(payload.get("current_user_id")),
            company_member_id=_uuid_or_none(payload.get("company_member_id")),
            company_member_type=payload.get("company_member_type") or None,
            user_id=_uuid_or_none(payload.get("user_id")),
        )
