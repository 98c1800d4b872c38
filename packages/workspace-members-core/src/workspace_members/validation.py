"""Input normalization and validation for membership requests."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from workspace_members.config import MANAGEABLE_ROLES
from workspace_members.errors import NO_MEMBERS_MESSAGE, MemberError

# Same shape as the HTML5 / URI MailTo address pattern.
EMAIL_PATTERN = re.compile(
    r"\A[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*\Z"
)


def normalize(value: Any) -> str:
    """Trim and lowercase a raw input value; ``None`` becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip().lower()


@dataclass(frozen=True)
class MembershipRequest:
    """One raw ``(email, role)`` row as submitted by the caller."""

    email: str = ""
    role: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MembershipRequest:
        email = data.get("email")
        role = data.get("role")
        return cls(
            email="" if email is None else str(email),
            role="" if role is None else str(role),
        )

    @property
    def normalized_email(self) -> str:
        return normalize(self.email)

    @property
    def normalized_role(self) -> str:
        return normalize(self.role)


def coerce_requests(
    members: Sequence[MembershipRequest | Mapping[str, Any]] | None,
) -> list[MembershipRequest]:
    if not members:
        return []
    return [
        m if isinstance(m, MembershipRequest) else MembershipRequest.from_mapping(m)
        for m in members
    ]


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def validate_entry(email: str, role: str, index: int | None = None) -> list[MemberError]:
    """Validate one normalized row. Email errors come before role errors."""
    errors: list[MemberError] = []

    if not email:
        errors.append(MemberError(index=index, field="email", message="Email is required"))
    elif not is_valid_email(email):
        errors.append(MemberError(index=index, field="email", message="Email format is invalid"))

    if not role:
        errors.append(MemberError(index=index, field="role", message="Role is required"))
    elif role not in MANAGEABLE_ROLES:
        errors.append(MemberError(index=index, field="role", message=f"Invalid role: {role}"))

    return errors


def validate_members(members: Sequence[MembershipRequest] | None) -> list[MemberError]:
    """Validate every row and aggregate the errors.

    An empty or missing list yields a single top-level error and nothing else.
    """
    if not members:
        return [MemberError(field="workspace_members", message=NO_MEMBERS_MESSAGE)]

    errors: list[MemberError] = []
    for index, member in enumerate(members):
        errors.extend(validate_entry(member.normalized_email, member.normalized_role, index))
    return errors
