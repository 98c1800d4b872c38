"""Collapse membership requests into a normalized email -> role map."""

from __future__ import annotations

from collections.abc import Iterable

from workspace_members.validation import MembershipRequest, normalize


def build_role_map(members: Iterable[MembershipRequest], exclude_email: str) -> dict[str, str]:
    """Fold rows into ``{email: role}``; the last row for an email wins.

    The acting user's own address is dropped so nobody can re-assign their
    own role (which also keeps the last admin from demoting themselves).
    """
    excluded = normalize(exclude_email)
    role_map: dict[str, str] = {}

    for member in members:
        email = member.normalized_email
        role = member.normalized_role
        if not email or not role or email == excluded:
            continue
        role_map[email] = role

    return role_map
