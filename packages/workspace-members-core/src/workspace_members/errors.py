"""Error records and exceptions raised during reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

NO_MEMBERS_MESSAGE = "No workspace members provided"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
DEFAULT_WRITE_ERROR_MESSAGE = "Failed to save relationship"


@dataclass(frozen=True)
class MemberError:
    """A structured error reported back to the caller.

    Input-validation errors carry the row ``index``; errors raised while
    writing role rows carry the affected ``email`` instead.
    """

    field: str
    message: str
    index: int | None = None
    email: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.index is not None:
            data["index"] = self.index
        if self.email is not None:
            data["email"] = self.email
        data["field"] = self.field
        data["message"] = self.message
        return data


class RoleWriteError(Exception):
    """A role row (or a batch of them) could not be written.

    Stores raise this only for write conflicts such as unique-constraint or
    data violations; anything else propagates unchanged.
    """

    def __init__(self, message: str = DEFAULT_WRITE_ERROR_MESSAGE, field: str = "base") -> None:
        super().__init__(message)
        self.message = message
        self.field = field
