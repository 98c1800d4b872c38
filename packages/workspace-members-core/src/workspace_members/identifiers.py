"""External identifiers for role rows."""

from __future__ import annotations

import secrets
import string

EXTERNAL_ID_ALPHABET = string.digits + string.ascii_lowercase
EXTERNAL_ID_LENGTH = 13


def generate_external_id(size: int = EXTERNAL_ID_LENGTH) -> str:
    """Random lowercase-alphanumeric id used for display and routing, not security."""
    return "".join(secrets.choice(EXTERNAL_ID_ALPHABET) for _ in range(size))
