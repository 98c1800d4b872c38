"""Redis list queue carrying invitation mail jobs to the worker."""

from __future__ import annotations

import json
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import redis.asyncio as redis
import structlog

from workspace_members.messages import InvitationMessage

logger = structlog.get_logger(__name__)

SEND_INVITATION_EMAILS = "send_invitation_emails"


class RedisInvitationQueue:
    """InvitationQueue backed by a Redis list (LPUSH to enqueue, BRPOP to consume)."""

    def __init__(self, client: redis.Redis, key: str) -> None:
        self._client = client
        self._key = key

    async def enqueue(self, invitations: Sequence[InvitationMessage]) -> str:
        job_id = str(uuid.uuid4())
        envelope = {
            "job": SEND_INVITATION_EMAILS,
            "id": job_id,
            "invitations": [m.to_payload() for m in invitations],
            "enqueued_at": datetime.now(UTC).isoformat(),
        }
        await self._client.lpush(self._key, json.dumps(envelope))
        logger.info("invitation_job_enqueued", job_id=job_id, invitations=len(invitations))
        return job_id

    async def dequeue(self, timeout: int = 5) -> dict[str, Any] | None:
        """Block up to ``timeout`` seconds for the next job envelope."""
        result = await self._client.brpop([self._key], timeout=timeout)
        if not result:
            return None
        _key, raw = result
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("invitation_job_malformed", raw=raw[:200])
            return None
