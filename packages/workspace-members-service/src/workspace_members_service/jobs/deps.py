"""FastAPI dependencies for the Redis client and invitation queue."""

from __future__ import annotations

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from workspace_members.store.base import InvitationQueue
from workspace_members_service.jobs.connection import get_redis
from workspace_members_service.jobs.queue import RedisInvitationQueue
from workspace_members_service.settings import settings

RedisDep = Annotated[redis.Redis, Depends(get_redis)]


def get_invitation_queue(client: RedisDep) -> RedisInvitationQueue:
    return RedisInvitationQueue(client, settings.invitation_queue_key)


InvitationQueueDep = Annotated[InvitationQueue, Depends(get_invitation_queue)]
