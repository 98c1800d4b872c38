"""Shared Redis client for the invitation queue."""

from __future__ import annotations

import redis.asyncio as redis
import structlog

from workspace_members_service.settings import settings

logger = structlog.get_logger(__name__)

_client: redis.Redis | None = None


async def init_redis() -> None:
    global _client
    _client = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    logger.info("redis_connected")


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        logger.info("redis_closed")
    _client = None


def get_redis() -> redis.Redis:
    if _client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _client
