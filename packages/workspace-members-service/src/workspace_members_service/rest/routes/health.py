"""Health check endpoints."""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from workspace_members_service.db.deps import SessionDep
from workspace_members_service.jobs.deps import RedisDep

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(session: SessionDep, redis: RedisDep):
    """Report ready only when both Postgres and Redis answer."""
    checks = {"database": "ok", "redis": "ok"}
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.warning("readiness_database_failed", exc_info=True)
        checks["database"] = "unavailable"
    try:
        await redis.ping()
    except Exception:
        logger.warning("readiness_redis_failed", exc_info=True)
        checks["redis"] = "unavailable"

    if all(v == "ok" for v in checks.values()):
        return {"status": "ready", "checks": checks}
    return JSONResponse(status_code=503, content={"status": "unavailable", "checks": checks})
