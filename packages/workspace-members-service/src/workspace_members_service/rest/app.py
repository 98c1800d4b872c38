"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workspace_members_service.db.engine import close_db, init_db
from workspace_members_service.jobs.connection import close_redis, init_redis
from workspace_members_service.rest.routes.auth import router as auth_router
from workspace_members_service.rest.routes.health import router as health_router
from workspace_members_service.rest.routes.invitations import router as invitations_router
from workspace_members_service.rest.routes.workspace_members import router as members_router
from workspace_members_service.rest.routes.workspace_roles import router as roles_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_db()
    await init_redis()
    yield
    await close_redis()
    await close_db()


def include_routers(app: FastAPI) -> FastAPI:
    # Public routes
    app.include_router(health_router, tags=["health"])

    # login/refresh and invitation acceptance are public; /auth/me is protected inside the router
    app.include_router(auth_router, prefix="/api/v1", tags=["auth"])
    app.include_router(invitations_router, prefix="/api/v1", tags=["invitations"])

    # Company admin routes
    app.include_router(members_router, prefix="/api/v1", tags=["workspace members"])
    app.include_router(roles_router, prefix="/api/v1", tags=["workspace members"])
    return app


def create_app() -> FastAPI:
    app = FastAPI(
        title="Workspace Members API",
        description="Company administrator and lawyer membership service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return include_routers(app)
