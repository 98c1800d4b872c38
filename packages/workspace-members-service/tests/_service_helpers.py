"""Fakes shared by the service tests - importable from test modules."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError

from workspace_members.config import WorkspaceRole
from workspace_members.identifiers import generate_external_id
from workspace_members.store.base import COMPANY_MEMBER_TYPES
from workspace_members.store.memory import InMemoryInvitationQueue, InMemoryMembershipStore
from workspace_members_service.auth.jwt import create_access_token
from workspace_members_service.auth.passwords import hash_password
from workspace_members_service.db.deps import (
    get_accounts_repo,
    get_membership_store,
    get_session,
)
from workspace_members_service.jobs.connection import get_redis
from workspace_members_service.jobs.deps import get_invitation_queue
from workspace_members_service.rest.app import include_routers

# ---------------------------------------------------------------------------
# Model doubles
# ---------------------------------------------------------------------------


def make_company(name: str = "Acme Legal", email: str | None = "office@acme.test") -> MagicMock:
    company = MagicMock()
    company.id = uuid.uuid4()
    company.name = name
    company.email = email
    return company


def make_user(email: str = "alice@example.com", password: str | None = None) -> MagicMock:
    user = MagicMock()
    user.id = uuid.uuid4()
    user.email = email
    user.password_hash = hash_password(password) if password else None
    user.invited_by_id = None
    user.invitation_created_at = None
    user.invitation_accepted_at = None
    user.created_at = datetime.now(UTC)
    return user


def make_role_row(company_id, user_id, role: WorkspaceRole) -> MagicMock:
    row = MagicMock()
    row.id = uuid.uuid4()
    row.external_id = generate_external_id()
    row.company_id = company_id
    row.user_id = user_id
    row.role = role
    row.member_type = COMPANY_MEMBER_TYPES[role]
    return row


def integrity_error(message: str = "duplicate key value violates unique constraint") -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception(message))


class FakeAccountsRepo:
    """In-memory accounts repo for testing."""

    def __init__(self) -> None:
        self.users: dict[uuid.UUID, Any] = {}
        self.companies: dict[uuid.UUID, Any] = {}
        self.roles: list[Any] = []

    # seeding
    def add_company(self, **kwargs) -> MagicMock:
        company = make_company(**kwargs)
        self.companies[company.id] = company
        return company

    def add_user(self, email: str, password: str | None = None) -> MagicMock:
        user = make_user(email=email, password=password)
        self.users[user.id] = user
        return user

    def grant(self, company_id, user_id, role: WorkspaceRole) -> MagicMock:
        row = make_role_row(company_id, user_id, role)
        self.roles.append(row)
        return row

    # repository interface
    async def get_user(self, user_id):
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str):
        wanted = email.strip().lower()
        return next((u for u in self.users.values() if u.email.lower() == wanted), None)

    async def get_company(self, company_id):
        return self.companies.get(company_id)

    async def create_user(self, email: str, invited_by_id=None):
        if await self.get_user_by_email(email):
            raise integrity_error()
        user = self.add_user(email.strip().lower())
        user.invited_by_id = invited_by_id
        user.invitation_created_at = datetime.now(UTC) if invited_by_id else None
        return user

    async def accept_invitation(self, user, password: str):
        user.password_hash = hash_password(password)
        user.invitation_accepted_at = datetime.now(UTC)
        return user

    async def add_role(self, company_id, user_id, role: WorkspaceRole):
        if await self.has_role(company_id, user_id, role):
            raise integrity_error()
        return self.grant(company_id, user_id, role)

    async def get_role_member(self, member_type: str, member_id):
        return next(
            (r for r in self.roles if r.id == member_id and r.member_type == member_type), None
        )

    async def has_role(self, company_id, user_id, role: WorkspaceRole) -> bool:
        return any(
            r.company_id == company_id and r.user_id == user_id and r.role == role
            for r in self.roles
        )

    async def get_membership_role(self, company_id, user_id):
        for role in (WorkspaceRole.ADMIN, WorkspaceRole.LAWYER):
            if await self.has_role(company_id, user_id, role):
                return role.value
        return None

    async def get_first_membership(self, user_id):
        for role in (WorkspaceRole.ADMIN, WorkspaceRole.LAWYER):
            row = next((r for r in self.roles if r.user_id == user_id and r.role == role), None)
            if row is not None:
                return row.company_id, role.value
        return None

    async def list_members(self, company_id):
        members = [
            (r.role.value, r, self.users[r.user_id])
            for r in self.roles
            if r.company_id == company_id
        ]
        return sorted(members, key=lambda m: (m[2].email, m[0]))


def fake_session_factory(sessions: list):
    """async_sessionmaker stand-in that records every session it opens."""

    @asynccontextmanager
    async def factory():
        session = AsyncMock()
        sessions.append(session)
        yield session

    return factory


class RecordingTransport:
    def __init__(self) -> None:
        self.sent: list[Any] = []

    async def deliver(self, mail) -> None:
        self.sent.append(mail)


# ---------------------------------------------------------------------------
# App + tokens
# ---------------------------------------------------------------------------


def make_test_app(
    accounts: FakeAccountsRepo | None = None,
    store: InMemoryMembershipStore | None = None,
    queue: InMemoryInvitationQueue | None = None,
):
    """Build a test app with in-memory repos, queue and a mocked session/Redis."""
    app = FastAPI(title="test")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    include_routers(app)

    accounts = accounts or FakeAccountsRepo()
    store = store or InMemoryMembershipStore()
    queue = queue or InMemoryInvitationQueue()
    session = AsyncMock()
    redis_client = AsyncMock()

    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_accounts_repo] = lambda: accounts
    app.dependency_overrides[get_membership_store] = lambda: store
    app.dependency_overrides[get_invitation_queue] = lambda: queue
    app.dependency_overrides[get_redis] = lambda: redis_client

    return app, accounts, store, queue, session, redis_client


def bearer(
    company_id,
    role: str = "admin",
    email: str = "admin@test.com",
    user_id=None,
) -> dict[str, str]:
    token = create_access_token(user_id or uuid.uuid4(), company_id, email, role)
    return {"Authorization": f"Bearer {token}"}
