"""Auth endpoint tests: login, refresh, /me."""

from __future__ import annotations

import uuid

from _service_helpers import bearer

from workspace_members.config import WorkspaceRole
from workspace_members_service.auth.jwt import create_refresh_token, decode_token


def _login(client, email="alice@example.com", password="secret123"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def test_login_returns_company_scoped_tokens(api):
    company = api.accounts.add_company()
    user = api.accounts.add_user("alice@example.com", password="secret123")
    api.accounts.grant(company.id, user.id, WorkspaceRole.ADMIN)

    resp = _login(api.client, email="Alice@Example.com")

    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    payload = decode_token(data["access_token"])
    assert payload["sub"] == str(user.id)
    assert payload["company"] == str(company.id)
    assert payload["role"] == "admin"
    assert payload["type"] == "access"


def test_login_wrong_password_returns_401(api):
    api.accounts.add_user("alice@example.com", password="secret123")
    resp = _login(api.client, password="wrong-password")
    assert resp.status_code == 401


def test_login_invited_user_without_password_returns_401(api):
    api.accounts.add_user("invited@example.com")
    resp = _login(api.client, email="invited@example.com")
    assert resp.status_code == 401


def test_login_without_membership_returns_403(api):
    api.accounts.add_user("alice@example.com", password="secret123")
    resp = _login(api.client)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------


def test_refresh_reissues_with_current_role(api):
    company = api.accounts.add_company()
    user = api.accounts.add_user("bob@example.com", password="secret123")
    api.accounts.grant(company.id, user.id, WorkspaceRole.LAWYER)

    resp = api.client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": create_refresh_token(user.id, company.id)},
    )

    assert resp.status_code == 200
    assert decode_token(resp.json()["access_token"])["role"] == "lawyer"


def test_refresh_rejects_access_token(api, company_id):
    access = bearer(company_id)["Authorization"].removeprefix("Bearer ")
    resp = api.client.post("/api/v1/auth/refresh", json={"refresh_token": access})
    assert resp.status_code == 401


def test_refresh_after_membership_removed_returns_401(api):
    company = api.accounts.add_company()
    user = api.accounts.add_user("gone@example.com", password="secret123")

    resp = api.client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": create_refresh_token(user.id, company.id)},
    )
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# /me
# ---------------------------------------------------------------------------


def test_me_returns_token_claims(api, company_id):
    user_id = uuid.uuid4()
    resp = api.client.get(
        "/api/v1/auth/me", headers=bearer(company_id, role="lawyer", user_id=user_id)
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "user_id": str(user_id),
        "company_id": str(company_id),
        "email": "admin@test.com",
        "role": "lawyer",
    }


def test_me_requires_token(api):
    resp = api.client.get("/api/v1/auth/me")
    assert resp.status_code == 401


def test_me_rejects_refresh_token(api, company_id):
    token = create_refresh_token(uuid.uuid4(), company_id)
    resp = api.client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not an access token"


def test_me_rejects_garbage_token(api):
    resp = api.client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
