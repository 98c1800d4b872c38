"""SqlMembershipStore behaviour against a mocked AsyncSession."""

from __future__ import annotations

import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import DataError, IntegrityError

from workspace_members.config import WorkspaceRole
from workspace_members.errors import RoleWriteError
from workspace_members.store.base import RoleRow
from workspace_members_service.db.repositories.members import (
    SqlMembershipStore,
    to_role_write_error,
)

COMPANY_ID = uuid.uuid4()


def _session() -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    session.begin_nested = MagicMock()
    return session


def _pg_error(cls, sqlstate: str | None):
    orig = Exception("boom")
    orig.sqlstate = sqlstate
    return cls("INSERT", {}, orig)


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------


def test_unique_violation_maps_to_user_taken():
    err = to_role_write_error(_pg_error(IntegrityError, "23505"))
    assert (err.field, err.message) == ("user_id", "User has already been taken")


def test_foreign_key_violation_maps_to_base():
    err = to_role_write_error(_pg_error(IntegrityError, "23503"))
    assert err.field == "base"


def test_other_errors_use_default_message():
    err = to_role_write_error(_pg_error(DataError, None))
    assert (err.field, err.message) == ("base", "Failed to save relationship")


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_transaction_commits_on_success():
    session = _session()
    async with SqlMembershipStore(session).transaction():
        pass
    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error():
    session = _session()
    with pytest.raises(RuntimeError):
        async with SqlMembershipStore(session).transaction():
            raise RuntimeError("Test error")
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


# ---------------------------------------------------------------------------
# Reads and writes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_load_snapshots_skips_query_for_no_emails():
    session = _session()
    assert await SqlMembershipStore(session).load_snapshots(COMPANY_ID, []) == {}
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_load_snapshots_keys_by_lowercased_email():
    session = _session()
    user_id = uuid.uuid4()
    result = MagicMock()
    result.all.return_value = [
        SimpleNamespace(id=user_id, email="Mixed@Test.com", is_admin=True, is_lawyer=None)
    ]
    session.execute.return_value = result

    snapshots = await SqlMembershipStore(session).load_snapshots(COMPANY_ID, ["mixed@test.com"])

    assert list(snapshots) == ["mixed@test.com"]
    snap = snapshots["mixed@test.com"]
    assert snap.user_id == user_id
    assert snap.currently_admin is True
    assert snap.currently_lawyer is False
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_load_snapshots_joins_roles_for_requested_company_only():
    session = _session()
    session.execute.return_value = MagicMock(all=MagicMock(return_value=[]))

    await SqlMembershipStore(session).load_snapshots(COMPANY_ID, ["someone@test.com"])

    (stmt,) = session.execute.await_args.args
    compiled = stmt.compile(dialect=postgresql.dialect())
    sql = str(compiled)
    assert "company_administrators_1.company_id = %(company_id_1)s" in sql
    assert "company_lawyers_1.company_id = %(company_id_2)s" in sql
    assert compiled.params["company_id_1"] == COMPANY_ID
    assert compiled.params["company_id_2"] == COMPANY_ID


@pytest.mark.asyncio
async def test_insert_roles_returns_created_members():
    session = _session()
    rows = [RoleRow(user_id=uuid.uuid4(), external_id="abc0000000001")]
    result = MagicMock()
    result.all.return_value = [
        SimpleNamespace(id=uuid.uuid4(), user_id=rows[0].user_id, external_id="abc0000000001")
    ]
    session.execute.return_value = result

    created = await SqlMembershipStore(session).insert_roles(COMPANY_ID, WorkspaceRole.LAWYER, rows)

    assert [(c.user_id, c.role, c.external_id) for c in created] == [
        (rows[0].user_id, WorkspaceRole.LAWYER, "abc0000000001")
    ]
    session.begin_nested.assert_called_once()


@pytest.mark.asyncio
async def test_insert_roles_wraps_constraint_violation():
    session = _session()
    session.execute.side_effect = _pg_error(IntegrityError, "23505")
    rows = [RoleRow(user_id=uuid.uuid4(), external_id="abc0000000001")]

    with pytest.raises(RoleWriteError):
        await SqlMembershipStore(session).insert_roles(COMPANY_ID, WorkspaceRole.ADMIN, rows)


@pytest.mark.asyncio
async def test_insert_role_wraps_flush_failure():
    session = _session()
    session.flush.side_effect = _pg_error(IntegrityError, "23505")

    with pytest.raises(RoleWriteError) as exc_info:
        await SqlMembershipStore(session).insert_role(COMPANY_ID, WorkspaceRole.ADMIN, uuid.uuid4())

    assert exc_info.value.message == "User has already been taken"


@pytest.mark.asyncio
async def test_unexpected_errors_propagate_unchanged():
    session = _session()
    session.flush.side_effect = RuntimeError("connection lost")

    with pytest.raises(RuntimeError):
        await SqlMembershipStore(session).insert_role(COMPANY_ID, WorkspaceRole.LAWYER, uuid.uuid4())


@pytest.mark.asyncio
async def test_delete_roles_reports_rowcount():
    session = _session()
    session.execute.return_value = MagicMock(rowcount=2)

    removed = await SqlMembershipStore(session).delete_roles(
        COMPANY_ID, WorkspaceRole.ADMIN, [uuid.uuid4(), uuid.uuid4()]
    )

    assert removed == 2
