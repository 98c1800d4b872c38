"""Service test fixtures with in-memory fakes (no database or Redis needed)."""

from __future__ import annotations

import sys
import uuid
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

# Make _service_helpers importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from _service_helpers import make_test_app  # noqa: E402


@pytest.fixture
def company_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def api():
    """TestClient plus the fakes wired into it."""
    app, accounts, store, queue, session, redis_client = make_test_app()
    return SimpleNamespace(
        client=TestClient(app),
        accounts=accounts,
        store=store,
        queue=queue,
        session=session,
        redis=redis_client,
    )
