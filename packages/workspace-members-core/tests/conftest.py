"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make _helpers importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from _helpers import FlakyMembershipStore, make_acting_user  # noqa: E402

from workspace_members.config import ReconcileConfig  # noqa: E402
from workspace_members.service import ActingUser, WorkspaceMemberReconciler  # noqa: E402
from workspace_members.store.memory import InMemoryInvitationQueue  # noqa: E402


@pytest.fixture
def store() -> FlakyMembershipStore:
    return FlakyMembershipStore()


@pytest.fixture
def queue() -> InMemoryInvitationQueue:
    return InMemoryInvitationQueue()


@pytest.fixture
def config() -> ReconcileConfig:
    return ReconcileConfig()


@pytest.fixture
def acting_user(store: FlakyMembershipStore) -> ActingUser:
    user = make_acting_user()
    store.add_user(user.email, user_id=user.id)
    return user


@pytest.fixture
def reconciler(
    store: FlakyMembershipStore, queue: InMemoryInvitationQueue, config: ReconcileConfig
) -> WorkspaceMemberReconciler:
    return WorkspaceMemberReconciler(store, queue, config)
