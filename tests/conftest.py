"""Root conftest.py for pytest configuration.

Adds project root to sys.path so shared test doubles are importable by dotted
path (e.g., tests.fakes).
"""

from __future__ import annotations

import sys
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from task_manager_client.app import TaskManagerApp  # noqa: E402
from tests.fakes import BASE_URL, CountingSessionStore, FakeBackend  # noqa: E402


@pytest.fixture
def backend() -> FakeBackend:
    """Fresh in-memory backend."""
    return FakeBackend()


@pytest.fixture
async def store() -> AsyncIterator[CountingSessionStore]:
    """Connected in-memory session store for the test origin."""
    session_store = CountingSessionStore(":memory:", "http://test")
    await session_store.connect()
    yield session_store
    await session_store.close()


@pytest.fixture
async def app(
    store: CountingSessionStore, backend: FakeBackend
) -> AsyncIterator[TaskManagerApp]:
    """App wired to the fake backend through httpx.MockTransport."""
    application = TaskManagerApp(
        store, base_url=BASE_URL, transport=httpx.MockTransport(backend)
    )
    yield application
    await application.close()
