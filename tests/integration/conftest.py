"""Integration test fixtures.

Provides a fully wired AppState over in-memory SQLite and the in-memory
FakeRemote from tests/support.py.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import pytest

from catalogsync.config import Settings
from catalogsync.state import AppState, open_app_state

if TYPE_CHECKING:
    from tests.support import FakeRemote


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        cache={"db_path": ":memory:"},
        search={"debounce_ms": 10},
    )  # type: ignore[arg-type]


@pytest.fixture()
async def app_state(settings: Settings, remote: FakeRemote) -> AsyncIterator[AppState]:
    async with open_app_state(settings, remote) as state:
        yield state
