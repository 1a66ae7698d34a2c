"""Unit-specific fixtures (no I/O beyond in-memory SQLite)."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import aiosqlite
import pytest

from catalogsync.cache import Cache
from catalogsync.repository import CatalogRepository

if TYPE_CHECKING:
    from tests.support import FakeClock, FakeRemote

TTL = timedelta(hours=1)


@pytest.fixture()
async def cache(clock: FakeClock):
    """In-memory SQLite cache for unit tests, driven by the fake clock."""
    async with aiosqlite.connect(":memory:") as db:
        c = Cache(db, ttl=TTL, clock=clock)
        await c.init_db()
        yield c


@pytest.fixture()
def repository(remote: FakeRemote, cache: Cache) -> CatalogRepository:
    return CatalogRepository(remote, cache)
