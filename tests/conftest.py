"""Shared fixtures: a scriptable RemoteSource and a fake clock."""

from __future__ import annotations

import pytest
import structlog

from tests.support import FakeClock, FakeRemote


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any configure_logging() call so a test never writes to another test's stderr."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
