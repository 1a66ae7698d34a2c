"""Application state: the explicitly owned cache, repository and settings.

One ``AppState`` per process. Screens ask it for their own pagination
controllers and search coordinators; those are never shared between lists.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from catalogsync.cache import Cache
from catalogsync.logging_config import configure_logging
from catalogsync.models.queries import PageQuery
from catalogsync.pagination import PaginationController
from catalogsync.repository import CatalogRepository
from catalogsync.search import SearchCoordinator

if TYPE_CHECKING:
    from catalogsync.config import Settings
    from catalogsync.models.catalog import Game, Page
    from catalogsync.protocols import RemoteSource

log = structlog.get_logger()


@dataclass
class AppState:
    settings: Settings
    cache: Cache
    repository: CatalogRepository

    def browse_controller(self) -> PaginationController[Game]:
        """New controller for the catalog browse list."""
        page_size = self.settings.pagination.page_size
        repository = self.repository

        async def load(page: int) -> Page[Game]:
            return await repository.get_page(PageQuery(page=page, page_size=page_size))

        return PaginationController(
            load,
            threshold=self.settings.pagination.prefetch_threshold,
            name="browse",
        )

    def search_coordinator(self) -> SearchCoordinator:
        return SearchCoordinator(
            self.repository,
            debounce_seconds=self.settings.search.debounce_ms / 1000,
            threshold=self.settings.pagination.prefetch_threshold,
            cancel_superseded=self.settings.search.cancel_superseded,
        )


def build_cache(db: aiosqlite.Connection, settings: Settings) -> Cache:
    return Cache(
        db,
        ttl=timedelta(seconds=settings.cache.ttl_seconds),
        max_entries=settings.cache.max_entries,
    )


@asynccontextmanager
async def open_app_state(settings: Settings, remote: RemoteSource) -> AsyncIterator[AppState]:
    """Configure logging, open the cache database and yield a wired ``AppState``.

    Missing parent directories of ``db_path`` are created. ``:memory:`` is
    accepted for tests and throwaway sessions.
    """
    configure_logging(settings.logging)

    db_path = settings.cache.db_path
    if db_path != ":memory:":
        db_path = str(Path(db_path).expanduser())
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(db_path) as db:
        cache = build_cache(db, settings)
        await cache.init_db()
        log.info("cache_opened", db_path=db_path, ttl_seconds=settings.cache.ttl_seconds)
        yield AppState(
            settings=settings,
            cache=cache,
            repository=CatalogRepository(remote, cache),
        )
