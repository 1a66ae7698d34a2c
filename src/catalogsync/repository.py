"""Cache-first catalog repository.

Browse pages and game details are served from the cache while fresh and
written back after every successful remote fetch. Search always goes to the
remote source. The repository never retries; failures reach the caller as
``CatalogError``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from catalogsync.errors import CatalogError
from catalogsync.models.catalog import Game, GameDetail, Page

if TYPE_CHECKING:
    from catalogsync.models.cache import CacheKey
    from catalogsync.models.queries import DetailQuery, PageQuery, SearchQuery
    from catalogsync.protocols import CacheProtocol, RemoteSource

log = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


async def _call_remote(operation: str, key: CacheKey, call: Callable[[], Awaitable[M]]) -> M:
    """Await a RemoteSource call, mapping unclassified failures onto the taxonomy."""
    try:
        return await call()
    except CatalogError as exc:
        log.info("remote_fetch_failed", operation=operation, key=str(key), code=exc.code)
        raise
    except (TimeoutError, ConnectionError) as exc:
        log.info("remote_fetch_failed", operation=operation, key=str(key), code="TRANSIENT")
        raise CatalogError.transient(f"{operation} failed: {exc}") from exc
    except Exception as exc:
        log.warning("remote_fetch_failed", operation=operation, key=str(key), exc_info=True)
        raise CatalogError.unknown(f"{operation} failed: {exc}") from exc


class CatalogRepository:
    def __init__(self, remote: RemoteSource, cache: CacheProtocol) -> None:
        self._remote = remote
        self._cache = cache

    async def get_page(self, query: PageQuery) -> Page[Game]:
        """Return one browse page, from the cache when a fresh entry exists."""
        key = query.cache_key()
        cached = await self._read_cached(key, Page[Game])
        if cached is not None:
            return cached

        page = await _call_remote(
            "fetch_page",
            key,
            lambda: self._remote.fetch_page(query.page, query.page_size),
        )
        await self._cache.put(key, page)
        return page

    async def get_detail(self, query: DetailQuery) -> GameDetail:
        key = query.cache_key()
        cached = await self._read_cached(key, GameDetail)
        if cached is not None:
            return cached

        detail = await _call_remote("fetch_detail", key, lambda: self._remote.fetch_detail(query.id))
        await self._cache.put(key, detail)
        return detail

    async def search(self, query: SearchQuery) -> Page[Game]:
        """Search the remote catalog. Results are never cached."""
        key = query.cache_key()
        log.debug("search_remote", key=str(key))
        return await _call_remote(
            "fetch_search",
            key,
            lambda: self._remote.fetch_search(query.query, query.page),
        )

    async def clear_cache(self) -> int:
        return await self._cache.clear()

    async def _read_cached(self, key: CacheKey, model: type[M]) -> M | None:
        entry = await self._cache.get(key)
        if entry is None:
            log.debug("cache_miss", key=str(key))
            return None
        try:
            value = model.model_validate_json(entry.payload)
        except ValidationError:
            # Written by an older schema; refetch and overwrite.
            log.warning("cache_payload_invalid", key=str(key), exc_info=True)
            return None
        log.debug("cache_hit", key=str(key))
        return value
