"""Interfaces the synchronization layer depends on.

``RemoteSource`` is implemented outside this package (the network client).
``CacheProtocol`` is implemented by ``catalogsync.cache.Cache``; tests and
alternative stores can provide their own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pydantic import BaseModel

    from catalogsync.models.cache import CacheEntry, CacheKey
    from catalogsync.models.catalog import Game, GameDetail, Page


class RemoteSource(Protocol):
    """Remote catalog API.

    Implementations raise ``CatalogError`` for failures they can classify.
    """

    async def fetch_page(self, page: int, page_size: int) -> Page[Game]: ...

    async def fetch_detail(self, game_id: int) -> GameDetail: ...

    async def fetch_search(self, query: str, page: int) -> Page[Game]: ...


class CacheProtocol(Protocol):
    async def get(self, key: CacheKey) -> CacheEntry | None: ...

    async def put(self, key: CacheKey, payload: BaseModel) -> None: ...

    async def clear(self, namespace: str | None = None) -> int: ...
