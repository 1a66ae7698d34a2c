from __future__ import annotations

from catalogsync.models.cache import CacheEntry, CacheKey
from catalogsync.models.catalog import (
    Developer,
    Game,
    GameDetail,
    Genre,
    Page,
    Platform,
    Publisher,
)
from catalogsync.models.queries import (
    DETAIL_NAMESPACE,
    GAMES_NAMESPACE,
    DetailQuery,
    PageQuery,
    SearchQuery,
)
from catalogsync.models.state import LoadState, PaginationState, SearchResults, SearchState

__all__ = [
    # cache
    "CacheKey",
    "CacheEntry",
    # catalog
    "Game",
    "GameDetail",
    "Platform",
    "Genre",
    "Developer",
    "Publisher",
    "Page",
    # queries
    "PageQuery",
    "DetailQuery",
    "SearchQuery",
    "GAMES_NAMESPACE",
    "DETAIL_NAMESPACE",
    # state
    "LoadState",
    "PaginationState",
    "SearchState",
    "SearchResults",
]
