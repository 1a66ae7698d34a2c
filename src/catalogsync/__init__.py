"""Cache-first synchronization layer for a paginated remote game catalog."""

from __future__ import annotations

from catalogsync.cache import Cache
from catalogsync.config import Settings
from catalogsync.errors import CatalogError, ErrorCode
from catalogsync.pagination import PaginationController
from catalogsync.repository import CatalogRepository
from catalogsync.search import SearchCoordinator
from catalogsync.state import AppState, open_app_state

__version__ = "0.1.0"

__all__ = [
    "AppState",
    "Cache",
    "CatalogError",
    "CatalogRepository",
    "ErrorCode",
    "PaginationController",
    "SearchCoordinator",
    "Settings",
    "open_app_state",
]
