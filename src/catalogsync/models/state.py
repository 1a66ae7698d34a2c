from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from catalogsync.errors import CatalogError


class LoadState(StrEnum):
    IDLE = "idle"
    LOADING_INITIAL = "loading_initial"
    LOADING_MORE = "loading_more"
    EXHAUSTED = "exhausted"


class PaginationState(BaseModel):
    """Incremental-loading state of one result list."""

    model_config = ConfigDict(validate_assignment=True)

    current_page: int = Field(default=1, ge=1)
    is_loading_more: bool = False
    has_more_pages: bool = True


class SearchState(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    raw_query: str = ""
    # Token of the most recently issued search; None when nothing is in flight
    # or the query was cleared.
    active_request_token: int | None = None


class SearchResults(BaseModel):
    """Snapshot of the visible search results, published to observers."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    query: str = ""
    items: tuple[Any, ...] = ()
    has_more_pages: bool = True
    is_loading: bool = False
    error: CatalogError | None = None
