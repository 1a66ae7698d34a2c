from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from catalogsync.models.cache import CacheKey

GAMES_NAMESPACE = "games"
DETAIL_NAMESPACE = "game_detail"
SEARCH_NAMESPACE = "search"

MAX_PAGE_SIZE = 40
MAX_QUERY_LENGTH = 200


class PageQuery(BaseModel):
    """Browse request for one page of the catalog."""

    model_config = ConfigDict(frozen=True)

    page: int = 1
    page_size: int = 20

    @field_validator("page")
    @classmethod
    def validate_page(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page must be >= 1")
        return v

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if not 1 <= v <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        return v

    def cache_key(self) -> CacheKey:
        return CacheKey.build(GAMES_NAMESPACE, page=self.page, page_size=self.page_size)


class DetailQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Invalid game id: {v!r}")
        return v

    def cache_key(self) -> CacheKey:
        return CacheKey.build(DETAIL_NAMESPACE, id=self.id)


class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    page: int = 1

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        if len(v) > MAX_QUERY_LENGTH:
            raise ValueError(f"query must not exceed {MAX_QUERY_LENGTH} characters")
        return v

    @field_validator("page")
    @classmethod
    def validate_page(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page must be >= 1")
        return v

    def cache_key(self) -> CacheKey:
        # Used for log context only, search results are never cached.
        return CacheKey.build(SEARCH_NAMESPACE, query=self.query, page=self.page)
