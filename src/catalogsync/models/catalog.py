from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Platform(_Frozen):
    id: int
    name: str
    slug: str


class Genre(_Frozen):
    id: int
    name: str
    slug: str


class Developer(_Frozen):
    id: int
    name: str
    slug: str


class Publisher(_Frozen):
    id: int
    name: str
    slug: str


class Game(_Frozen):
    """Single catalog item as shown in list and search results."""

    id: int
    slug: str
    name: str
    released: str | None = None  # ISO date as sent by the catalog, e.g. "2013-09-17"
    background_image: str | None = None
    rating: float = 0.0
    ratings_count: int = 0
    metacritic: int | None = None
    playtime: int = 0
    platforms: tuple[Platform, ...] = ()
    genres: tuple[Genre, ...] = ()


class GameDetail(_Frozen):
    """Full record for the detail screen."""

    id: int
    slug: str
    name: str
    name_original: str | None = None
    description: str | None = None  # HTML
    description_raw: str | None = None
    released: str | None = None
    background_image: str | None = None
    background_image_additional: str | None = None
    website: str | None = None
    rating: float = 0.0
    ratings_count: int = 0
    metacritic: int | None = None
    playtime: int = 0
    platforms: tuple[Platform, ...] = ()
    genres: tuple[Genre, ...] = ()
    developers: tuple[Developer, ...] = ()
    publishers: tuple[Publisher, ...] = ()


T = TypeVar("T")


class Page(_Frozen, Generic[T]):
    """One page of a paginated listing.

    ``has_next`` False means no further page exists for the query that
    produced this page.
    """

    total_count: int = Field(ge=0)
    items: tuple[T, ...] = ()
    has_next: bool = False
    has_previous: bool = False
