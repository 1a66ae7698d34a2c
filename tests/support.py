"""Test doubles and catalog data builders shared by unit and integration tests."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

from catalogsync.models.catalog import Game, GameDetail, Genre, Page, Platform

CATALOG_SIZE = 100


def make_game(game_id: int, name: str | None = None) -> Game:
    return Game(
        id=game_id,
        slug=f"game-{game_id}",
        name=name or f"Game {game_id}",
        released="2020-01-01",
        rating=4.2,
        ratings_count=10,
        playtime=12,
        platforms=(Platform(id=4, name="PC", slug="pc"),),
        genres=(Genre(id=1, name="Action", slug="action"),),
    )


def make_detail(game_id: int) -> GameDetail:
    return GameDetail(
        id=game_id,
        slug=f"game-{game_id}",
        name=f"Game {game_id}",
        description="<p>Detail</p>",
        description_raw="Detail",
        rating=4.2,
    )


def make_page(items: list[Any], *, total: int | None = None, has_next: bool = True) -> Page[Any]:
    return Page(
        total_count=len(items) if total is None else total,
        items=items,
        has_next=has_next,
        has_previous=False,
    )


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeRemote:
    """In-memory RemoteSource with call recording.

    ``hold(key)`` makes the matching call wait until the returned event is
    set. ``fail(key, exc)`` makes the next matching call raise ``exc``.
    Keys: ``("page", n)``, ``("detail", id)``, ``("search", query, n)``.
    """

    def __init__(self, catalog_size: int = CATALOG_SIZE) -> None:
        self.catalog = [make_game(i) for i in range(1, catalog_size + 1)]
        self.calls: list[tuple[Any, ...]] = []
        self._gates: dict[tuple[Any, ...], asyncio.Event] = {}
        self._failures: dict[tuple[Any, ...], BaseException] = {}

    def hold(self, key: tuple[Any, ...]) -> asyncio.Event:
        event = asyncio.Event()
        self._gates[key] = event
        return event

    def fail(self, key: tuple[Any, ...], exc: BaseException) -> None:
        self._failures[key] = exc

    def calls_to(self, operation: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == operation]

    async def _enter(self, key: tuple[Any, ...]) -> None:
        self.calls.append(key)
        gate = self._gates.get(key)
        if gate is not None:
            await gate.wait()
        exc = self._failures.pop(key, None)
        if exc is not None:
            raise exc

    async def fetch_page(self, page: int, page_size: int) -> Page[Game]:
        await self._enter(("page", page))
        start = (page - 1) * page_size
        items = self.catalog[start : start + page_size]
        return Page[Game](
            total_count=len(self.catalog),
            items=items,
            has_next=start + page_size < len(self.catalog),
            has_previous=page > 1,
        )

    async def fetch_detail(self, game_id: int) -> GameDetail:
        await self._enter(("detail", game_id))
        return make_detail(game_id)

    async def fetch_search(self, query: str, page: int) -> Page[Game]:
        await self._enter(("search", query, page))
        # Two pages of ten results per query, ids unique per (query, page).
        base = 10_000 * (sum(map(ord, query)) % 97 + 1) + 100 * page
        items = [make_game(base + i, name=f"{query} #{page}-{i}") for i in range(10)]
        return Page[Game](total_count=20, items=items, has_next=page < 2, has_previous=page > 1)


