"""Infinite-scroll state machine for a single result list.

The controller owns the loaded items and a ``PaginationState``. It loads
page 1 on ``load_initial``/``refresh`` and appends the next page when the
caller reports that an item near the end of the list became visible.

Only one load runs at a time. The busy state is set before the first
``await``, so back-to-back triggers from the same event loop cannot both
reach the loader. ``reset`` and ``refresh`` bump an internal generation
counter; a load that completes after either belongs to a discarded list and
is dropped.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Hashable
from typing import Any, Generic, TypeVar

import structlog

from catalogsync.errors import CatalogError
from catalogsync.models.catalog import Page
from catalogsync.models.state import LoadState, PaginationState

log = structlog.get_logger()

T = TypeVar("T")

PageLoader = Callable[[int], Awaitable[Page[T]]]

DEFAULT_THRESHOLD = 3


def _item_id(item: Any) -> Hashable:
    return getattr(item, "id", item)


class PaginationController(Generic[T]):
    def __init__(
        self,
        loader: PageLoader[T],
        threshold: int = DEFAULT_THRESHOLD,
        identity: Callable[[T], Hashable] = _item_id,
        name: str = "list",
    ) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1: {threshold}")
        self._loader = loader
        self._threshold = threshold
        self._identity = identity
        self._name = name
        self._items: list[T] = []
        self._generation = 0
        self.state = PaginationState()
        self.load_state = LoadState.IDLE
        self.last_error: CatalogError | None = None

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    @property
    def is_loading(self) -> bool:
        return self.load_state in (LoadState.LOADING_INITIAL, LoadState.LOADING_MORE)

    def reset(self) -> None:
        """Forget every loaded page and return to ``IDLE`` at page 1."""
        self._generation += 1
        self._items = []
        self.state = PaginationState()
        self.load_state = LoadState.IDLE
        self.last_error = None

    async def refresh(self) -> bool:
        """Reload from page 1, replacing the list once page 1 arrives.

        Loaded items stay visible until then. If page 1 fails they are kept
        along with the page counter that matches them, and the error is
        re-raised.
        """
        self._generation += 1
        generation = self._generation
        previous = self.state
        self.state = PaginationState()
        self.load_state = LoadState.IDLE
        self.last_error = None
        try:
            return await self.load_initial()
        except CatalogError:
            if generation == self._generation:
                previous.is_loading_more = False
                self.state = previous
                self._settle()
            raise

    async def load_initial(self) -> bool:
        """Load page 1, replacing the current items.

        Returns False when the call was ignored. On failure the error is kept
        in ``last_error``, the items stay as they were, and it is re-raised.
        """
        if self.is_loading:
            log.debug("load_initial_ignored", list=self._name, reason="busy")
            return False
        if self.state.current_page != 1:
            log.debug("load_initial_ignored", list=self._name, reason="not_reset")
            return False

        generation = self._generation
        self.load_state = LoadState.LOADING_INITIAL
        self.last_error = None
        try:
            page = await self._loader(1)
        except CatalogError as exc:
            if generation == self._generation:
                self.last_error = exc
            log.info("load_initial_failed", list=self._name, code=exc.code)
            raise
        else:
            if generation != self._generation:
                log.debug("stale_page_discarded", list=self._name, page=1)
                return False
            self._items = list(page.items)
            self.state.current_page = 1
            self.state.has_more_pages = page.has_next
            return True
        finally:
            if generation == self._generation:
                self._settle()

    async def load_more_if_needed(self, visible_item: T) -> bool:
        """Append the next page if ``visible_item`` is close to the end of the list.

        Returns True when a page was appended. Triggers arriving while a load
        runs are ignored, not queued. On failure nothing is appended, the
        page counter does not advance, and the error is re-raised; a later
        trigger retries the same page.
        """
        if self.load_state is not LoadState.IDLE or not self.state.has_more_pages:
            return False
        if not self._is_near_end(visible_item):
            return False

        generation = self._generation
        next_page = self.state.current_page + 1
        self.load_state = LoadState.LOADING_MORE
        self.state.is_loading_more = True
        self.last_error = None
        try:
            page = await self._loader(next_page)
        except CatalogError as exc:
            if generation == self._generation:
                self.last_error = exc
            log.info("load_more_failed", list=self._name, page=next_page, code=exc.code)
            raise
        else:
            if generation != self._generation:
                log.debug("stale_page_discarded", list=self._name, page=next_page)
                return False
            self._items.extend(page.items)
            self.state.current_page = next_page
            self.state.has_more_pages = page.has_next
            log.debug(
                "page_appended", list=self._name, page=next_page, total=len(self._items)
            )
            return True
        finally:
            if generation == self._generation:
                self._settle()

    def _is_near_end(self, visible_item: T) -> bool:
        target = self._identity(visible_item)
        for index, item in enumerate(self._items):
            if self._identity(item) == target:
                return index >= len(self._items) - self._threshold
        return False

    def _settle(self) -> None:
        self.state.is_loading_more = False
        self.load_state = LoadState.IDLE if self.state.has_more_pages else LoadState.EXHAUSTED
