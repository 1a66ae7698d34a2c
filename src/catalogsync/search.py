"""Debounced search with stale-response protection.

Every ``set_query`` restarts a debounce timer. When the timer fires, the
stripped query is searched under a fresh integer token, which becomes the
active token. A response is applied to the visible results only if its
token is still the active one. Arrival order does not matter: a slow
response to an older query is dropped even if it lands after a newer one.

Each issued query gets its own ``PaginationController``, so changing the
query is a full pagination reset and a late page from the previous query
can only touch a controller that is no longer visible.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from catalogsync.errors import CatalogError
from catalogsync.models.queries import SearchQuery
from catalogsync.models.state import SearchResults, SearchState
from catalogsync.pagination import DEFAULT_THRESHOLD, PaginationController

if TYPE_CHECKING:
    from catalogsync.models.catalog import Game, Page
    from catalogsync.repository import CatalogRepository

log = structlog.get_logger()

DEFAULT_DEBOUNCE_SECONDS = 0.3

ResultsListener = Callable[[SearchResults], None]


class SearchCoordinator:
    def __init__(
        self,
        repository: CatalogRepository,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        threshold: int = DEFAULT_THRESHOLD,
        cancel_superseded: bool = True,
    ) -> None:
        if debounce_seconds < 0:
            raise ValueError(f"debounce_seconds cannot be negative: {debounce_seconds}")
        self._repository = repository
        self._debounce_seconds = debounce_seconds
        self._threshold = threshold
        self._cancel_superseded = cancel_superseded
        self._tokens = itertools.count(1)
        self._last_issued: str | None = None
        self._debounce_task: asyncio.Task[None] | None = None
        self._search_task: asyncio.Task[None] | None = None
        self._listeners: list[ResultsListener] = []
        self._streams: set[asyncio.Queue[SearchResults | None]] = set()
        self._closed = False
        self.state = SearchState()
        self._pagination = self._new_controller("")
        self._snapshot = SearchResults()

    # ------------------------------------------------------------------
    # Observable results
    # ------------------------------------------------------------------

    @property
    def results_snapshot(self) -> SearchResults:
        return self._snapshot

    def subscribe(self, listener: ResultsListener) -> Callable[[], None]:
        """Register ``listener`` and call it with the current snapshot.

        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)
        listener(self._snapshot)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def results(self) -> AsyncIterator[SearchResults]:
        """Yield the current snapshot, then every published one until ``aclose``."""
        queue: asyncio.Queue[SearchResults | None] = asyncio.Queue()
        queue.put_nowait(self._snapshot)
        self._streams.add(queue)
        try:
            while (snapshot := await queue.get()) is not None:
                yield snapshot
        finally:
            self._streams.discard(queue)

    def _publish(self, snapshot: SearchResults) -> None:
        self._snapshot = snapshot
        for queue in self._streams:
            queue.put_nowait(snapshot)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                log.exception("search_listener_failed")

    def _snapshot_from(self, query: str, controller: PaginationController[Any]) -> SearchResults:
        return SearchResults(
            query=query,
            items=controller.items,
            has_more_pages=controller.state.has_more_pages,
        )

    # ------------------------------------------------------------------
    # Query input
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        """Record ``text`` and restart the debounce timer. Must run inside the event loop."""
        if self._closed:
            raise RuntimeError("SearchCoordinator is closed")
        self.state.raw_query = text
        if self._debounce_task is not None:
            self._debounce_task.cancel()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounce(text))

    async def _debounce(self, text: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._fire(text)

    def _fire(self, text: str) -> None:
        query = text.strip()
        if not query:
            self._reset_results()
            return
        if query == self._last_issued:
            log.debug("search_skipped_duplicate", query=query)
            return
        try:
            SearchQuery(query=query)
        except ValidationError as exc:
            log.warning("search_query_invalid", query=query[:50], error=str(exc))
            self._reset_results(query=query)
            return

        self._last_issued = query
        token = next(self._tokens)
        self.state.active_request_token = token
        if (
            self._cancel_superseded
            and self._search_task is not None
            and not self._search_task.done()
        ):
            self._search_task.cancel()

        controller = self._new_controller(query)
        self._pagination = controller
        # Previous items stay visible until the new response lands.
        self._publish(
            self._snapshot.model_copy(update={"query": query, "is_loading": True, "error": None})
        )
        self._search_task = asyncio.get_running_loop().create_task(
            self._run_search(token, query, controller)
        )

    async def _run_search(
        self, token: int, query: str, controller: PaginationController[Game]
    ) -> None:
        try:
            await controller.load_initial()
        except CatalogError as exc:
            if token != self.state.active_request_token:
                log.debug("search_response_discarded", token=token, query=query)
                return
            log.info("search_failed", query=query, code=exc.code)
            self._publish(SearchResults(query=query, error=exc))
            return

        if token != self.state.active_request_token:
            log.debug("search_response_discarded", token=token, query=query)
            return
        self._publish(self._snapshot_from(query, controller))

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @property
    def pagination(self) -> PaginationController[Game]:
        return self._pagination

    async def load_more_if_needed(self, visible_item: Game) -> bool:
        """Append the next page of the current query's results.

        Same trigger rules as ``PaginationController.load_more_if_needed``.
        A page or an error that arrives after the query changed is dropped.
        """
        token = self.state.active_request_token
        if token is None:
            return False
        controller = self._pagination
        query = self._last_issued or ""
        try:
            appended = await controller.load_more_if_needed(visible_item)
        except CatalogError:
            if self._is_current(token, controller):
                raise
            log.debug("search_response_discarded", token=token, query=query)
            return False
        if not self._is_current(token, controller):
            log.debug("search_response_discarded", token=token, query=query)
            return False
        if appended:
            self._publish(self._snapshot_from(query, controller))
        return appended

    def _is_current(self, token: int, controller: PaginationController[Game]) -> bool:
        return token == self.state.active_request_token and controller is self._pagination

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def retry(self) -> None:
        """Search the current query again now, skipping debounce and duplicate checks."""
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None
        self._last_issued = None
        self._fire(self.state.raw_query)
        await self.wait_idle()

    def clear(self) -> None:
        """Cancel pending work, invalidate the active token and empty the results."""
        self._cancel_tasks()
        self.state = SearchState()
        self._reset_results()

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or search request is pending."""
        while True:
            pending = [
                task
                for task in (self._debounce_task, self._search_task)
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        """Tear down: any late response becomes inert and result streams end."""
        tasks = [t for t in (self._debounce_task, self._search_task) if t is not None]
        self.clear()
        self._closed = True
        await asyncio.gather(*tasks, return_exceptions=True)
        for queue in self._streams:
            queue.put_nowait(None)
        self._listeners.clear()

    def _cancel_tasks(self) -> None:
        for task in (self._debounce_task, self._search_task):
            if task is not None and not task.done():
                task.cancel()
        self._debounce_task = None
        self._search_task = None

    def _reset_results(self, query: str = "") -> None:
        if self._search_task is not None and not self._search_task.done():
            self._search_task.cancel()
        self.state.active_request_token = None
        self._last_issued = None
        self._pagination = self._new_controller("")
        self._publish(SearchResults(query=query))

    def _new_controller(self, query: str) -> PaginationController[Game]:
        async def load(page: int) -> Page[Game]:
            return await self._repository.search(SearchQuery(query=query, page=page))

        return PaginationController(load, threshold=self._threshold, name=f"search:{query}")
