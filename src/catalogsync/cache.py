"""SQLite-backed page and detail cache with lazy TTL expiry.

All cache operations catch ``aiosqlite.Error`` internally and degrade
gracefully: read failures return ``None`` (treated as cache miss by callers),
write failures are logged and ignored (fetched content is still returned).
Infrastructure errors never cross the Cache class boundary.

Expired rows are evicted when a read finds them. There is no background
sweep; ``cleanup_expired`` exists for callers that want one, and
``max_entries`` bounds the table so a long session with many distinct keys
cannot grow it without limit.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import aiosqlite
import structlog
from pydantic_core import PydanticSerializationError

from catalogsync.models.cache import CacheEntry

if TYPE_CHECKING:
    from pydantic import BaseModel

    from catalogsync.models.cache import CacheKey

log = structlog.get_logger()

_CREATE_ENTRY_TABLE = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key        TEXT PRIMARY KEY,
    namespace  TEXT NOT NULL,
    payload    TEXT NOT NULL,
    stored_at  TEXT NOT NULL
)
"""

_CREATE_STORED_AT_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_cache_stored_at ON cache_entries(stored_at)"
)

DEFAULT_TTL = timedelta(hours=1)
DEFAULT_MAX_ENTRIES = 500


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Cache:
    """SQLite-backed cache implementing CacheProtocol."""

    def __init__(
        self,
        db: aiosqlite.Connection,
        ttl: timedelta = DEFAULT_TTL,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if ttl < timedelta(0):
            raise ValueError(f"ttl cannot be negative: {ttl}")
        self._db = db
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_ENTRY_TABLE)
        await self._db.execute(_CREATE_STORED_AT_INDEX)
        await self._db.commit()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, key: CacheKey) -> CacheEntry | None:
        """Read a fresh entry. Returns ``None`` on miss, expiry or read failure.

        An expired row is deleted before returning.
        """
        rendered = key.render()
        async with self._lock:
            try:
                cursor = await self._db.execute(
                    "SELECT key, namespace, payload, stored_at FROM cache_entries WHERE key = ?",
                    (rendered,),
                )
                row = await cursor.fetchone()
                if row is None:
                    return None

                stored_at = datetime.fromisoformat(row[3])
                if self._clock() - stored_at > self._ttl:
                    await self._db.execute("DELETE FROM cache_entries WHERE key = ?", (rendered,))
                    await self._db.commit()
                    log.debug("cache_entry_expired", key=rendered)
                    return None

                return CacheEntry(
                    key=row[0],
                    namespace=row[1],
                    payload=row[2],
                    stored_at=stored_at,
                )
            except (aiosqlite.Error, ValueError, TypeError):
                # ValueError/TypeError: unparsable or naive stored_at, read as a miss
                log.warning("cache_read_error", key=rendered, exc_info=True)
                return None

    async def count(self) -> int:
        """Number of stored rows, expired ones included. Returns 0 on failure."""
        async with self._lock:
            try:
                cursor = await self._db.execute("SELECT COUNT(*) FROM cache_entries")
                row = await cursor.fetchone()
                return int(row[0]) if row else 0
            except aiosqlite.Error:
                log.warning("cache_read_error", key="*", exc_info=True)
                return 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def put(self, key: CacheKey, payload: BaseModel) -> None:
        """Store ``payload`` under ``key``, replacing any prior entry. Non-fatal on failure."""
        rendered = key.render()
        async with self._lock:
            try:
                content = payload.model_dump_json()
                await self._db.execute(
                    "INSERT OR REPLACE INTO cache_entries "
                    "(key, namespace, payload, stored_at) VALUES (?, ?, ?, ?)",
                    (rendered, key.namespace, content, self._clock().isoformat()),
                )
                if self._max_entries > 0:
                    await self._evict_overflow()
                await self._db.commit()
            except (aiosqlite.Error, PydanticSerializationError):
                log.warning("cache_write_error", key=rendered, exc_info=True)

    async def _evict_overflow(self) -> None:
        # Newest rows win; rowid breaks ties between identical timestamps.
        cursor = await self._db.execute(
            "DELETE FROM cache_entries WHERE key NOT IN ("
            "SELECT key FROM cache_entries ORDER BY stored_at DESC, rowid DESC LIMIT ?"
            ")",
            (self._max_entries,),
        )
        if cursor.rowcount:
            log.debug("cache_evicted_overflow", evicted=cursor.rowcount)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear(self, namespace: str | None = None) -> int:
        """Delete every entry, or only those of ``namespace``. Non-fatal on failure.

        Returns the number of deleted rows.
        """
        async with self._lock:
            try:
                if namespace is None:
                    cursor = await self._db.execute("DELETE FROM cache_entries")
                else:
                    cursor = await self._db.execute(
                        "DELETE FROM cache_entries WHERE namespace = ?", (namespace,)
                    )
                deleted = cursor.rowcount
                await self._db.commit()
                log.info("cache_cleared", namespace=namespace or "*", deleted=deleted)
                return deleted
            except aiosqlite.Error:
                log.warning("cache_clear_error", namespace=namespace or "*", exc_info=True)
                return 0

    async def cleanup_expired(self) -> int:
        """Delete all entries older than the TTL. Non-fatal on failure.

        Returns the number of deleted rows.
        """
        async with self._lock:
            try:
                cutoff = (self._clock() - self._ttl).isoformat()
                cursor = await self._db.execute(
                    "DELETE FROM cache_entries WHERE stored_at < ?", (cutoff,)
                )
                deleted = cursor.rowcount
                await self._db.commit()
                log.info("cache_cleanup_complete", deleted=deleted)
                return deleted
            except aiosqlite.Error:
                log.warning("cache_cleanup_error", exc_info=True)
                return 0
