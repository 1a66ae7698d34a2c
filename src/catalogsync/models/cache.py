from __future__ import annotations

from datetime import datetime
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict


class CacheKey(BaseModel):
    """Deterministic identity of a cacheable query.

    Rendered as ``namespace:name=value:...`` with parameters sorted by name.
    Values are percent-encoded so a ``:`` or ``=`` inside a value cannot make
    two different queries render to the same string.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str
    params: tuple[tuple[str, str], ...] = ()

    @classmethod
    def build(cls, namespace: str, **params: object) -> CacheKey:
        return cls(
            namespace=namespace,
            params=tuple(sorted((name, str(value)) for name, value in params.items())),
        )

    def render(self) -> str:
        parts = [quote(self.namespace, safe="")]
        parts.extend(
            f"{quote(name, safe='')}={quote(value, safe='')}" for name, value in self.params
        )
        return ":".join(parts)

    def __str__(self) -> str:
        return self.render()


class CacheEntry(BaseModel):
    """Cached payload for a single key. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    key: str
    namespace: str
    payload: str  # JSON produced by the payload model's model_dump_json()
    stored_at: datetime
