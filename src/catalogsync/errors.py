"""Error taxonomy shared by the repository and the controllers.

Every remote failure reaches callers as a ``CatalogError`` carrying one of
four codes. Cache failures never do: they are absorbed inside ``Cache``.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    TRANSIENT = "TRANSIENT"
    UNAUTHORIZED = "UNAUTHORIZED"
    UNKNOWN = "UNKNOWN"


class CatalogError(Exception):
    """Failure surfaced by the synchronization layer.

    ``recoverable`` tells the caller whether re-issuing the same request may
    succeed. Only transient failures are recoverable unless stated otherwise.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        recoverable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = code is ErrorCode.TRANSIENT if recoverable is None else recoverable

    def __repr__(self) -> str:
        return f"CatalogError(code={self.code.value!r}, message={self.message!r})"

    @classmethod
    def not_found(cls, message: str) -> CatalogError:
        return cls(ErrorCode.NOT_FOUND, message)

    @classmethod
    def transient(cls, message: str) -> CatalogError:
        return cls(ErrorCode.TRANSIENT, message)

    @classmethod
    def unauthorized(cls, message: str) -> CatalogError:
        return cls(ErrorCode.UNAUTHORIZED, message)

    @classmethod
    def unknown(cls, message: str) -> CatalogError:
        return cls(ErrorCode.UNKNOWN, message)
