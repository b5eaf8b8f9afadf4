"""Explicit success/failure values for fallible engine operations.

Services return ``Result`` instead of raising so error paths stay visible
to callers. Branch on ``result.ok``::

    result = service.create(payload)
    if not result.ok:
        return render_error(result.error)
    relationship = result.data
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Error kinds produced by the engine."""

    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def http_status(self) -> int:
        """HTTP status the API layer should answer with."""
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class AppError:
    """Structured application error. ``details`` carries field-level context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            data["details"] = self.details
        return data


class ResultError(Exception):
    """Raised by ``Result.unwrap`` on a failed result."""

    def __init__(self, error: AppError) -> None:
        super().__init__(f"{error.code.value}: {error.message}")
        self.error = error


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success (``ok=True``, ``data``) or failure (``ok=False``, ``error``)."""

    ok: bool
    data: T | None = None
    error: AppError | None = field(default=None)

    def unwrap(self) -> T:
        if not self.ok:
            raise ResultError(self.error)  # type: ignore[arg-type]
        return self.data  # type: ignore[return-value]


def ok(data: T) -> Result[T]:
    """Create a successful Result."""
    return Result(ok=True, data=data)


def err(code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> Result[Any]:
    """Create a failed Result."""
    return Result(ok=False, error=AppError(code=code, message=message, details=details))
