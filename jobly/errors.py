"""
Error kinds surfaced by the resource models.

Every failure a model raises on purpose is an ApiError tagged with an
ErrorKind; the outer layer maps the kind to an HTTP status.
"""

from enum import Enum
from typing import Any, Dict


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNKNOWN = "unknown"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.UNKNOWN: 500,
}


class ApiError(Exception):
    """Raised by model operations for bad input, missing rows, or duplicates."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @classmethod
    def validation(cls, message: str) -> "ApiError":
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> "ApiError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> "ApiError":
        return cls(ErrorKind.CONFLICT, message)

    def __repr__(self) -> str:
        return f"ApiError({self.kind.name}, {self.message!r})"


def http_status(exc: BaseException) -> int:
    """Status code for any exception; unknown failures are 500."""
    if isinstance(exc, ApiError):
        return exc.status_code
    return ErrorKind.UNKNOWN.status_code


def to_payload(exc: BaseException) -> Dict[str, Any]:
    """
    Render an exception as the JSON error body.

    Messages of unknown failures are not exposed.
    """
    status = http_status(exc)
    message = exc.message if isinstance(exc, ApiError) else "Internal Server Error"
    return {"error": {"message": message, "status": status}}
