"""
Error taxonomy for the operation pipeline.

Every operation catches failures at its boundary and turns them into a
failure envelope. Callers only ever see the display message; the detail of
upstream failures is written to the log.
"""

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pydantic import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of operation failures"""
    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"

    @property
    def display(self) -> str:
        return _DEFAULT_DISPLAY[self]


_DEFAULT_DISPLAY = {
    ErrorKind.UNAUTHORIZED: "Unauthorized",
    ErrorKind.VALIDATION: "Invalid input",
    ErrorKind.NOT_FOUND: "Not found",
    ErrorKind.CONFLICT: "Already exists",
    ErrorKind.UPSTREAM: "Service temporarily unavailable",
}


class OperationError(Exception):
    """
    Raised inside an operation to short-circuit it with a failure envelope.

    Args:
        kind: Failure classification
        message: Message shown to the caller (ignored for UPSTREAM)
        detail: Internal detail, logged but never returned
    """

    def __init__(self, kind: ErrorKind, message: Optional[str] = None, detail: Optional[str] = None):
        self.kind = kind
        self.message = message
        self.detail = detail
        super().__init__(message or detail or kind.display)

    @property
    def display_message(self) -> str:
        if self.kind is ErrorKind.UPSTREAM or not self.message:
            return self.kind.display
        return self.message

    @classmethod
    def unauthorized(cls) -> "OperationError":
        return cls(ErrorKind.UNAUTHORIZED, "Unauthorized")

    @classmethod
    def validation(cls, message: str) -> "OperationError":
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> "OperationError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> "OperationError":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def upstream(cls, detail: str) -> "OperationError":
        return cls(ErrorKind.UPSTREAM, detail=detail)


@dataclass(frozen=True)
class DuplicateKey:
    """Returned by a store when a write violates a uniqueness constraint."""
    field: str


def describe_validation_error(exc: ValidationError) -> str:
    """Turn the first pydantic error into a short caller-facing message."""
    errors = exc.errors()
    if not errors:
        return ErrorKind.VALIDATION.display
    loc = ".".join(str(part) for part in errors[0].get("loc", ()))
    return f"Invalid value for field: {loc}" if loc else ErrorKind.VALIDATION.display


def operation_boundary(envelope_cls: Any) -> Callable:
    """
    Decorator that converts every failure of an async operation into
    ``envelope_cls.failure(message)``.

    Usage:
        @operation_boundary(EmployeeResponse)
        async def find_employee(self, caller, eid):
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except OperationError as e:
                if e.kind is ErrorKind.UPSTREAM:
                    logger.error(f"{func.__name__} failed upstream: {e.detail}")
                else:
                    logger.info(f"{func.__name__} rejected ({e.kind.value}): {e.display_message}")
                return envelope_cls.failure(e.display_message)
            except ValidationError as e:
                message = describe_validation_error(e)
                logger.info(f"{func.__name__} rejected (validation): {message}")
                return envelope_cls.failure(message)
            except Exception as e:
                logger.exception(f"{func.__name__} failed: {e}")
                return envelope_cls.failure(ErrorKind.UPSTREAM.display)

        return wrapper

    return decorator
