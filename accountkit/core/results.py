"""Closed result types returned by every public service operation.

An operation returns either ``Ok(value)`` or a ``Failure``. Failures are
values, not exceptions: callers branch on them and the API layer maps
``Failure.kind`` to an HTTP status.

Failure kinds:
- VALIDATION: input violates field-level format rules
- BUSINESS: a domain rule blocks the operation (duplicate email, bad login)
- NOT_FOUND: the identified token or account does not exist
- CONFLICT: the identified state exists but cannot be acted on
- SYSTEM: a collaborator (storage, email) failed; no field detail
"""

import functools
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")
R = TypeVar("R")


class ErrorKind(str, Enum):
    """Category of a failed operation."""

    VALIDATION = "validation"
    BUSINESS = "business"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SYSTEM = "system"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying the operation's value."""

    value: T


@dataclass(frozen=True)
class Failure:
    """Failed outcome.

    Attributes:
        kind: Failure category.
        fields: Field name -> human-readable reasons, in insertion order.
            Always empty for SYSTEM failures.
    """

    kind: ErrorKind
    fields: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def of(cls, kind: ErrorKind, field_name: str, reason: str) -> "Failure":
        """Build a failure with a single field reason."""
        return cls(kind, {field_name: (reason,)})

    @classmethod
    def business(cls, field_name: str, reason: str) -> "Failure":
        return cls.of(ErrorKind.BUSINESS, field_name, reason)

    @classmethod
    def not_found(cls, field_name: str, reason: str) -> "Failure":
        return cls.of(ErrorKind.NOT_FOUND, field_name, reason)

    @classmethod
    def conflict(cls, field_name: str, reason: str) -> "Failure":
        return cls.of(ErrorKind.CONFLICT, field_name, reason)

    @classmethod
    def system(cls) -> "Failure":
        return cls(ErrorKind.SYSTEM)


class FieldErrors:
    """Accumulates (field, reason) pairs, grouping reasons by field.

    Usage:
        errors = FieldErrors()
        errors.add("email", "is too long")
        if errors:
            return errors.to_failure(ErrorKind.VALIDATION)
    """

    def __init__(self) -> None:
        self._reasons: dict[str, list[str]] = {}

    def add(self, field_name: str, reason: str) -> "FieldErrors":
        self._reasons.setdefault(field_name, []).append(reason)
        return self

    def __bool__(self) -> bool:
        return bool(self._reasons)

    def as_dict(self) -> dict[str, tuple[str, ...]]:
        return {name: tuple(reasons) for name, reasons in self._reasons.items()}

    def to_failure(self, kind: ErrorKind = ErrorKind.VALIDATION) -> Failure:
        return Failure(kind, self.as_dict())


def guard_storage(
    operation: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R | Failure]]:
    """Turn storage exceptions escaping a service operation into SYSTEM failures.

    The exception is logged with its traceback; the caller only sees an
    opaque Failure.system().
    """

    @functools.wraps(operation)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R | Failure:
        try:
            return await operation(*args, **kwargs)
        except SQLAlchemyError:
            logger.exception("Storage failure in %s", operation.__qualname__)
            return Failure.system()

    return wrapper
