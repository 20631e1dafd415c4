"""Shared dependencies for API endpoints.

Services are built once and stored on app.state; routers get them through
ServicesDep. Bearer authentication verifies the access token with the codec
only and never consults storage.
"""

from typing import Annotated, NoReturn, TypeVar

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accountkit.core.errors import (
    APIError,
    BusinessRuleError,
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from accountkit.core.results import ErrorKind, Failure, Ok
from accountkit.services.registry import Services

T = TypeVar("T")

# auto_error=False so a missing header goes through UnauthorizedError and the
# standard error envelope instead of FastAPI's default 403.
_bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    """Services bundle created at application startup."""
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


async def get_current_account_id(
    services: ServicesDep,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)
    ],
) -> str:
    """Account id from a verified bearer access token.

    Security: every rejection (missing header, bad signature, expired) is the
    same generic 401.

    Raises:
        UnauthorizedError: If no valid access token was provided.
    """
    if credentials is None:
        raise UnauthorizedError()

    verified = services.codec.verify(credentials.credentials)
    if not isinstance(verified, Ok):
        raise UnauthorizedError()
    return verified.value.account_id


CurrentAccountId = Annotated[str, Depends(get_current_account_id)]


def failure_details(failure: Failure) -> list[dict]:
    """Render failure fields as the envelope's details list."""
    return [
        {"field": name, "reasons": list(reasons)}
        for name, reasons in failure.fields.items()
    ]


def failure_to_error(failure: Failure) -> APIError:
    """Map a service failure to the HTTP error that represents it.

    SYSTEM failures carry no details; the cause was already logged.
    """
    details = failure_details(failure)
    match failure.kind:
        case ErrorKind.VALIDATION:
            return ValidationError(details=details)
        case ErrorKind.BUSINESS:
            return BusinessRuleError(details=details)
        case ErrorKind.NOT_FOUND:
            return NotFoundError(details=details)
        case ErrorKind.CONFLICT:
            return ConflictError(details=details)
        case _:
            return InternalError()


def raise_failure(failure: Failure) -> NoReturn:
    raise failure_to_error(failure)


def unwrap(result: Ok[T] | Failure) -> T:
    """Return the value of a successful result or raise its APIError."""
    if isinstance(result, Failure):
        raise_failure(result)
    return result.value
