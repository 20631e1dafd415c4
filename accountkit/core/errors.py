"""API error classes.

HTTP-facing errors raised by the API layer after a service returns a
Failure. Services never raise these; they return closed result values
(see accountkit.core.results) and the routers translate.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of field-level details, each shaped as
            {"field": name, "reasons": [...]}.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400)."""

    def __init__(
        self,
        message: str = "Request validation failed",
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class BusinessRuleError(APIError):
    """A domain rule blocked the request (400).

    Duplicate email, wrong credentials. Never a system fault.
    """

    def __init__(
        self,
        message: str = "Request rejected",
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="BUSINESS_RULE_VIOLATION",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Use when no valid access token was provided.
    """

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class NotFoundError(APIError):
    """Identified state does not exist (404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
            details=details,
        )


class ConflictError(APIError):
    """Identified state exists but cannot be acted on (409)."""

    def __init__(
        self,
        message: str = "Conflicting state",
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="CONFLICT",
            message=message,
            status_code=409,
            details=details,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for collaborator failures. Never expose internals to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )
