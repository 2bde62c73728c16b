"""Custom exception classes and FastAPI exception handler registration.

Provides the domain exception hierarchy used across the application and
the function that wires the handlers into the FastAPI app.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class AppException(Exception):
    """Application base exception.

    Attributes:
        status_code: HTTP status code.
        detail: Human-readable error message.
        code: Optional machine-readable error code.
    """

    def __init__(
        self,
        status_code: int = 500,
        detail: str = "Internal server error",
        code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.code = code
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Authentication / authorization
# ---------------------------------------------------------------------------

class AuthenticationError(AppException):
    """Authentication error (401 Unauthorized)."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status_code=401, detail=detail)


class AuthorizationError(AppException):
    """Authorization error (403 Forbidden)."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status_code=403, detail=detail)


# ---------------------------------------------------------------------------
# Resources / input
# ---------------------------------------------------------------------------

class NotFoundError(AppException):
    """Resource not found (404 Not Found)."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=404, detail=detail)


class ValidationError(AppException):
    """Input rejected by a business rule (400 Bad Request)."""

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=400, detail=detail)


# ---------------------------------------------------------------------------
# External AI service
# ---------------------------------------------------------------------------

class ExternalAPIError(AppException):
    """External API error (502 Bad Gateway)."""

    def __init__(
        self,
        detail: str = "External API error",
        status_code: int = 502,
        code: str | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, code=code)


class AIServiceNotConfiguredError(ExternalAPIError):
    """The text-completion service has no credentials on this deployment."""

    def __init__(
        self,
        detail: str = "GEMINI_API_KEY is missing on the backend.",
    ) -> None:
        super().__init__(detail=detail, status_code=503, code="AI_NOT_CONFIGURED")


class AIServiceUnavailableError(ExternalAPIError):
    """The text-completion service call failed."""

    def __init__(self, detail: str = "AI service unavailable") -> None:
        super().__init__(detail=detail, code="AI_UNAVAILABLE")


class AIRateLimitError(ExternalAPIError):
    """The text-completion service rejected the call for quota reasons."""

    def __init__(self, detail: str = "AI service rate limit exceeded") -> None:
        super().__init__(detail=detail, status_code=503, code="AI_RATE_LIMITED")


class AIResponseParseError(ExternalAPIError):
    """The text-completion service answered with something that is not JSON."""

    def __init__(self, detail: str = "AI response is not valid JSON") -> None:
        super().__init__(detail=detail, code="AI_BAD_RESPONSE")


# ---------------------------------------------------------------------------
# FastAPI exception handler registration
# ---------------------------------------------------------------------------

def _first_validation_message(exc: RequestValidationError) -> str:
    """Return ``"<field>: <message>"`` for the first validation error."""
    errors = exc.errors()
    if not errors:
        return "Bad request"
    first = errors[0]
    loc = [
        str(part)
        for part in first.get("loc", ())
        if part not in ("body", "query", "path")
    ]
    message = str(first.get("msg", "Invalid value"))
    return f"{'.'.join(loc)}: {message}" if loc else message


def register_exception_handlers(app: FastAPI) -> None:
    """Register the custom exception handlers on the FastAPI app.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> JSONResponse:
        """Render AppException subclasses as JSON."""
        content: dict[str, str] = {"detail": exc.detail}
        if exc.code is not None:
            content["code"] = exc.code
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Render malformed input as 400 with the first error message."""
        return JSONResponse(
            status_code=400,
            content={"detail": _first_validation_message(exc)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """Surface store failures with the underlying message."""
        message = str(getattr(exc, "orig", None) or exc)
        logger.error("Store failure on %s: %s", request.url.path, message)
        return JSONResponse(status_code=500, content={"detail": message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch unhandled exceptions and return a 500 response."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
