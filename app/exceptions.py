# =============================================================================
# app/exceptions.py - Custom Exceptions & Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every client-visible error body is produced here, in one shape:
#   {"detail": ..., "code": ..., "suggestion"?: ..., "details"?: ...}
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class FinPlatformException(Exception):
    """
    Base exception for the FinPlatform API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "FINPLATFORM_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class BadRequestException(FinPlatformException):
    """Raised for malformed or unacceptable requests."""

    def __init__(self, message: str = "Bad request", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="BAD_REQUEST",
            status_code=400,
            details=details,
        )


class NotFoundException(FinPlatformException):
    """Raised when a requested resource doesn't exist (or isn't owned by the caller)."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            code=f"{resource.upper()}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource.lower()} id is correct",
            details={"id": resource_id},
        )


class RequestTimeoutError(FinPlatformException):
    """Raised when a request exceeds REQUEST_TIMEOUT_SECONDS."""

    def __init__(self, timeout: float):
        super().__init__(
            message=f"Request did not complete within {timeout:g}s",
            code="REQUEST_TIMEOUT",
            status_code=504,
            suggestion="Retry the request or narrow its date range",
            details={"timeout_seconds": timeout},
        )


# =============================================================================
# Security Exceptions
# =============================================================================

class UnauthorizedException(FinPlatformException):
    """Raised by the bearer-token gate when a request can't be authenticated."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Log in again via POST /auth/login and send 'Authorization: Bearer <token>'",
            headers={"WWW-Authenticate": "Bearer"},
        )


class CorsOriginDeniedError(FinPlatformException):
    """Raised when a browser request comes from an origin outside the allowlist."""

    def __init__(self, origin: str):
        super().__init__(
            message="Not allowed by CORS",
            code="CORS_ORIGIN_DENIED",
            status_code=403,
            suggestion="Add the origin to FRONTEND_ORIGIN (comma-separated)",
            details={"origin": origin},
        )


# =============================================================================
# Infrastructure Exceptions
# =============================================================================

class DatabaseConnectionError(FinPlatformException):
    """Raised at startup when the datastore can't be reached."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to connect to database: {error}",
            code="DATABASE_CONNECTION_FAILED",
            status_code=503,
            suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file",
            details={"error": error},
        )


class DatabaseQueryError(FinPlatformException):
    """Raised when a datastore query fails while serving a request."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Database operation failed: {operation}",
            code="DATABASE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"operation": operation, "error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def finplatform_exception_handler(
    request: Request,
    exc: FinPlatformException
) -> JSONResponse:
    """
    Convert FinPlatformException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        }
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Framework-raised HTTP errors (404 route not found, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "code": "HTTP_ERROR",
        },
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log with traceback, never leak internals."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


class UnhandledExceptionMiddleware:
    """
    Turn unexpected exceptions into the INTERNAL_ERROR response.

    Starlette serves the Exception handler from its outermost middleware, so
    those 500s would skip every user middleware. Installed inside the CORS
    middleware, this keeps Vary and Access-Control-Allow-Origin on 500s.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except Exception as exc:
            if response_started:
                raise
            response = await unhandled_exception_handler(Request(scope), exc)
            await response(scope, receive, send)
