"""Error handling middleware for mapping exceptions to HTTP responses."""

from datetime import UTC, datetime
from typing import Any, Callable
from uuid import UUID

import structlog
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from policyhub.api.schemas.errors import APIError, ErrorCode
from policyhub.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ContextNotSetError,
    InputValidationError,
    InvalidTokenError,
    OrganizationNotFoundError,
    RegistrationConflictError,
    SessionExchangeError,
    SessionUserNotFoundError,
    TokenExpiredError,
)

logger = structlog.get_logger()


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    request_id = get_request_id(request)
    error = APIError(
        error_code=error_code,
        message=message,
        details=details,
        request_id=request_id,
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


def get_request_id(request: Request) -> str:
    """Extract request ID from state or return a placeholder."""
    if hasattr(request.state, "request_id"):
        rid = request.state.request_id
        return str(rid) if isinstance(rid, UUID) else rid
    return "unknown"


def _validation_details(errors: list[dict[str, Any]]) -> dict[str, Any]:
    """Reduce pydantic error dicts to JSON-safe field/message pairs."""
    return {
        "errors": [
            {
                "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                "message": error.get("msg", "Invalid value"),
            }
            for error in errors
        ]
    }


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI request validation failures as 400 APIError responses."""
    return _error_response(
        request,
        400,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        _validation_details(list(exc.errors())),
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Maps domain exceptions to appropriate HTTP status codes and formats
    all errors using the APIError schema. Unexpected exceptions become a
    generic 500; their cause is only logged.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exception to JSON error response."""
        status_code, error_code, message, details = self._map_exception(exc)

        if status_code >= 500:
            logger.exception(
                "unhandled_exception",
                error_type=type(exc).__name__,
                path=request.url.path,
            )

        return _error_response(request, status_code, error_code, message, details)

    def _map_exception(
        self, exc: Exception
    ) -> tuple[int, str, str, dict | None]:
        """Map exception to (status_code, error_code, message, details)."""
        # Authentication & authorization
        if isinstance(exc, AuthenticationError):
            return (401, ErrorCode.UNAUTHORIZED.value, str(exc), None)

        if isinstance(exc, AuthorizationError):
            return (
                403,
                ErrorCode.FORBIDDEN.value,
                str(exc),
                {"required_role": exc.required_role},
            )

        # Input errors
        if isinstance(exc, InputValidationError):
            return (
                400,
                ErrorCode.VALIDATION_ERROR.value,
                str(exc),
                {"field": exc.field} if exc.field else None,
            )

        if isinstance(exc, RegistrationConflictError):
            return (400, ErrorCode.CONFLICT.value, str(exc), {"conflict": exc.conflict})

        if isinstance(exc, OrganizationNotFoundError):
            return (404, ErrorCode.NOT_FOUND.value, str(exc), None)

        # Session exchange
        if isinstance(exc, TokenExpiredError):
            return (400, ErrorCode.TOKEN_EXPIRED.value, str(exc), None)

        if isinstance(exc, SessionUserNotFoundError):
            return (400, ErrorCode.USER_NOT_FOUND.value, str(exc), None)

        if isinstance(exc, (InvalidTokenError, SessionExchangeError)):
            return (400, ErrorCode.INVALID_TOKEN.value, str(exc), None)

        # Validation errors (Pydantic)
        if isinstance(exc, RequestValidationError):
            return (
                400,
                ErrorCode.VALIDATION_ERROR.value,
                "Request validation failed",
                _validation_details(list(exc.errors())),
            )

        if isinstance(exc, ValidationError):
            return (
                400,
                ErrorCode.VALIDATION_ERROR.value,
                "Request validation failed",
                _validation_details(exc.errors()),
            )

        # Context errors (internal)
        if isinstance(exc, ContextNotSetError):
            return (
                500,
                ErrorCode.INTERNAL_ERROR.value,
                "Internal server error: context not initialized",
                None,
            )

        # Generic exceptions
        return (500, ErrorCode.INTERNAL_ERROR.value, "Internal server error", None)
