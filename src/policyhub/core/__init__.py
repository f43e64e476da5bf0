"""Core services: request context, logging, security helpers and exceptions."""

from policyhub.core.context import (
    RequestContext,
    create_context,
    get_current_context,
    get_current_context_or_none,
    request_context,
)
from policyhub.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ContextNotSetError,
    DriveError,
    DriveUnavailableError,
    DriveUpstreamError,
    InputValidationError,
    InvalidCredentialsError,
    InvalidTokenError,
    OrganizationNotFoundError,
    RegistrationConflictError,
    SessionExchangeError,
    SessionUserNotFoundError,
    TokenExpiredError,
)

__all__ = [
    # Context
    "RequestContext",
    "create_context",
    "get_current_context",
    "get_current_context_or_none",
    "request_context",
    # Exceptions
    "AuthenticationError",
    "AuthorizationError",
    "ContextNotSetError",
    "DriveError",
    "DriveUnavailableError",
    "DriveUpstreamError",
    "InputValidationError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "OrganizationNotFoundError",
    "RegistrationConflictError",
    "SessionExchangeError",
    "SessionUserNotFoundError",
    "TokenExpiredError",
]
