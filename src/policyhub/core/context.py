"""Request context propagated through async call chains.

The context is created per request by ``RequestContextMiddleware`` and is
enriched with the authenticated user once the session dependency resolves
one. Log processors read it to tag every entry with the request id and the
acting user/organization.

Usage:
    from policyhub.core.context import create_context, request_context

    with request_context(create_context()):
        current = get_current_context()
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from policyhub.core.exceptions import ContextNotSetError


class RequestContext(BaseModel):
    """Context for a single request."""

    request_id: UUID = Field(default_factory=uuid4)
    initiated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Populated once a session resolves to a user
    user_id: int | None = None
    organization_id: int | None = None
    role: str | None = None

    model_config = {"frozen": False}

    def attach_user(self, user_id: int, organization_id: int, role: str) -> None:
        """Record the authenticated user on the context."""
        self.user_id = user_id
        self.organization_id = organization_id
        self.role = role


_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_current_context() -> RequestContext:
    """Get the current request context.

    Raises:
        ContextNotSetError: If no context is set in the current execution context
    """
    ctx = _request_context.get()
    if ctx is None:
        raise ContextNotSetError(
            "No request context is set. Use request_context() context manager."
        )
    return ctx


def get_current_context_or_none() -> RequestContext | None:
    """Get the current request context, or None if not set."""
    return _request_context.get()


def set_context(ctx: RequestContext) -> Token[RequestContext | None]:
    """Set the request context and return a token for restoration."""
    return _request_context.set(ctx)


def reset_context(token: Token[RequestContext | None]) -> None:
    """Reset the context to its previous value using a token."""
    _request_context.reset(token)


@contextmanager
def request_context(ctx: RequestContext):
    """Context manager for setting request context.

    Args:
        ctx: The context to set for the duration of the block

    Yields:
        The context that was set
    """
    token = set_context(ctx)
    try:
        yield ctx
    finally:
        reset_context(token)


def create_context(*, request_id: UUID | None = None) -> RequestContext:
    """Create a RequestContext, generating a request id if none is given."""
    return RequestContext(request_id=request_id or uuid4())
