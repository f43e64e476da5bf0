"""Request context middleware for propagating context through the request lifecycle."""

from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from policyhub.core.context import create_context, request_context


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that sets up a RequestContext for each request.

    Sets:
        request.state.request_id: The generated request ID
        X-Request-ID response header: For client correlation

    The session dependency later attaches the authenticated user to the
    same context object.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request within a RequestContext."""
        request_id = uuid4()
        request.state.request_id = request_id

        with request_context(create_context(request_id=request_id)):
            response = await call_next(request)

        response.headers["X-Request-ID"] = str(request_id)
        return response
