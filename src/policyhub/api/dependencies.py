"""FastAPI dependencies for API endpoints."""

from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.auth.sessions import SessionService, SessionUser
from policyhub.config.settings import Settings, get_settings
from policyhub.core.context import get_current_context_or_none
from policyhub.core.exceptions import AuthenticationError, AuthorizationError
from policyhub.db.config import get_db
from policyhub.drive.proxy import DriveProxy, build_drive_client

__all__ = [
    "get_db",
    "get_app_settings",
    "get_current_user",
    "get_optional_user",
    "require_admin",
    "get_drive_client",
    "get_drive_proxy",
    "DbSession",
    "AppSettings",
    "CurrentUser",
    "OptionalUser",
    "AdminUser",
]


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]


async def get_optional_user(
    request: Request,
    db: DbSession,
    settings: AppSettings,
) -> SessionUser | None:
    """Resolve the session cookie to a user, or None when there is no valid session."""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        return None
    try:
        user = await SessionService(db, settings).resolve(session_id)
    except AuthenticationError:
        return None

    ctx = get_current_context_or_none()
    if ctx is not None:
        ctx.attach_user(user.id, user.organization_id, user.role)
    return user


async def get_current_user(
    user: Annotated[SessionUser | None, Depends(get_optional_user)],
) -> SessionUser:
    """Require a valid session.

    Raises:
        AuthenticationError: If the request carries no valid session
    """
    if user is None:
        raise AuthenticationError()
    return user


async def require_admin(
    user: Annotated[SessionUser, Depends(get_current_user)],
) -> SessionUser:
    """Require a signed-in admin.

    Raises:
        AuthorizationError: If the user is not an admin
    """
    if not user.is_admin:
        raise AuthorizationError("You do not have permission to perform this action.")
    return user


OptionalUser = Annotated[SessionUser | None, Depends(get_optional_user)]
CurrentUser = Annotated[SessionUser, Depends(get_current_user)]
AdminUser = Annotated[SessionUser, Depends(require_admin)]


async def get_drive_client(request: Request) -> httpx.AsyncClient:
    """Shared HTTP client for Google Drive.

    The lifespan opens it at startup. Apps served without a lifespan get one
    on first use; this runs on the event loop, so two requests cannot both
    create it.
    """
    client = getattr(request.app.state, "drive_client", None)
    if client is None:
        client = build_drive_client(get_app_settings(request))
        request.app.state.drive_client = client
    return client


def get_drive_proxy(
    client: Annotated[httpx.AsyncClient, Depends(get_drive_client)],
    settings: AppSettings,
) -> DriveProxy:
    return DriveProxy(client, settings.GOOGLE_DRIVE_API_BASE)
