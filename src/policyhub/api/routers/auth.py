"""Authentication endpoints: token exchange, password sign-in, sign-out."""

from fastapi import APIRouter, Request, Response

from policyhub.api.dependencies import AppSettings, CurrentUser, DbSession
from policyhub.api.schemas.auth import (
    CurrentSessionResponse,
    EstablishSessionRequest,
    EstablishSessionResponse,
    LogoutResponse,
    PasswordLoginRequest,
    PasswordLoginResponse,
    UserResponse,
)
from policyhub.auth.exchange import SessionExchange
from policyhub.auth.password import PasswordLogin
from policyhub.auth.sessions import SessionService
from policyhub.config.settings import Settings
from policyhub.db.models.session import Session

router = APIRouter(prefix="/auth", tags=["auth"])


def set_session_cookie(response: Response, session: Session, settings: Settings) -> None:
    """Attach the session id cookie, expiring with the session itself."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.id,
        max_age=settings.SESSION_TTL_DAYS * 24 * 60 * 60,
        expires=session.expires_at,
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


@router.post(
    "/establish-session",
    response_model=EstablishSessionResponse,
    summary="Exchange a temporary token for a session",
)
async def establish_session(
    body: EstablishSessionRequest,
    response: Response,
    db: DbSession,
    settings: AppSettings,
) -> EstablishSessionResponse:
    """Consume a single-use temporary token and set the session cookie.

    Unknown, replayed or expired tokens and tokens whose user is gone all
    answer 400.
    """
    result = await SessionExchange(db, settings).establish_session(body.temp_token)
    set_session_cookie(response, result.session, settings)

    return EstablishSessionResponse(
        user=UserResponse.from_session_user(result.user),
        success=True,
        is_first_login=result.is_first_login,
    )


@router.post(
    "/login-with-password",
    response_model=PasswordLoginResponse,
    summary="Sign in with email and password",
)
async def login_with_password(
    body: PasswordLoginRequest,
    response: Response,
    db: DbSession,
    settings: AppSettings,
) -> PasswordLoginResponse:
    result = await PasswordLogin(db, settings).login(
        body.email, body.password, organization_id=body.organization_id
    )
    set_session_cookie(response, result.session, settings)

    return PasswordLoginResponse(
        user=UserResponse.from_session_user(result.user),
        is_first_login=result.is_first_login,
    )


@router.post("/logout", response_model=LogoutResponse, summary="Sign out")
async def logout(
    request: Request,
    response: Response,
    db: DbSession,
    settings: AppSettings,
) -> LogoutResponse:
    """Revoke the current session, if any, and clear the cookie."""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if session_id:
        await SessionService(db, settings).revoke(session_id)
    clear_session_cookie(response, settings)
    return LogoutResponse(success=True)


@router.get("/session", response_model=CurrentSessionResponse, summary="Current user")
async def current_session(user: CurrentUser) -> CurrentSessionResponse:
    return CurrentSessionResponse(user=UserResponse.from_session_user(user))
