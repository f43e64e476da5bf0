"""Temporary-token to session exchange.

After an OAuth callback the browser holds a single-use temporary token.
Exchanging it:

1. looks the token up; unknown tokens are rejected,
2. deletes and rejects tokens past their expiry,
3. resolves the owning user (and its OAuth provider),
4. in one transaction: consumes the token with a conditional DELETE,
   records the first login if this is one, and inserts a standard session.

The conditional DELETE is the single point of truth for "not yet used":
when two requests race with the same token only one of them gets a row
back, and the other is rejected without a session being created.
"""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.auth.sessions import SessionService, SessionUser
from policyhub.config.settings import Settings
from policyhub.core.exceptions import (
    InvalidTokenError,
    SessionUserNotFoundError,
    TokenExpiredError,
)
from policyhub.db.config import atomic
from policyhub.db.models.base import utcnow
from policyhub.db.models.session import Session, SessionKind
from policyhub.db.repositories.session import SessionRepository
from policyhub.db.repositories.user import UserRepository

logger = structlog.get_logger()


@dataclass(frozen=True)
class EstablishedSession:
    """Outcome of a successful sign-in."""

    user: SessionUser
    session: Session
    is_first_login: bool


class SessionExchange:
    """Exchanges temporary tokens for standard sessions."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.sessions = SessionRepository(db)
        self.users = UserRepository(db)
        self.session_service = SessionService(db, settings)

    async def establish_session(self, token: str) -> EstablishedSession:
        """Consume a temporary token and issue a standard session.

        Raises:
            InvalidTokenError: Token unknown, already consumed, or lost a race
            TokenExpiredError: Token past its expiry (the row is deleted)
            SessionUserNotFoundError: Token owner no longer exists (the row
                is deleted)
        """
        if not token:
            raise InvalidTokenError()

        now = utcnow()
        temporary = await self.sessions.get_by_kind(token, SessionKind.TEMPORARY)
        if temporary is None:
            raise InvalidTokenError()

        user_id = temporary.user_id

        if temporary.expires_at < now:
            async with atomic(self.db):
                await self.sessions.delete_by_id(token)
            logger.info("temporary_token_expired", user_id=user_id)
            raise TokenExpiredError()

        found = await self.users.get_with_provider(user_id)
        if found is None:
            async with atomic(self.db):
                await self.sessions.delete_by_id(token)
            logger.warning("temporary_token_orphaned", user_id=user_id)
            raise SessionUserNotFoundError(user_id)
        user, provider = found

        is_first_login = not user.has_logged_in

        async with atomic(self.db):
            consumed_by = await self.sessions.consume_temporary(token, now)
            if consumed_by is None:
                raise InvalidTokenError()

            if is_first_login:
                await self.users.mark_first_login(user_id, now)

            session = await self.sessions.add(
                self.session_service.build_standard_session(user_id, now)
            )

        logger.info(
            "session_established",
            user_id=user_id,
            organization_id=user.organization_id,
            first_login=is_first_login,
        )
        return EstablishedSession(
            user=SessionUser.from_user(
                user, oauth_provider=provider, has_logged_in=not is_first_login
            ),
            session=session,
            is_first_login=is_first_login,
        )
