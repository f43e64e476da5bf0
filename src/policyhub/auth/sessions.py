"""Server-side session management.

Two kinds of session share one table:

- temporary: a short-lived, single-use token handed to the browser at the
  end of an OAuth callback and exchanged for a standard session.
- standard: the long-lived session id carried in the session cookie.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.config.settings import Settings
from policyhub.core.exceptions import AuthenticationError
from policyhub.core.security import generate_session_token
from policyhub.db.config import atomic
from policyhub.db.models.base import utcnow
from policyhub.db.models.session import Session, SessionKind
from policyhub.db.models.user import User, UserRole
from policyhub.db.repositories.session import SessionRepository
from policyhub.db.repositories.user import UserRepository

logger = structlog.get_logger()


@dataclass(frozen=True)
class SessionUser:
    """The user view returned to clients once a session is established."""

    id: int
    email: str
    display_name: str
    avatar_url: str | None
    role: str
    organization_id: int
    has_logged_in: bool
    oauth_provider: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @classmethod
    def from_user(
        cls,
        user: User,
        oauth_provider: str | None = None,
        has_logged_in: bool | None = None,
    ) -> "SessionUser":
        return cls(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            role=user.role or UserRole.USER.value,
            organization_id=user.organization_id,
            has_logged_in=user.has_logged_in if has_logged_in is None else has_logged_in,
            oauth_provider=oauth_provider,
        )


class SessionService:
    """Issues, resolves and revokes sessions."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.config = settings
        self.sessions = SessionRepository(db)
        self.users = UserRepository(db)

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(days=self.config.SESSION_TTL_DAYS)

    def build_standard_session(self, user_id: int, now: datetime) -> Session:
        """Build (but do not persist) a fresh standard session."""
        return Session(
            id=generate_session_token(),
            user_id=user_id,
            kind=SessionKind.STANDARD.value,
            created_at=now,
            last_accessed=now,
            expires_at=now + self.session_ttl,
        )

    async def create_temporary_session(self, user_id: int) -> str:
        """Issue a single-use hand-off token for a user.

        Returns:
            The opaque token
        """
        now = utcnow()
        token = generate_session_token()
        async with atomic(self.db):
            await self.sessions.add(
                Session(
                    id=token,
                    user_id=user_id,
                    kind=SessionKind.TEMPORARY.value,
                    created_at=now,
                    last_accessed=now,
                    expires_at=now + timedelta(seconds=self.config.TEMP_TOKEN_TTL_SECONDS),
                )
            )

        logger.debug("temporary_session_created", user_id=user_id)
        return token

    async def create_session(self, user_id: int) -> Session:
        """Issue a standard session for a user."""
        async with atomic(self.db):
            session = await self.sessions.add(self.build_standard_session(user_id, utcnow()))

        logger.info("session_created", user_id=user_id)
        return session

    async def resolve(self, session_id: str | None) -> SessionUser:
        """Resolve a session cookie to its user and refresh last_accessed.

        Raises:
            AuthenticationError: If the session is missing, expired, or its
                user no longer exists or is inactive
        """
        if not session_id:
            raise AuthenticationError()

        now = utcnow()
        session = await self.sessions.get_by_kind(session_id, SessionKind.STANDARD)
        if session is None:
            raise AuthenticationError("Invalid session")

        if session.expires_at < now:
            async with atomic(self.db):
                await self.sessions.delete_by_id(session_id)
            raise AuthenticationError("Session expired")

        found = await self.users.get_with_provider(session.user_id)
        if found is None or not found[0].is_active:
            raise AuthenticationError("User not found")
        user, provider = found

        async with atomic(self.db):
            await self.sessions.touch(session_id, now)
            if random.random() < self.config.SESSION_CLEANUP_PROBABILITY:
                removed = await self.sessions.delete_expired(now)
                if removed:
                    logger.info("expired_sessions_cleaned", count=removed)

        return SessionUser.from_user(user, oauth_provider=provider)

    async def revoke(self, session_id: str) -> bool:
        """Delete a session. Returns True if it existed."""
        async with atomic(self.db):
            removed = await self.sessions.delete_by_id(session_id)

        if removed:
            logger.info("session_revoked")
        return removed
