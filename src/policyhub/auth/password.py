"""Email/password sign-in."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.auth.exchange import EstablishedSession
from policyhub.auth.sessions import SessionService, SessionUser
from policyhub.config.settings import Settings
from policyhub.core.exceptions import InvalidCredentialsError
from policyhub.core.security import verify_password
from policyhub.db.config import atomic
from policyhub.db.models.base import utcnow
from policyhub.db.repositories.session import SessionRepository
from policyhub.db.repositories.user import UserPasswordRepository, UserRepository

logger = structlog.get_logger()

ORGANIZATION_MISMATCH_MESSAGE = (
    "Invalid email or password, or you don't have access to this organization"
)


class PasswordLogin:
    """Verifies credentials and opens a standard session."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.users = UserRepository(db)
        self.passwords = UserPasswordRepository(db)
        self.sessions = SessionRepository(db)
        self.session_service = SessionService(db, settings)

    async def login(
        self,
        email: str,
        password: str,
        organization_id: int | None = None,
    ) -> EstablishedSession:
        """Sign a user in with email and password.

        Args:
            email: Email address, matched case-insensitively
            password: Plaintext password
            organization_id: Restrict sign-in to members of this organization

        Raises:
            InvalidCredentialsError: Unknown email, wrong password, inactive
                user, or user outside the requested organization
        """
        failure = (
            InvalidCredentialsError(ORGANIZATION_MISMATCH_MESSAGE)
            if organization_id is not None
            else InvalidCredentialsError()
        )

        user = await self.users.get_by_email(email)
        if user is None or not user.is_active:
            raise failure
        if organization_id is not None and user.organization_id != organization_id:
            raise failure

        password_hash = await self.passwords.get_hash(user.id)
        if password_hash is None or not verify_password(password, password_hash):
            logger.info("password_login_rejected", user_id=user.id)
            raise failure

        found = await self.users.get_with_provider(user.id)
        provider = found[1] if found else None

        now = utcnow()
        is_first_login = not user.has_logged_in
        async with atomic(self.db):
            if is_first_login:
                await self.users.mark_first_login(user.id, now)
            session = await self.sessions.add(
                self.session_service.build_standard_session(user.id, now)
            )

        logger.info(
            "password_login_succeeded",
            user_id=user.id,
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
