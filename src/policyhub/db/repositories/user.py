"""User and credential repositories."""

from datetime import datetime

from sqlalchemy import func, select, update

from policyhub.db.models.user import OAuthAccount, User, UserPassword
from policyhub.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User, int]):
    """Repository for User model operations."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email, compared case-insensitively."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check whether a user with this email exists."""
        stmt = select(User.id).where(func.lower(User.email) == email.lower()).limit(1)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def get_with_provider(self, user_id: int) -> tuple[User, str | None] | None:
        """Get a user together with its OAuth provider name, if linked.

        Returns:
            (user, provider) or None when the user does not exist
        """
        stmt = (
            select(User, OAuthAccount.provider)
            .outerjoin(OAuthAccount, OAuthAccount.user_id == User.id)
            .where(User.id == user_id)
            .order_by(OAuthAccount.id)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def mark_first_login(self, user_id: int, at: datetime) -> bool:
        """Set has_logged_in and first_login_at if the user never logged in.

        Returns:
            True if this call performed the transition
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.has_logged_in == False)  # noqa: E712
            .values(has_logged_in=True, first_login_at=at, updated_at=at)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0


class UserPasswordRepository(BaseRepository[UserPassword, int]):
    """Repository for stored password hashes."""

    model = UserPassword

    async def get_hash(self, user_id: int) -> str | None:
        """Get the password hash for a user, or None for OAuth-only users."""
        stmt = select(UserPassword.password_hash).where(UserPassword.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
