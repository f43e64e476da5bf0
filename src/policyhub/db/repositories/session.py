"""Session repository."""

from datetime import datetime

from sqlalchemy import delete, select, update

from policyhub.db.models.session import Session, SessionKind
from policyhub.db.repositories.base import BaseRepository


class SessionRepository(BaseRepository[Session, str]):
    """Repository for standard sessions and temporary tokens."""

    model = Session

    async def get_by_kind(self, session_id: str, kind: SessionKind) -> Session | None:
        """Get a session of the given kind by id."""
        stmt = select(Session).where(Session.id == session_id, Session.kind == kind.value)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def consume_temporary(self, token: str, now: datetime) -> int | None:
        """Atomically delete an unexpired temporary token.

        Only one caller can win the DELETE for a given token; every other
        concurrent caller sees no returned row.

        Returns:
            The owning user id, or None if nothing was consumed
        """
        stmt = (
            delete(Session)
            .where(
                Session.id == token,
                Session.kind == SessionKind.TEMPORARY.value,
                Session.expires_at >= now,
            )
            .returning(Session.user_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_by_id(self, session_id: str) -> bool:
        """Delete a session by id. Returns True if a row was removed."""
        stmt = (
            delete(Session)
            .where(Session.id == session_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0

    async def delete_expired(self, now: datetime) -> int:
        """Delete every session past its expiry. Returns the number removed."""
        stmt = (
            delete(Session)
            .where(Session.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def touch(self, session_id: str, now: datetime) -> None:
        """Refresh last_accessed for a session."""
        stmt = (
            update(Session)
            .where(Session.id == session_id)
            .values(last_accessed=now)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
