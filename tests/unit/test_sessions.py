"""Unit tests for SessionService."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.auth.sessions import SessionService
from policyhub.core.exceptions import AuthenticationError
from policyhub.db.models import Session
from policyhub.db.models.base import utcnow


async def _session_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Session))).scalar_one()


async def _insert_session(db: AsyncSession, session_id: str, user_id: int, *, expired: bool):
    now = utcnow()
    expires_at = now - timedelta(days=1) if expired else now + timedelta(days=1)
    db.add(
        Session(
            id=session_id,
            user_id=user_id,
            kind="standard",
            created_at=now - timedelta(days=8),
            last_accessed=now - timedelta(days=8),
            expires_at=expires_at,
        )
    )
    await db.commit()


@pytest.mark.asyncio
class TestSessionService:
    async def test_temporary_token_uses_short_ttl(
        self, db_session: AsyncSession, test_settings, member_user
    ):
        token = await SessionService(db_session, test_settings).create_temporary_session(
            member_user.id
        )

        row = (
            await db_session.execute(select(Session).where(Session.id == token))
        ).scalar_one()
        assert row.kind == "temporary"
        assert row.expires_at - row.created_at == timedelta(
            seconds=test_settings.TEMP_TOKEN_TTL_SECONDS
        )

    async def test_resolve_returns_user(self, db_session: AsyncSession, test_settings, admin_user):
        service = SessionService(db_session, test_settings)
        session = await service.create_session(admin_user.id)

        user = await service.resolve(session.id)

        assert user.id == admin_user.id
        assert user.is_admin is True

    async def test_resolve_refreshes_last_accessed(
        self, db_session: AsyncSession, test_settings, member_user
    ):
        await _insert_session(db_session, "old-but-valid", member_user.id, expired=False)
        before = utcnow()

        await SessionService(db_session, test_settings).resolve("old-but-valid")

        row = (
            await db_session.execute(
                select(Session)
                .where(Session.id == "old-but-valid")
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert row.last_accessed >= before

    async def test_resolve_rejects_missing_cookie(self, db_session: AsyncSession, test_settings):
        with pytest.raises(AuthenticationError):
            await SessionService(db_session, test_settings).resolve(None)

    async def test_resolve_rejects_unknown_session(self, db_session: AsyncSession, test_settings):
        with pytest.raises(AuthenticationError):
            await SessionService(db_session, test_settings).resolve("unknown")

    async def test_resolve_rejects_temporary_token(
        self, db_session: AsyncSession, test_settings, member_user
    ):
        service = SessionService(db_session, test_settings)
        token = await service.create_temporary_session(member_user.id)

        with pytest.raises(AuthenticationError):
            await service.resolve(token)

    async def test_expired_session_deleted(
        self, db_session: AsyncSession, test_settings, member_user
    ):
        await _insert_session(db_session, "stale", member_user.id, expired=True)

        with pytest.raises(AuthenticationError):
            await SessionService(db_session, test_settings).resolve("stale")

        assert await _session_count(db_session) == 0

    async def test_cleanup_removes_other_expired_sessions(
        self, db_session: AsyncSession, test_settings, member_user
    ):
        await _insert_session(db_session, "stale-1", member_user.id, expired=True)
        await _insert_session(db_session, "stale-2", member_user.id, expired=True)
        settings = test_settings.model_copy(update={"SESSION_CLEANUP_PROBABILITY": 1.0})
        service = SessionService(db_session, settings)
        live = await service.create_session(member_user.id)

        await service.resolve(live.id)

        remaining = (await db_session.execute(select(Session.id))).scalars().all()
        assert remaining == [live.id]

    async def test_revoke(self, db_session: AsyncSession, test_settings, member_user):
        service = SessionService(db_session, test_settings)
        session = await service.create_session(member_user.id)

        assert await service.revoke(session.id) is True
        assert await service.revoke(session.id) is False
        with pytest.raises(AuthenticationError):
            await service.resolve(session.id)
