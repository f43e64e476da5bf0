"""Unit tests for the transaction helper."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.db import atomic
from policyhub.db.models import Organization


async def _organizations(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Organization))).scalar_one()


@pytest.mark.asyncio
class TestAtomic:
    async def test_commits_block(self, db_session: AsyncSession, session_factory):
        async with atomic(db_session):
            db_session.add(Organization(name="Kept", slug="kept"))

        async with session_factory() as other:
            assert await _organizations(other) == 1

    async def test_rolls_back_block_on_error(self, db_session: AsyncSession):
        with pytest.raises(RuntimeError):
            async with atomic(db_session):
                db_session.add(Organization(name="Dropped", slug="dropped"))
                await db_session.flush()
                raise RuntimeError("abort")

        assert await _organizations(db_session) == 0

    async def test_starts_after_an_autobegun_read(self, db_session: AsyncSession):
        await _organizations(db_session)
        assert db_session.in_transaction()

        async with atomic(db_session):
            db_session.add(Organization(name="After Read", slug="after-read"))

        assert await _organizations(db_session) == 1
