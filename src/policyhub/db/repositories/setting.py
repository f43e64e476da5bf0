"""Setting repository with dialect-aware upsert."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from policyhub.db.models.base import utcnow
from policyhub.db.models.setting import Setting
from policyhub.db.repositories.base import BaseRepository


class SettingRepository(BaseRepository[Setting, int]):
    """Repository for organization settings.

    Writes use ``INSERT ... ON CONFLICT (organization_id, setting_key) DO
    UPDATE`` so concurrent writers of the same key always converge on one row.
    """

    model = Setting

    async def upsert(
        self,
        organization_id: int,
        setting_key: str,
        setting_value: Any,
        description: str | None = None,
    ) -> Setting:
        """Insert a setting or overwrite the value of the existing row.

        The description is only written on insert. On conflict the value is
        replaced and updated_at refreshed.

        Returns:
            The stored row, reloaded from the database
        """
        now = utcnow()
        dialect = self.db.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert

        stmt = insert(Setting).values(
            organization_id=organization_id,
            setting_key=setting_key,
            setting_value=setting_value,
            description=description,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Setting.organization_id, Setting.setting_key],
            set_={"setting_value": stmt.excluded.setting_value, "updated_at": now},
        ).returning(Setting)

        result = await self.db.scalars(stmt, execution_options={"populate_existing": True})
        return result.one()

    async def get_by_key(self, organization_id: int, setting_key: str) -> Setting | None:
        """Get one setting of an organization by key."""
        stmt = select(Setting).where(
            Setting.organization_id == organization_id,
            Setting.setting_key == setting_key,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_keys(
        self, organization_id: int, setting_keys: Sequence[str]
    ) -> dict[str, Setting]:
        """Get several settings of an organization, keyed by setting_key.

        Keys with no stored row are absent from the result.
        """
        if not setting_keys:
            return {}

        stmt = select(Setting).where(
            Setting.organization_id == organization_id,
            Setting.setting_key.in_(list(setting_keys)),
        )
        result = await self.db.execute(stmt)
        return {row.setting_key: row for row in result.scalars().all()}

    async def existing_keys(
        self, organization_id: int, setting_keys: Sequence[str]
    ) -> set[str]:
        """Return which of the given keys the organization already has."""
        stmt = select(Setting.setting_key).where(
            Setting.organization_id == organization_id,
            Setting.setting_key.in_(list(setting_keys)),
        )
        result = await self.db.execute(stmt)
        return set(result.scalars().all())

    async def rename_key(self, organization_id: int, old_key: str, new_key: str) -> None:
        """Rename a setting key in place, keeping its value."""
        stmt = (
            update(Setting)
            .where(
                Setting.organization_id == organization_id,
                Setting.setting_key == old_key,
            )
            .values(setting_key=new_key, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
