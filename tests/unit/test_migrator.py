"""Unit tests for the default-settings migrator."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.taxonomy import DEFAULT_DEPARTMENTS
from policyhub.db.models import Organization, Setting
from policyhub.organizations.migrator import DefaultsMigrator
from policyhub.organizations.provisioner import OrganizationProvisioner

CANONICAL_KEYS = {"policy.categories", "policy.departments", "policy.tags"}


async def _bare_organization(db: AsyncSession, name: str, slug: str) -> Organization:
    org = Organization(name=name, slug=slug, is_active=True)
    db.add(org)
    await db.commit()
    return org


async def _keys(db: AsyncSession, organization_id: int) -> dict[str, object]:
    rows = (
        await db.execute(
            select(Setting)
            .where(Setting.organization_id == organization_id)
            .execution_options(populate_existing=True)
        )
    ).scalars().all()
    return {row.setting_key: row.setting_value for row in rows}


@pytest.mark.asyncio
class TestDefaultsMigrator:
    async def test_provisioned_org_needs_nothing(self, db_session: AsyncSession):
        await OrganizationProvisioner(db_session).create_organization("Complete Co")

        summary = await DefaultsMigrator(db_session).run()

        assert summary.success is True
        assert summary.processed_organizations == 1
        assert summary.updated_organizations == 0
        assert summary.migration_details == []

    async def test_adds_missing_defaults(self, db_session: AsyncSession):
        org = await _bare_organization(db_session, "Legacy Co", "legacy-co")

        summary = await DefaultsMigrator(db_session).run()

        assert summary.updated_organizations == 1
        detail = summary.migration_details[0]
        assert detail.organization_name == "Legacy Co"
        assert set(detail.settings_added) == CANONICAL_KEYS
        assert detail.settings_renamed == []

        keys = await _keys(db_session, org.id)
        assert set(keys) == CANONICAL_KEYS
        assert keys["policy.departments"] == DEFAULT_DEPARTMENTS

    async def test_second_run_is_noop(self, db_session: AsyncSession):
        org = await _bare_organization(db_session, "Legacy Co", "legacy-co")
        migrator = DefaultsMigrator(db_session)

        await migrator.run()
        before = await _keys(db_session, org.id)
        summary = await migrator.run()

        assert summary.updated_organizations == 0
        assert await _keys(db_session, org.id) == before

    async def test_renames_legacy_keys_keeping_values(self, db_session: AsyncSession):
        org = await _bare_organization(db_session, "Old Keys", "old-keys")
        db_session.add(
            Setting(
                organization_id=org.id,
                setting_key="policy_categories",
                setting_value=["Custom Category"],
            )
        )
        await db_session.commit()

        summary = await DefaultsMigrator(db_session).run()

        detail = summary.migration_details[0]
        assert detail.settings_renamed == ["policy.categories"]
        assert set(detail.settings_added) == {"policy.departments", "policy.tags"}

        keys = await _keys(db_session, org.id)
        assert set(keys) == CANONICAL_KEYS
        assert keys["policy.categories"] == ["Custom Category"]

    async def test_legacy_key_left_alone_when_canonical_exists(self, db_session: AsyncSession):
        org = await OrganizationProvisioner(db_session).create_organization("Both Keys")
        db_session.add(
            Setting(organization_id=org.id, setting_key="policy_tags", setting_value=["x"])
        )
        await db_session.commit()

        summary = await DefaultsMigrator(db_session).run()

        assert summary.updated_organizations == 0
        keys = await _keys(db_session, org.id)
        assert keys["policy_tags"] == ["x"]

    async def test_failing_organization_does_not_block_others(
        self, db_session: AsyncSession, monkeypatch
    ):
        await _bare_organization(db_session, "Broken", "broken")
        healthy = await _bare_organization(db_session, "Healthy", "healthy")
        migrator = DefaultsMigrator(db_session)
        original = migrator._migrate_organization

        async def flaky(organization_id, name):
            if name == "Broken":
                raise OperationalError("INSERT", {}, Exception("disk I/O error"))
            return await original(organization_id, name)

        monkeypatch.setattr(migrator, "_migrate_organization", flaky)

        summary = await migrator.run()

        assert summary.processed_organizations == 2
        assert summary.updated_organizations == 1
        assert summary.failed_organizations == ["Broken"]
        assert summary.success is False
        assert set(await _keys(db_session, healthy.id)) == CANONICAL_KEYS
        assert "1 of 2 organizations" in summary.message
