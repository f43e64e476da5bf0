"""Unit tests for the organization settings store."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.exceptions import AuthenticationError, InputValidationError
from policyhub.db.models import Organization, Setting
from policyhub.settings.store import SettingsStore, is_public_key, validate_setting_key


async def _org(db: AsyncSession, slug: str) -> Organization:
    org = Organization(name=slug.title(), slug=slug, is_active=True)
    db.add(org)
    await db.commit()
    return org


class TestKeyRules:
    def test_branding_keys_are_public(self):
        assert is_public_key("branding.logo_url")
        assert not is_public_key("policy.tags")
        assert not is_public_key("brandingless")

    @pytest.mark.parametrize("key", ["", "   ", "k" * 256])
    def test_invalid_keys_rejected(self, key):
        with pytest.raises(InputValidationError):
            validate_setting_key(key)

    def test_max_length_key_accepted(self):
        assert validate_setting_key("k" * 255) == "k" * 255


@pytest.mark.asyncio
class TestSettingsUpdate:
    async def test_upsert_keeps_single_row_with_latest_value(
        self, db_session: AsyncSession, monkeypatch
    ):
        org = await _org(db_session, "upsert-co")
        store = SettingsStore(db_session)
        first_at = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
        second_at = first_at + timedelta(hours=1)

        monkeypatch.setattr("policyhub.db.repositories.setting.utcnow", lambda: first_at)
        first = await store.update(org.id, "branding.primary_color", "#112233")
        first_id = first.id

        monkeypatch.setattr("policyhub.db.repositories.setting.utcnow", lambda: second_at)
        second = await store.update(org.id, "branding.primary_color", "#445566")

        assert second.id == first_id
        assert second.setting_value == "#445566"
        assert second.updated_at == second_at
        assert second.created_at == first_at

        count = (
            await db_session.execute(
                select(func.count())
                .select_from(Setting)
                .where(
                    Setting.organization_id == org.id,
                    Setting.setting_key == "branding.primary_color",
                )
            )
        ).scalar_one()
        assert count == 1

    async def test_json_values_round_trip(self, db_session: AsyncSession):
        org = await _org(db_session, "json-co")
        value = {"sections": ["intro", "scope"], "numbered": True, "depth": 2}

        setting = await SettingsStore(db_session).update(org.id, "document.layout", value)

        assert setting.setting_value == value

    async def test_same_key_isolated_per_organization(self, db_session: AsyncSession):
        org_a = await _org(db_session, "org-a")
        org_b = await _org(db_session, "org-b")
        store = SettingsStore(db_session)

        await store.update(org_a.id, "policy.tags", ["a"])
        await store.update(org_b.id, "policy.tags", ["b"])

        a = await store.get("policy.tags", caller_organization_id=org_a.id)
        b = await store.get("policy.tags", caller_organization_id=org_b.id)
        assert (a.setting_value, b.setting_value) == (["a"], ["b"])

    async def test_blank_key_rejected(self, db_session: AsyncSession):
        org = await _org(db_session, "blank-co")
        with pytest.raises(InputValidationError):
            await SettingsStore(db_session).update(org.id, "", "x")


@pytest.mark.asyncio
class TestSettingsReads:
    async def test_public_branding_read_by_organization_id(self, db_session: AsyncSession):
        org = await _org(db_session, "brand-co")
        store = SettingsStore(db_session)
        await store.update(org.id, "branding.logo_url", "https://cdn.test/logo.png")

        setting = await store.get(
            "branding.logo_url", caller_organization_id=None, requested_organization_id=org.id
        )

        assert setting.setting_value == "https://cdn.test/logo.png"

    async def test_private_key_requires_session(self, db_session: AsyncSession):
        org = await _org(db_session, "private-co")
        with pytest.raises(AuthenticationError):
            await SettingsStore(db_session).get(
                "policy.tags", caller_organization_id=None, requested_organization_id=org.id
            )

    async def test_private_key_pinned_to_caller_organization(self, db_session: AsyncSession):
        mine = await _org(db_session, "mine")
        theirs = await _org(db_session, "theirs")
        store = SettingsStore(db_session)
        await store.update(theirs.id, "policy.tags", ["secret"])

        setting = await store.get(
            "policy.tags",
            caller_organization_id=mine.id,
            requested_organization_id=theirs.id,
        )

        assert setting is None

    async def test_get_missing_returns_none(self, db_session: AsyncSession):
        org = await _org(db_session, "empty-co")
        assert await SettingsStore(db_session).get("x.y", caller_organization_id=org.id) is None

    async def test_get_many_maps_missing_keys_to_none(self, db_session: AsyncSession):
        org = await _org(db_session, "many-co")
        store = SettingsStore(db_session)
        await store.update(org.id, "branding.name", "Many Co")

        result = await store.get_many(
            ["branding.name", "branding.logo_url"],
            caller_organization_id=None,
            requested_organization_id=org.id,
        )

        assert set(result) == {"branding.name", "branding.logo_url"}
        assert result["branding.name"].setting_value == "Many Co"
        assert result["branding.logo_url"] is None

    async def test_get_many_mixed_keys_require_session(self, db_session: AsyncSession):
        org = await _org(db_session, "mixed-co")
        with pytest.raises(AuthenticationError):
            await SettingsStore(db_session).get_many(
                ["branding.name", "policy.tags"],
                caller_organization_id=None,
                requested_organization_id=org.id,
            )

    async def test_get_many_requires_keys(self, db_session: AsyncSession):
        with pytest.raises(InputValidationError):
            await SettingsStore(db_session).get_many([], caller_organization_id=1)
