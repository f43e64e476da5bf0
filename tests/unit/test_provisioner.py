"""Unit tests for organization provisioning."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.exceptions import InputValidationError, RegistrationConflictError
from policyhub.core.security import verify_password
from policyhub.core.taxonomy import (
    DEFAULT_DEPARTMENTS,
    DEFAULT_POLICY_CATEGORIES,
    DEFAULT_POLICY_TAGS,
)
from policyhub.db.models import Organization, Portal, Setting, User, UserPassword
from policyhub.organizations.provisioner import OrganizationProvisioner


async def _count(db: AsyncSession, model, *criteria) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar_one()


def _registration(**overrides) -> dict:
    values = {
        "organization_name": "Northwind Trading",
        "organization_slug": "northwind",
        "admin_display_name": "Nora Admin",
        "admin_email": "nora@northwind.example.com",
        "admin_password": "s3cure-pass",
        "domain": "northwind.test",
    }
    values.update(overrides)
    return values


@pytest.mark.asyncio
class TestCreateOrganization:
    """Tests for OrganizationProvisioner.create_organization()."""

    async def test_creates_org_with_portals_and_settings(self, db_session: AsyncSession):
        org = await OrganizationProvisioner(db_session).create_organization("Acme, Inc.!!")

        assert org.id is not None
        assert org.slug == "acme-inc"
        assert org.is_active is True

        portals = (
            await db_session.execute(select(Portal).where(Portal.organization_id == org.id))
        ).scalars().all()
        assert {(p.slug, p.access_type) for p in portals} == {
            ("public", "public"),
            ("internal", "authenticated"),
        }

        settings = (
            await db_session.execute(select(Setting).where(Setting.organization_id == org.id))
        ).scalars().all()
        values = {s.setting_key: s.setting_value for s in settings}
        assert values == {
            "policy.categories": DEFAULT_POLICY_CATEGORIES,
            "policy.departments": DEFAULT_DEPARTMENTS,
            "policy.tags": DEFAULT_POLICY_TAGS,
        }

    async def test_empty_domain_stored_as_null(self, db_session: AsyncSession):
        org = await OrganizationProvisioner(db_session).create_organization("Blank", domain="")
        assert org.domain is None

    async def test_duplicate_slug_rejected(self, db_session: AsyncSession):
        provisioner = OrganizationProvisioner(db_session)
        await provisioner.create_organization("Acme Ltd")

        with pytest.raises(RegistrationConflictError) as exc_info:
            await provisioner.create_organization("ACME  ltd!")

        assert exc_info.value.conflict == "slug"
        assert await _count(db_session, Organization) == 1

    async def test_name_without_slug_characters_rejected(self, db_session: AsyncSession):
        with pytest.raises(InputValidationError):
            await OrganizationProvisioner(db_session).create_organization("!!!")

    async def test_failure_mid_transaction_leaves_nothing(
        self, db_session: AsyncSession, monkeypatch
    ):
        provisioner = OrganizationProvisioner(db_session)

        async def failing_seed(organization):
            raise RuntimeError("seed failed")

        monkeypatch.setattr(provisioner, "_seed_defaults", failing_seed)

        with pytest.raises(RuntimeError):
            await provisioner.create_organization("Doomed Org")

        assert await _count(db_session, Organization) == 0
        assert await _count(db_session, Portal) == 0
        assert await _count(db_session, Setting) == 0

    async def test_unique_constraint_race_maps_to_conflict(
        self, db_session: AsyncSession, monkeypatch
    ):
        provisioner = OrganizationProvisioner(db_session)
        await provisioner.create_organization("Racer")

        async def never_exists(slug):
            return False

        # Simulate a concurrent insert slipping past the pre-check
        monkeypatch.setattr(provisioner.organizations, "slug_exists", never_exists)

        with pytest.raises(RegistrationConflictError) as exc_info:
            await provisioner.create_organization("Racer")

        assert exc_info.value.conflict == "slug"
        assert await _count(db_session, Organization) == 1


@pytest.mark.asyncio
class TestRegisterOrganization:
    """Tests for OrganizationProvisioner.register_organization()."""

    async def test_creates_org_admin_and_defaults(self, db_session: AsyncSession):
        org = await OrganizationProvisioner(db_session).register_organization(**_registration())

        assert org.slug == "northwind"

        admin = (
            await db_session.execute(select(User).where(User.organization_id == org.id))
        ).scalar_one()
        assert admin.role == "admin"
        assert admin.email == "nora@northwind.example.com"
        assert admin.has_logged_in is False

        password_hash = (
            await db_session.execute(
                select(UserPassword.password_hash).where(UserPassword.user_id == admin.id)
            )
        ).scalar_one()
        assert verify_password("s3cure-pass", password_hash)

        assert await _count(db_session, Portal, Portal.organization_id == org.id) == 2
        assert await _count(db_session, Setting, Setting.organization_id == org.id) == 3

    async def test_duplicate_slug_rolls_back(self, db_session: AsyncSession):
        provisioner = OrganizationProvisioner(db_session)
        await provisioner.register_organization(**_registration())

        with pytest.raises(RegistrationConflictError) as exc_info:
            await provisioner.register_organization(
                **_registration(admin_email="other@northwind.example.com")
            )

        assert str(exc_info.value) == "This organization URL is already taken."
        assert await _count(db_session, Organization) == 1
        assert await _count(db_session, User, User.email == "other@northwind.example.com") == 0

    async def test_duplicate_email_rolls_back(self, db_session: AsyncSession):
        provisioner = OrganizationProvisioner(db_session)
        await provisioner.register_organization(**_registration())

        with pytest.raises(RegistrationConflictError) as exc_info:
            await provisioner.register_organization(
                **_registration(organization_slug="southwind")
            )

        assert exc_info.value.conflict == "email"
        assert await _count(db_session, Organization, Organization.slug == "southwind") == 0

    async def test_email_differing_in_case_is_rejected_by_the_database(
        self, db_session: AsyncSession, monkeypatch
    ):
        provisioner = OrganizationProvisioner(db_session)
        await provisioner.register_organization(**_registration())

        async def never_exists(email):
            return False

        # A concurrent registration slips past the pre-check
        monkeypatch.setattr(provisioner.users, "email_exists", never_exists)

        with pytest.raises(RegistrationConflictError) as exc_info:
            await provisioner.register_organization(
                **_registration(
                    organization_slug="southwind", admin_email="NORA@Northwind.Example.com"
                )
            )

        assert exc_info.value.conflict == "email"
        assert await _count(db_session, Organization, Organization.slug == "southwind") == 0
        assert await _count(db_session, User) == 1

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"organization_slug": "ab"}, "organizationSlug"),
            ({"organization_slug": "Bad Slug"}, "organizationSlug"),
            ({"admin_password": "short"}, "adminPassword"),
        ],
    )
    async def test_invalid_input_rejected(self, db_session: AsyncSession, overrides, field):
        with pytest.raises(InputValidationError) as exc_info:
            await OrganizationProvisioner(db_session).register_organization(
                **_registration(**overrides)
            )

        assert exc_info.value.field == field
        assert await _count(db_session, Organization) == 0
