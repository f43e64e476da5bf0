"""Organization provisioning.

Creating an organization is all-or-nothing: the organization row, its two
default portals and the default taxonomy settings (and, for self-service
registration, the first admin user with a password) are written in one
transaction. Any failure leaves no trace.
"""

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.exceptions import InputValidationError, RegistrationConflictError
from policyhub.core.security import MIN_PASSWORD_LENGTH, hash_password
from policyhub.core.slug import SLUG_PATTERN, generate_slug
from policyhub.core.taxonomy import default_settings
from policyhub.db.config import atomic
from policyhub.db.models.organization import Organization
from policyhub.db.models.portal import Portal, PortalAccessType
from policyhub.db.models.setting import Setting
from policyhub.db.models.user import User, UserPassword, UserRole
from policyhub.db.repositories.organization import OrganizationRepository, PortalRepository
from policyhub.db.repositories.setting import SettingRepository
from policyhub.db.repositories.user import UserRepository

logger = structlog.get_logger()

MIN_REGISTRATION_SLUG_LENGTH = 3

DUPLICATE_NAME_MESSAGE = "An organization with this name already exists."
DUPLICATE_SLUG_MESSAGE = "This organization URL is already taken."
DUPLICATE_EMAIL_MESSAGE = "This email address is already in use."


def default_portals(organization_id: int) -> list[Portal]:
    """Build the public and internal portals every organization starts with."""
    return [
        Portal(
            organization_id=organization_id,
            name="Public Portal",
            slug="public",
            access_type=PortalAccessType.PUBLIC.value,
            is_active=True,
            description="Default public portal for sharing policies externally.",
        ),
        Portal(
            organization_id=organization_id,
            name="Internal Portal",
            slug="internal",
            access_type=PortalAccessType.AUTHENTICATED.value,
            is_active=True,
            description="Default internal portal for organization members.",
        ),
    ]


def _conflict_from_integrity_error(
    exc: IntegrityError, slug_message: str
) -> RegistrationConflictError:
    """Translate a unique-constraint violation into a user-facing conflict."""
    detail = str(exc.orig).lower()
    if "email" in detail:
        return RegistrationConflictError(DUPLICATE_EMAIL_MESSAGE, conflict="email")
    return RegistrationConflictError(slug_message, conflict="slug")


class OrganizationProvisioner:
    """Creates organizations together with their default portals and settings."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.organizations = OrganizationRepository(db)
        self.portals = PortalRepository(db)
        self.settings = SettingRepository(db)
        self.users = UserRepository(db)

    async def _seed_defaults(self, organization: Organization) -> None:
        """Insert default portals and taxonomy settings for a new organization."""
        await self.portals.add_many(default_portals(organization.id))
        await self.settings.add_many(
            [
                Setting(
                    organization_id=organization.id,
                    setting_key=default.key,
                    setting_value=default.value,
                    description=default.description,
                )
                for default in default_settings()
            ]
        )

    async def create_organization(self, name: str, domain: str | None = None) -> Organization:
        """Create an organization whose slug is derived from its name.

        Args:
            name: Display name
            domain: Optional email/web domain

        Returns:
            The created organization

        Raises:
            InputValidationError: If the name yields an empty slug
            RegistrationConflictError: If the derived slug is already taken
        """
        name = name.strip()
        slug = generate_slug(name)
        if not slug:
            raise InputValidationError(
                "Organization name must contain at least one letter or digit", field="name"
            )

        try:
            async with atomic(self.db):
                if await self.organizations.slug_exists(slug):
                    raise RegistrationConflictError(DUPLICATE_NAME_MESSAGE, conflict="slug")

                organization = await self.organizations.add(
                    Organization(name=name, slug=slug, domain=domain or None, is_active=True)
                )
                await self._seed_defaults(organization)
        except IntegrityError as exc:
            raise _conflict_from_integrity_error(exc, DUPLICATE_NAME_MESSAGE) from exc

        logger.info(
            "organization_created",
            organization_id=organization.id,
            name=organization.name,
            slug=organization.slug,
        )
        return organization

    async def register_organization(
        self,
        *,
        organization_name: str,
        organization_slug: str,
        admin_display_name: str,
        admin_email: str,
        admin_password: str,
        domain: str | None = None,
    ) -> Organization:
        """Self-service sign-up: create an organization and its first admin.

        Slug and email uniqueness are checked inside the transaction; the
        database constraints back the checks up under concurrency.

        Raises:
            InputValidationError: If the slug or password is malformed
            RegistrationConflictError: If the slug or email is already taken
        """
        if len(organization_slug) < MIN_REGISTRATION_SLUG_LENGTH:
            raise InputValidationError(
                "URL slug must be at least 3 characters.", field="organizationSlug"
            )
        if not SLUG_PATTERN.match(organization_slug):
            raise InputValidationError(
                "URL slug can only contain lowercase letters, numbers, and hyphens.",
                field="organizationSlug",
            )
        if len(admin_password) < MIN_PASSWORD_LENGTH:
            raise InputValidationError(
                "Password must be at least 8 characters.", field="adminPassword"
            )

        # Hash before opening the transaction
        password_hash = hash_password(admin_password)

        try:
            async with atomic(self.db):
                if await self.organizations.slug_exists(organization_slug):
                    raise RegistrationConflictError(DUPLICATE_SLUG_MESSAGE, conflict="slug")
                if await self.users.email_exists(admin_email):
                    raise RegistrationConflictError(DUPLICATE_EMAIL_MESSAGE, conflict="email")

                organization = await self.organizations.add(
                    Organization(
                        name=organization_name.strip(),
                        slug=organization_slug,
                        domain=domain or None,
                        is_active=True,
                    )
                )
                admin = await self.users.add(
                    User(
                        email=admin_email,
                        display_name=admin_display_name,
                        role=UserRole.ADMIN.value,
                        organization_id=organization.id,
                        is_active=True,
                    )
                )
                self.db.add(UserPassword(user_id=admin.id, password_hash=password_hash))
                await self._seed_defaults(organization)
        except IntegrityError as exc:
            raise _conflict_from_integrity_error(exc, DUPLICATE_SLUG_MESSAGE) from exc

        logger.info(
            "organization_registered",
            organization_id=organization.id,
            name=organization.name,
            admin_user_id=admin.id,
        )
        return organization
