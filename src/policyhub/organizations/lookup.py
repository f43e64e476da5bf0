"""Public organization lookups."""

from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.exceptions import OrganizationNotFoundError
from policyhub.db.models.organization import Organization
from policyhub.db.repositories.organization import OrganizationRepository


async def get_active_organization_by_slug(db: AsyncSession, slug: str) -> Organization:
    """Find an active organization by slug.

    Raises:
        OrganizationNotFoundError: If no active organization has the slug
    """
    organization = await OrganizationRepository(db).get_by_slug(slug)
    if organization is None or not organization.is_active:
        raise OrganizationNotFoundError(slug)
    return organization
