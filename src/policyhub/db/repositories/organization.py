"""Organization and portal repositories."""

from sqlalchemy import select

from policyhub.db.models.organization import Organization
from policyhub.db.models.portal import Portal
from policyhub.db.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization, int]):
    """Repository for Organization model operations."""

    model = Organization

    async def get_by_slug(self, slug: str) -> Organization | None:
        """Get an organization by its unique slug."""
        stmt = select(Organization).where(Organization.slug == slug)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        """Check whether any organization already uses this slug."""
        stmt = select(Organization.id).where(Organization.slug == slug).limit(1)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def list_refs(self) -> list[tuple[int, str]]:
        """Return (id, name) for every organization, ordered by id.

        Plain tuples survive rollbacks that expire ORM instances.
        """
        stmt = select(Organization.id, Organization.name).order_by(Organization.id)
        result = await self.db.execute(stmt)
        return [(row.id, row.name) for row in result]


class PortalRepository(BaseRepository[Portal, int]):
    """Repository for Portal model operations."""

    model = Portal

    async def list_for_organization(self, organization_id: int) -> list[Portal]:
        """Get all portals of an organization, ordered by id."""
        stmt = (
            select(Portal)
            .where(Portal.organization_id == organization_id)
            .order_by(Portal.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
