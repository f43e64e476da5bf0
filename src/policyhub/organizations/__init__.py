"""Organization provisioning, lookup and default-settings migration."""

from policyhub.organizations.lookup import get_active_organization_by_slug
from policyhub.organizations.migrator import (
    DefaultsMigrator,
    MigrationSummary,
    OrganizationMigration,
)
from policyhub.organizations.provisioner import OrganizationProvisioner, default_portals

__all__ = [
    "DefaultsMigrator",
    "MigrationSummary",
    "OrganizationMigration",
    "OrganizationProvisioner",
    "default_portals",
    "get_active_organization_by_slug",
]
