"""Back-fill default taxonomy settings for existing organizations.

Organizations created before the taxonomy defaults existed, or by an older
job that used underscore key names, are brought up to date here. The run
is idempotent: a second pass finds nothing to do.
"""

from dataclasses import dataclass, field

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.logging import LogContext
from policyhub.core.taxonomy import LEGACY_SETTING_KEYS, default_settings
from policyhub.db.config import atomic
from policyhub.db.models.setting import Setting
from policyhub.db.repositories.organization import OrganizationRepository
from policyhub.db.repositories.setting import SettingRepository

logger = structlog.get_logger()


@dataclass
class OrganizationMigration:
    """What the migrator changed for one organization."""

    organization_name: str
    settings_added: list[str] = field(default_factory=list)
    settings_renamed: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.settings_added or self.settings_renamed)


@dataclass
class MigrationSummary:
    """Result of a full migrator run."""

    processed_organizations: int = 0
    updated_organizations: int = 0
    migration_details: list[OrganizationMigration] = field(default_factory=list)
    failed_organizations: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_organizations

    @property
    def message(self) -> str:
        text = (
            f"Migration completed. {self.updated_organizations} of "
            f"{self.processed_organizations} organizations were updated with default settings."
        )
        if self.failed_organizations:
            text += f" {len(self.failed_organizations)} failed."
        return text


class DefaultsMigrator:
    """Ensures every organization carries the default taxonomy settings.

    Organizations are processed sequentially, each in its own transaction,
    so a failure rolls back only that organization.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.organizations = OrganizationRepository(db)
        self.settings = SettingRepository(db)

    async def _migrate_organization(self, organization_id: int, name: str) -> OrganizationMigration:
        migration = OrganizationMigration(organization_name=name)
        defaults = default_settings()
        canonical_keys = [default.key for default in defaults]

        async with atomic(self.db):
            existing = await self.settings.existing_keys(
                organization_id, canonical_keys + list(LEGACY_SETTING_KEYS)
            )

            for legacy_key, canonical_key in LEGACY_SETTING_KEYS.items():
                if legacy_key in existing and canonical_key not in existing:
                    await self.settings.rename_key(organization_id, legacy_key, canonical_key)
                    existing.add(canonical_key)
                    migration.settings_renamed.append(canonical_key)

            missing = [default for default in defaults if default.key not in existing]
            if missing:
                await self.settings.add_many(
                    [
                        Setting(
                            organization_id=organization_id,
                            setting_key=default.key,
                            setting_value=default.value,
                            description=default.description,
                        )
                        for default in missing
                    ]
                )
                migration.settings_added.extend(default.key for default in missing)

        return migration

    async def run(self) -> MigrationSummary:
        """Migrate every organization and report what changed."""
        summary = MigrationSummary()
        organizations = await self.organizations.list_refs()

        for organization_id, name in organizations:
            summary.processed_organizations += 1
            with LogContext(organization_id=organization_id):
                try:
                    migration = await self._migrate_organization(organization_id, name)
                except SQLAlchemyError as exc:
                    logger.error(
                        "default_settings_migration_failed",
                        organization_name=name,
                        error=str(exc),
                    )
                    summary.failed_organizations.append(name)
                    continue

                if migration.changed:
                    summary.updated_organizations += 1
                    summary.migration_details.append(migration)
                    logger.info(
                        "default_settings_migrated",
                        organization_name=name,
                        settings_added=migration.settings_added,
                        settings_renamed=migration.settings_renamed,
                    )

        logger.info(
            "default_settings_migration_completed",
            processed=summary.processed_organizations,
            updated=summary.updated_organizations,
            failed=len(summary.failed_organizations),
        )
        return summary
