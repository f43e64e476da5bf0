"""Organization settings store.

Settings are JSON values keyed by (organization_id, setting_key). Admins
write them through an upsert; reads are scoped to the caller's
organization, except ``branding.*`` keys, which public pages may read for
any organization they name explicitly.
"""

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.exceptions import AuthenticationError, InputValidationError
from policyhub.db.config import atomic
from policyhub.db.models.setting import Setting
from policyhub.db.repositories.setting import SettingRepository

logger = structlog.get_logger()

PUBLIC_KEY_PREFIX = "branding."
MAX_SETTING_KEY_LENGTH = 255


def is_public_key(setting_key: str) -> bool:
    """Branding keys may be read without a session."""
    return setting_key.startswith(PUBLIC_KEY_PREFIX)


def validate_setting_key(setting_key: str) -> str:
    """Check a setting key is non-empty and fits the column.

    Raises:
        InputValidationError: If the key is blank or too long
    """
    if not setting_key or not setting_key.strip():
        raise InputValidationError("Setting key is required", field="settingKey")
    if len(setting_key) > MAX_SETTING_KEY_LENGTH:
        raise InputValidationError(
            f"Setting key must be at most {MAX_SETTING_KEY_LENGTH} characters",
            field="settingKey",
        )
    return setting_key


class SettingsStore:
    """Reads and writes organization settings."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = SettingRepository(db)

    async def update(self, organization_id: int, setting_key: str, setting_value: Any) -> Setting:
        """Upsert a setting for an organization.

        Repeated updates of the same key leave exactly one row holding the
        latest value, with updated_at refreshed.
        """
        validate_setting_key(setting_key)

        async with atomic(self.db):
            setting = await self.settings.upsert(organization_id, setting_key, setting_value)

        logger.info(
            "setting_updated",
            organization_id=organization_id,
            setting_key=setting_key,
        )
        return setting

    def _resolve_organization(
        self,
        setting_keys: Sequence[str],
        caller_organization_id: int | None,
        requested_organization_id: int | None,
    ) -> int:
        """Pick the organization a read is allowed to target.

        Public branding reads honour an explicit organization id. Anything
        else is pinned to the caller's own organization.

        Raises:
            AuthenticationError: If a non-public key is read without a session
        """
        all_public = all(is_public_key(key) for key in setting_keys)
        if all_public and requested_organization_id is not None:
            return requested_organization_id
        if caller_organization_id is None:
            raise AuthenticationError()
        return caller_organization_id

    async def get(
        self,
        setting_key: str,
        *,
        caller_organization_id: int | None,
        requested_organization_id: int | None = None,
    ) -> Setting | None:
        """Read one setting, or None when it has never been written."""
        validate_setting_key(setting_key)
        organization_id = self._resolve_organization(
            [setting_key], caller_organization_id, requested_organization_id
        )
        return await self.settings.get_by_key(organization_id, setting_key)

    async def get_many(
        self,
        setting_keys: Sequence[str],
        *,
        caller_organization_id: int | None,
        requested_organization_id: int | None = None,
    ) -> dict[str, Setting | None]:
        """Read several settings at once.

        Returns:
            Mapping of every requested key to its row, or None if unset
        """
        if not setting_keys:
            raise InputValidationError("At least one setting key is required", field="settingKeys")
        for key in setting_keys:
            validate_setting_key(key)

        organization_id = self._resolve_organization(
            setting_keys, caller_organization_id, requested_organization_id
        )
        found = await self.settings.get_by_keys(organization_id, setting_keys)
        return {key: found.get(key) for key in setting_keys}
