"""Per-organization JSON settings."""

from policyhub.settings.store import SettingsStore, is_public_key, validate_setting_key

__all__ = ["SettingsStore", "is_public_key", "validate_setting_key"]
