"""Configuration module for PolicyHub."""

from policyhub.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
