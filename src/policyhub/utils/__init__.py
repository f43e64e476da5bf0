"""Utility modules for PolicyHub."""

from policyhub.utils.exceptions import ConfigurationError, PolicyHubError

__all__ = [
    "PolicyHubError",
    "ConfigurationError",
]
