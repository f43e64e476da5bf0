"""Custom exceptions for PolicyHub."""


class PolicyHubError(Exception):
    """Base exception for all PolicyHub errors."""

    pass


class ConfigurationError(PolicyHubError):
    """Error in configuration or settings."""

    pass
