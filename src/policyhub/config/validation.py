"""Configuration validation for startup checks.

Validates that required configuration is present and valid before the
application starts accepting requests.

Usage:
    from policyhub.config.validation import validate_or_raise

    # During startup
    validate_or_raise(settings)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from policyhub.config.settings import Settings, get_settings
from policyhub.utils.exceptions import ConfigurationError

logger = logging.getLogger("policyhub.config")


class ValidationSeverity(str, Enum):
    """Severity of configuration validation issues."""

    ERROR = "error"  # Must be fixed, app cannot start
    WARNING = "warning"  # Should be fixed, app can start but may have issues


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Validate application configuration.

    Args:
        settings: Settings to validate (default: global settings)

    Returns:
        List of validation results (empty if all checks pass)
    """
    if settings is None:
        settings = get_settings()

    results: list[ValidationResult] = []
    results.extend(_validate_database(settings))
    results.extend(_validate_sessions(settings))
    results.extend(_validate_environment(settings))
    return results


def validate_or_raise(settings: Settings | None = None) -> None:
    """Validate configuration and raise if errors found.

    Raises:
        ConfigurationError: If any validation errors are found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]

    if errors:
        error_messages = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{error_messages}")

    for warning in (r for r in results if r.severity == ValidationSeverity.WARNING):
        logger.warning(str(warning))


# =============================================================================
# Validators
# =============================================================================


def _validate_database(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    if not settings.DATABASE_URL:
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.ERROR,
                message="Database URL is not configured",
                suggestion="Set DATABASE_URL environment variable",
            )
        )
    elif not settings.DATABASE_URL.startswith(("postgresql", "sqlite")):
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.WARNING,
                message=f"Unexpected database type in URL: {settings.DATABASE_URL[:20]}...",
                suggestion="PolicyHub is designed for PostgreSQL or SQLite",
            )
        )
    elif settings.DATABASE_URL.startswith("sqlite") and settings.ENVIRONMENT == "production":
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.ERROR,
                message="SQLite is not supported in production",
                suggestion="Point DATABASE_URL at a PostgreSQL instance",
            )
        )

    return results


def _validate_sessions(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    if settings.ENVIRONMENT == "production" and not settings.SESSION_COOKIE_SECURE:
        results.append(
            ValidationResult(
                field="SESSION_COOKIE_SECURE",
                severity=ValidationSeverity.ERROR,
                message="Session cookies must be marked secure in production",
                suggestion="Set SESSION_COOKIE_SECURE=true",
            )
        )

    if settings.TEMP_TOKEN_TTL_SECONDS > 600:
        results.append(
            ValidationResult(
                field="TEMP_TOKEN_TTL_SECONDS",
                severity=ValidationSeverity.WARNING,
                message=(
                    f"Temporary tokens live for {settings.TEMP_TOKEN_TTL_SECONDS}s, "
                    "longer than needed for a redirect hand-off"
                ),
                suggestion="Keep temporary tokens under 10 minutes",
            )
        )

    if settings.SESSION_TTL_DAYS < 1:
        results.append(
            ValidationResult(
                field="SESSION_TTL_DAYS",
                severity=ValidationSeverity.ERROR,
                message="Session lifetime must be at least one day",
            )
        )

    return results


def _validate_environment(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        results.append(
            ValidationResult(
                field="DEBUG",
                severity=ValidationSeverity.ERROR,
                message="Debug mode must be disabled in production",
                suggestion="Set DEBUG=false for production",
            )
        )

    if settings.ENVIRONMENT == "production" and "*" in settings.CORS_ORIGINS:
        results.append(
            ValidationResult(
                field="CORS_ORIGINS",
                severity=ValidationSeverity.ERROR,
                message="Wildcard CORS origin not allowed with credentialed session cookies",
                suggestion="Specify exact allowed origins",
            )
        )

    return results


def get_configuration_summary(settings: Settings | None = None) -> dict[str, Any]:
    """Get a summary of current configuration (safe for logging).

    Excludes the database connection string.
    """
    if settings is None:
        settings = get_settings()

    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.log_level,
        "cors_origins_count": len(settings.CORS_ORIGINS),
        "database_pool_size": settings.DATABASE_POOL_SIZE,
        "session_ttl_days": settings.SESSION_TTL_DAYS,
        "temp_token_ttl_seconds": settings.TEMP_TOKEN_TTL_SECONDS,
    }
