"""Organization request/response schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from policyhub.api.schemas.base import CamelModel


class OrganizationResponse(CamelModel):
    """Full organization row."""

    id: int
    name: str
    slug: str
    domain: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PublicOrganizationResponse(CamelModel):
    """Organization fields safe to expose without a session."""

    id: int
    name: str
    slug: str
    domain: str | None = None
    is_active: bool


class CreateOrganizationRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    domain: str | None = Field(default=None, max_length=255)


class CreateOrganizationResponse(CamelModel):
    organization: OrganizationResponse


class RegisterOrganizationRequest(CamelModel):
    """Self-service sign-up of a new organization and its first admin."""

    organization_name: str = Field(..., min_length=1, max_length=255)
    organization_slug: str = Field(..., min_length=3, max_length=100, pattern=r"^[a-z0-9-]+$")
    domain: str | None = Field(default=None, max_length=255)
    admin_display_name: str = Field(..., min_length=1, max_length=255)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=8)


class RegisterOrganizationResponse(CamelModel):
    organization_slug: str


class MigrationDetailResponse(CamelModel):
    organization_name: str
    settings_added: list[str]
    settings_renamed: list[str] = Field(default_factory=list)


class MigrateDefaultsResponse(CamelModel):
    """Summary of a default-settings back-fill run."""

    success: bool
    message: str
    processed_organizations: int
    updated_organizations: int
    migration_details: list[MigrationDetailResponse]
    failed_organizations: list[str] = Field(default_factory=list)
