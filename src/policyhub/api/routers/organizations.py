"""Organization endpoints: creation, registration, lookup, defaults migration."""

from fastapi import APIRouter, status

from policyhub.api.dependencies import AdminUser, DbSession
from policyhub.api.schemas.organizations import (
    CreateOrganizationRequest,
    CreateOrganizationResponse,
    MigrateDefaultsResponse,
    MigrationDetailResponse,
    OrganizationResponse,
    PublicOrganizationResponse,
    RegisterOrganizationRequest,
    RegisterOrganizationResponse,
)
from policyhub.organizations.lookup import get_active_organization_by_slug
from policyhub.organizations.migrator import DefaultsMigrator
from policyhub.organizations.provisioner import OrganizationProvisioner

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post(
    "/create",
    response_model=CreateOrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an organization (admin)",
)
async def create_organization(
    body: CreateOrganizationRequest,
    admin: AdminUser,
    db: DbSession,
) -> CreateOrganizationResponse:
    """Create an organization with default portals and taxonomy settings.

    The slug is derived from the name; an existing slug answers 400.
    """
    organization = await OrganizationProvisioner(db).create_organization(
        body.name, domain=body.domain
    )
    return CreateOrganizationResponse(
        organization=OrganizationResponse.model_validate(organization)
    )


@router.post(
    "/register",
    response_model=RegisterOrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new organization and its first admin",
)
async def register_organization(
    body: RegisterOrganizationRequest,
    db: DbSession,
) -> RegisterOrganizationResponse:
    organization = await OrganizationProvisioner(db).register_organization(
        organization_name=body.organization_name,
        organization_slug=body.organization_slug,
        domain=body.domain,
        admin_display_name=body.admin_display_name,
        admin_email=body.admin_email,
        admin_password=body.admin_password,
    )
    return RegisterOrganizationResponse(organization_slug=organization.slug)


@router.post(
    "/migrate-defaults",
    response_model=MigrateDefaultsResponse,
    summary="Back-fill default taxonomy settings (admin)",
)
async def migrate_defaults(admin: AdminUser, db: DbSession) -> MigrateDefaultsResponse:
    summary = await DefaultsMigrator(db).run()
    return MigrateDefaultsResponse(
        success=summary.success,
        message=summary.message,
        processed_organizations=summary.processed_organizations,
        updated_organizations=summary.updated_organizations,
        migration_details=[
            MigrationDetailResponse(
                organization_name=detail.organization_name,
                settings_added=detail.settings_added,
                settings_renamed=detail.settings_renamed,
            )
            for detail in summary.migration_details
        ],
        failed_organizations=summary.failed_organizations,
    )


@router.get(
    "/by-slug/{slug}",
    response_model=PublicOrganizationResponse,
    summary="Look up an active organization by slug",
)
async def get_organization_by_slug(slug: str, db: DbSession) -> PublicOrganizationResponse:
    organization = await get_active_organization_by_slug(db, slug)
    return PublicOrganizationResponse.model_validate(organization)
