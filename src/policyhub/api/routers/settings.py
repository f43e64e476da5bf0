"""Settings endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from policyhub.api.dependencies import AdminUser, DbSession, OptionalUser
from policyhub.api.schemas.settings import SettingResponse, UpdateSettingRequest
from policyhub.settings.store import SettingsStore

router = APIRouter(prefix="/settings", tags=["settings"])


@router.post("/update", response_model=SettingResponse, summary="Upsert a setting (admin)")
async def update_setting(
    body: UpdateSettingRequest,
    admin: AdminUser,
    db: DbSession,
) -> SettingResponse:
    """Write a setting for the admin's own organization."""
    setting = await SettingsStore(db).update(
        admin.organization_id, body.setting_key, body.setting_value
    )
    return SettingResponse.model_validate(setting)


@router.get("/get", response_model=SettingResponse | None, summary="Read one setting")
async def get_setting(
    user: OptionalUser,
    db: DbSession,
    setting_key: Annotated[str, Query(alias="settingKey")],
    organization_id: Annotated[int | None, Query(alias="organizationId")] = None,
) -> SettingResponse | None:
    """Read a setting; ``branding.*`` keys are public when organizationId is given."""
    setting = await SettingsStore(db).get(
        setting_key,
        caller_organization_id=user.organization_id if user else None,
        requested_organization_id=organization_id,
    )
    return SettingResponse.model_validate(setting) if setting else None


@router.get(
    "/get-many",
    response_model=dict[str, SettingResponse | None],
    summary="Read several settings",
)
async def get_many_settings(
    user: OptionalUser,
    db: DbSession,
    setting_keys: Annotated[list[str], Query(alias="settingKeys")],
    organization_id: Annotated[int | None, Query(alias="organizationId")] = None,
) -> dict[str, SettingResponse | None]:
    settings = await SettingsStore(db).get_many(
        setting_keys,
        caller_organization_id=user.organization_id if user else None,
        requested_organization_id=organization_id,
    )
    return {
        key: SettingResponse.model_validate(row) if row else None
        for key, row in settings.items()
    }
