"""Site settings: public listing (secrets masked), resolved map for rendering, admin upsert."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogcms.api.deps import SettingsDep, require_route
from blogcms.core.database import get_db
from blogcms.schemas.auth import CurrentUser
from blogcms.schemas.setting import PublicSettingsResponse, SettingRead, SettingUpdateRequest
from blogcms.services import settings as settings_service
from blogcms.services.assets import api_base_from_raw

router = APIRouter()


@router.get("", response_model=list[SettingRead])
def list_settings(db: Annotated[Session, Depends(get_db)]) -> list[SettingRead]:
    """All settings ordered by key; smtp_password (any spelling) is masked."""
    return [SettingRead.model_validate(s) for s in settings_service.list_settings(db)]


@router.get("/public", response_model=PublicSettingsResponse)
def public_settings(
    db: Annotated[Session, Depends(get_db)],
    settings: SettingsDep,
) -> PublicSettingsResponse:
    """
    Settings as pages consume them: keys normalized with canonical spellings
    preferred, secrets masked, logo/favicon paths resolved to URLs.
    """
    api_base = api_base_from_raw(settings.PUBLIC_API_URL)
    return PublicSettingsResponse(
        settings=settings_service.public_settings(db, api_base),
        api_base=api_base,
    )


@router.put("/{key}", response_model=SettingRead)
def update_setting(
    key: str,
    body: SettingUpdateRequest,
    _admin: Annotated[CurrentUser, Depends(require_route("settings.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> SettingRead:
    """Create or update a setting (admin only). Omitting type keeps the stored one."""
    row = settings_service.update_setting(db, key, body.value, body.type)
    return SettingRead(
        id=row.id,
        key=row.key,
        value=settings_service.mask_value(row.key, row.value),
        type=row.type,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
