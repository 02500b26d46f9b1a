from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from app.api.dependencies import require_admin
from app.api.errors import http_error
from app.api.schemas import EMAIL_PATTERN
from app.core.errors import DomainError
from app.models.principal import Principal
from app.services import site_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    site_name: str
    site_description: str
    contact_email: str
    enable_registration: bool
    maintenance_mode: bool


class SettingsUpdateIn(BaseModel):
    site_name: str | None = Field(default=None, min_length=1)
    site_description: str | None = Field(default=None, min_length=1)
    contact_email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    enable_registration: bool | None = None
    maintenance_mode: bool | None = None


@router.get("", response_model=SettingsOut)
def get_settings(_admin: Annotated[Principal, Depends(require_admin)]) -> SettingsOut:
    return SettingsOut.model_validate(site_settings.get_settings())


@router.put("", response_model=SettingsOut)
def put_settings(
    payload: SettingsUpdateIn,
    admin: Annotated[Principal, Depends(require_admin)],
) -> SettingsOut:
    try:
        updated = site_settings.update_settings(
            **payload.model_dump(exclude_unset=True, exclude_none=True)
        )
    except DomainError as e:
        raise http_error(e) from None
    logger.info("Settings changed by user=%d", admin.user_id)
    return SettingsOut.model_validate(updated)
