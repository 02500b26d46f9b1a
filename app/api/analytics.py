from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from app.api.dependencies import require_admin
from app.models.principal import Principal
from app.services import analytics_service
from app.services.store import store

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


class CategoryCountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    count: int


class DashboardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_users: int
    total_courses: int
    total_enrollments: int
    completed_enrollments: int
    completion_rate: int
    courses_by_category: list[CategoryCountOut]


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(_admin: Annotated[Principal, Depends(require_admin)]) -> DashboardOut:
    return DashboardOut.model_validate(analytics_service.dashboard(store))
