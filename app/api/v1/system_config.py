"""
Runtime hostel configuration: geofence, attendance window and gate pass
limits. Everyone may read it; only admins change it.
"""
from fastapi import APIRouter, Depends

from app.api import deps
from app.schemas.system import SystemConfigResponse, SystemConfigUpdate
from app.services.system.system_config_service import SystemConfigService

router = APIRouter(prefix="/system", tags=["System Configuration"])


@router.get("/config", response_model=SystemConfigResponse, summary="Current configuration")
def get_config(
    _: deps.CurrentUser = Depends(deps.get_current_user),
    service: SystemConfigService = Depends(deps.get_system_config_service),
) -> SystemConfigResponse:
    return SystemConfigResponse.model_validate(service.get_row())


@router.put("/config", response_model=SystemConfigResponse, summary="Update configuration")
def update_config(
    payload: SystemConfigUpdate,
    current_user: deps.CurrentUser = Depends(deps.require_admin),
    service: SystemConfigService = Depends(deps.get_system_config_service),
) -> SystemConfigResponse:
    service.update_config(payload.model_dump(exclude_unset=True), updated_by=current_user.id)
    return SystemConfigResponse.model_validate(service.get_row())
