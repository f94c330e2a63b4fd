# --- File: app/schemas/system/system_config.py ---
"""
System configuration schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common.base import BaseSchema

__all__ = [
    "SystemConfigResponse",
    "SystemConfigUpdate",
]


class SystemConfigResponse(BaseSchema):
    hostel_name: str
    hostel_latitude: float
    hostel_longitude: float
    geofence_radius_meters: float
    attendance_window_enabled: bool
    attendance_start_hour: int
    attendance_end_hour: int
    attendance_timezone: str
    max_gate_pass_days: int
    max_pending_passes: int
    attendance_grace_period: int = Field(..., description="Minutes")
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


class SystemConfigUpdate(BaseSchema):
    """
    Partial update; omitted fields keep their current value.

    Cross-field checks (valid timezone, coordinates together) run in the
    service against the merged configuration.
    """

    hostel_name: Optional[str] = Field(None, min_length=1, max_length=255)
    hostel_latitude: Optional[float] = None
    hostel_longitude: Optional[float] = None
    geofence_radius_meters: Optional[float] = Field(None, gt=0)
    attendance_window_enabled: Optional[bool] = None
    attendance_start_hour: Optional[int] = Field(None, ge=0, le=23)
    attendance_end_hour: Optional[int] = Field(None, ge=0, le=23)
    attendance_timezone: Optional[str] = None
    max_gate_pass_days: Optional[int] = Field(None, gt=0)
    max_pending_passes: Optional[int] = Field(None, gt=0)
    attendance_grace_period: Optional[int] = Field(None, ge=0)
