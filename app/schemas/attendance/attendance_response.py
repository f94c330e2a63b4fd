# --- File: app/schemas/attendance/attendance_response.py ---
"""
Attendance summary schemas (today's status, monthly statistics).
"""

from datetime import date as Date
from typing import Optional

from pydantic import Field

from app.schemas.attendance.attendance_record import AttendanceRecordResponse
from app.schemas.common.base import BaseSchema

__all__ = [
    "AttendanceWindowInfo",
    "GeofenceInfo",
    "TodayAttendanceResponse",
    "AttendanceStatsResponse",
]


class AttendanceWindowInfo(BaseSchema):
    enabled: bool
    start_hour: int
    end_hour: int
    grace_minutes: int
    timezone: str
    description: str


class GeofenceInfo(BaseSchema):
    label: str
    center_latitude: float
    center_longitude: float
    radius_meters: float


class TodayAttendanceResponse(BaseSchema):
    """Whether the student has marked for the current session."""

    attendance_date: Date
    marked: bool
    record: Optional[AttendanceRecordResponse] = None
    window_open: bool
    can_mark: bool
    window: AttendanceWindowInfo
    geofence: GeofenceInfo


class AttendanceStatsResponse(BaseSchema):
    """Attendance for the current month up to today."""

    month: str = Field(..., description="YYYY-MM")
    present: int = Field(..., ge=0)
    absent: int = Field(..., ge=0)
    total_days: int = Field(..., ge=1)
    percentage: float = Field(..., ge=0, le=100)
