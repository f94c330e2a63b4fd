# --- File: app/schemas/attendance/attendance_record.py ---
"""
Attendance request and response schemas.

Coordinates are accepted as plain floats; range checks happen in the
service so malformed locations surface as ``InvalidCoordinateError``.
"""

from datetime import date as Date, datetime
from typing import Optional

from pydantic import Field

from app.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "MarkAttendanceRequest",
    "ManualAttendanceRequest",
    "AttendanceRecordResponse",
]


class MarkAttendanceRequest(BaseSchema):
    """Student self-marking from a device location."""

    latitude: float = Field(..., description="Reported latitude in degrees")
    longitude: float = Field(..., description="Reported longitude in degrees")


class ManualAttendanceRequest(BaseSchema):
    """Warden override for a student who cannot mark from a device."""

    student_id: str = Field(..., min_length=1, max_length=64)
    notes: Optional[str] = Field(None, max_length=500)


class AttendanceRecordResponse(BaseResponseSchema):
    """
    Attendance record as returned by the API.
    """

    student_id: str
    attendance_date: Date = Field(..., description="Window-local attendance day")
    marked_at: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_from_center_meters: Optional[float] = None
    within_geofence: bool
    is_late: bool = Field(False, description="Marked during the grace period")
    late_minutes: Optional[int] = None
    manual_entry: bool = False
    marked_by: Optional[str] = None
    notes: Optional[str] = None
