from app.schemas.attendance.attendance_record import (
    AttendanceRecordResponse,
    ManualAttendanceRequest,
    MarkAttendanceRequest,
)
from app.schemas.attendance.attendance_response import (
    AttendanceStatsResponse,
    TodayAttendanceResponse,
)

__all__ = [
    "AttendanceRecordResponse",
    "ManualAttendanceRequest",
    "MarkAttendanceRequest",
    "AttendanceStatsResponse",
    "TodayAttendanceResponse",
]
