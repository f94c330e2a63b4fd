"""
Attendance service layer.

Provides business logic for:
- Evaluating the attendance window and grace period
- Marking geofenced attendance (one record per student per day)
- Warden manual attendance
- History, monthly statistics and daily listings

``AttendanceService`` lives in ``attendance_service``; the package itself
only exposes the pure window policy.
"""

from app.services.attendance.attendance_window_policy import (
    AttendanceWindowConfig,
    TimingClassification,
    attendance_date_for,
    classify_timing,
    is_window_open,
)

__all__ = [
    "AttendanceWindowConfig",
    "TimingClassification",
    "attendance_date_for",
    "classify_timing",
    "is_window_open",
]
