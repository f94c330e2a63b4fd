# --- File: app/models/attendance/attendance_record.py ---
"""
Attendance record model.

One row per student per attendance day, holding the location and time
the attendance was verified with. Rows are written once and never
updated.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base.base_model import TimestampModel

__all__ = [
    "AttendanceRecord",
]


class AttendanceRecord(TimestampModel):
    """
    Daily attendance record with geolocation audit data.
    """

    __tablename__ = "attendance_records"

    student_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    attendance_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="Window-local day of the attendance session",
    )
    marked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Geolocation data
    latitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )
    longitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )
    distance_from_center_meters: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )
    within_geofence: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # Late tracking
    is_late: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
    )
    late_minutes: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    # Warden override
    manual_entry: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    marked_by: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "attendance_date",
            name="uq_student_attendance_date",
        ),
        CheckConstraint(
            "late_minutes IS NULL OR (late_minutes >= 0 AND late_minutes <= 1440)",
            name="ck_attendance_late_minutes_range",
        ),
        CheckConstraint(
            "latitude IS NULL OR (latitude >= -90 AND latitude <= 90)",
            name="ck_attendance_latitude_range",
        ),
        CheckConstraint(
            "longitude IS NULL OR (longitude >= -180 AND longitude <= 180)",
            name="ck_attendance_longitude_range",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<AttendanceRecord(student_id={self.student_id}, "
            f"date={self.attendance_date}, late={self.is_late})>"
        )
