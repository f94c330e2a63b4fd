"""
Core attendance service for geofenced attendance marking.

Handles:
- Student self-marking, verified against the attendance window and
  the hostel geofence
- Warden manual marking (window and geofence skipped)
- Today's status, history, monthly statistics and daily listings

Checks run in a fixed order: coordinates, window, geofence, then the
one-record-per-day rule. The database unique constraint on
``(student_id, attendance_date)`` is what finally decides duplicates; a
violation from a concurrent writer is reported as ``AlreadyMarkedError``.
"""

import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    AlreadyMarkedError,
    DuplicateEntityError,
    OutOfRangeError,
    WindowClosedError,
)
from app.models.attendance.attendance_record import AttendanceRecord
from app.repositories.attendance import AttendanceRecordRepository
from app.services.attendance.attendance_window_policy import (
    attendance_date_for,
    classify_timing,
    describe_window,
    is_window_open,
)
from app.services.base.base_service import BaseService
from app.services.system.system_config_service import SystemConfigService, SystemConfigSnapshot
from app.utils.datetime_utils import DateTimeHelper
from app.utils.geo_utils import GeoPoint, is_within_geofence


class AttendanceService(BaseService):
    """
    Service for marking attendance and reading attendance summaries.

    Every operation evaluates against a ``SystemConfigSnapshot``. Callers
    may pass one explicitly; otherwise it is read fresh from the
    system config row for each call.
    """

    def __init__(
        self,
        db_session: Session,
        config_service: Optional[SystemConfigService] = None,
    ):
        """
        Initialize attendance service.

        Args:
            db_session: SQLAlchemy database session
            config_service: Source of the current system configuration
        """
        super().__init__(db_session)
        self.repository = AttendanceRecordRepository(db_session)
        self.config_service = config_service or SystemConfigService(db_session)

    def _resolve_config(self, config: Optional[SystemConfigSnapshot]) -> SystemConfigSnapshot:
        return config if config is not None else self.config_service.get_config()

    # -------------------------------------------------------------------------
    # Marking
    # -------------------------------------------------------------------------

    def mark_attendance(
        self,
        student_id: str,
        latitude: float,
        longitude: float,
        timestamp: Optional[datetime] = None,
        config: Optional[SystemConfigSnapshot] = None,
    ) -> AttendanceRecord:
        """
        Mark a student's attendance from a reported GPS location.

        Args:
            student_id: Student marking attendance
            latitude: Reported latitude in degrees
            longitude: Reported longitude in degrees
            timestamp: Time of the attempt (defaults to now, naive means UTC)
            config: Configuration to evaluate against (defaults to the stored one)

        Returns:
            The stored attendance record

        Raises:
            InvalidCoordinateError: Malformed or out-of-range coordinates
            WindowClosedError: Outside the window and its grace period
            OutOfRangeError: Outside the hostel geofence
            AlreadyMarkedError: Attendance already exists for the day
            DatabaseError: Storage failure
        """
        operation = "mark_attendance"
        point = GeoPoint(latitude, longitude)
        cfg = self._resolve_config(config)
        now = DateTimeHelper.ensure_utc(timestamp) if timestamp else DateTimeHelper.utcnow()

        self._logger.info(
            f"{operation}: student_id={student_id}, lat={latitude}, lon={longitude}, at={now.isoformat()}"
        )

        timing = classify_timing(now, cfg.window)
        if not timing.permitted:
            self._logger.warning(f"{operation}: window closed for student_id={student_id}")
            raise WindowClosedError(
                f"Attendance can only be marked between {describe_window(cfg.window)}",
                start_hour=cfg.window.start_hour,
                end_hour=cfg.window.end_hour,
                timezone=cfg.window.timezone,
            )

        geofence = is_within_geofence(point, cfg.geofence)
        if not geofence.within_geofence:
            self._logger.warning(
                f"{operation}: student_id={student_id} is {geofence.distance_meters:.1f}m "
                f"from {cfg.geofence.label} (radius {cfg.geofence.radius_meters}m)"
            )
            raise OutOfRangeError(geofence.distance_meters, cfg.geofence.radius_meters)

        attendance_date = attendance_date_for(now, cfg.window)
        self._ensure_not_marked(student_id, attendance_date)

        record = AttendanceRecord(
            student_id=student_id,
            attendance_date=attendance_date,
            marked_at=now,
            latitude=latitude,
            longitude=longitude,
            distance_from_center_meters=round(geofence.distance_meters, 2),
            within_geofence=True,
            is_late=not timing.on_time,
            late_minutes=timing.late_minutes if not timing.on_time else None,
            manual_entry=False,
            marked_by=student_id,
        )
        record = self._insert(record)

        self._logger.info(
            f"{operation}: recorded student_id={student_id}, date={attendance_date}, late={record.is_late}"
        )
        return record

    def mark_manual_attendance(
        self,
        student_id: str,
        marked_by: str,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
        config: Optional[SystemConfigSnapshot] = None,
    ) -> AttendanceRecord:
        """
        Warden override: record attendance without window or geofence checks.

        The one-record-per-day rule still applies.
        """
        cfg = self._resolve_config(config)
        now = DateTimeHelper.ensure_utc(timestamp) if timestamp else DateTimeHelper.utcnow()
        attendance_date = attendance_date_for(now, cfg.window)

        self._logger.info(
            f"mark_manual_attendance: student_id={student_id}, marked_by={marked_by}, date={attendance_date}"
        )
        self._ensure_not_marked(student_id, attendance_date)

        record = AttendanceRecord(
            student_id=student_id,
            attendance_date=attendance_date,
            marked_at=now,
            within_geofence=False,
            is_late=False,
            manual_entry=True,
            marked_by=marked_by,
            notes=notes,
        )
        record = self._insert(record)

        self._audit.info(
            "attendance_manual_override",
            student_id=student_id,
            marked_by=marked_by,
            attendance_date=attendance_date.isoformat(),
        )
        return record

    def _ensure_not_marked(self, student_id: str, attendance_date: date) -> None:
        if self.repository.find_for_day(student_id, attendance_date) is not None:
            self._logger.warning(f"Attendance already marked: student_id={student_id}, date={attendance_date}")
            raise AlreadyMarkedError(student_id, attendance_date.isoformat())

    def _insert(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            return self.repository.create_record(record)
        except DuplicateEntityError as e:
            # Lost the race against a concurrent submission for the same day
            self._logger.warning(
                f"Concurrent attendance insert rejected: student_id={record.student_id}, "
                f"date={record.attendance_date}"
            )
            raise AlreadyMarkedError(record.student_id, record.attendance_date.isoformat()) from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_today_status(
        self,
        student_id: str,
        now: Optional[datetime] = None,
        config: Optional[SystemConfigSnapshot] = None,
    ) -> Dict[str, Any]:
        """
        Whether the student has marked for the current session, plus the
        window and geofence details the client displays.
        """
        cfg = self._resolve_config(config)
        now = DateTimeHelper.ensure_utc(now) if now else DateTimeHelper.utcnow()
        attendance_date = attendance_date_for(now, cfg.window)
        record = self.repository.find_for_day(student_id, attendance_date)
        timing = classify_timing(now, cfg.window)

        return {
            "attendance_date": attendance_date,
            "marked": record is not None,
            "record": record,
            "window_open": is_window_open(now, cfg.window),
            "can_mark": record is None and timing.permitted,
            "window": {
                "enabled": cfg.window.enabled,
                "start_hour": cfg.window.start_hour,
                "end_hour": cfg.window.end_hour,
                "grace_minutes": cfg.window.grace_minutes,
                "timezone": cfg.window.timezone,
                "description": describe_window(cfg.window),
            },
            "geofence": {
                "label": cfg.geofence.label,
                "center_latitude": cfg.geofence.center_latitude,
                "center_longitude": cfg.geofence.center_longitude,
                "radius_meters": cfg.geofence.radius_meters,
            },
        }

    def get_history(self, student_id: str, page: int = 1, page_size: int = 30) -> Dict[str, Any]:
        """Student's attendance, newest first."""
        page = max(1, page)
        page_size = max(1, min(page_size, 100))
        total = self.repository.count_for_student(student_id)
        items = self.repository.get_student_history(
            student_id,
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return {
            "items": items,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size) if total else 0,
        }

    def get_monthly_stats(
        self,
        student_id: str,
        now: Optional[datetime] = None,
        config: Optional[SystemConfigSnapshot] = None,
    ) -> Dict[str, Any]:
        """
        Attendance for the current month up to and including today.

        "Today" is the current attendance day in the window's timezone.
        """
        cfg = self._resolve_config(config)
        now = DateTimeHelper.ensure_utc(now) if now else DateTimeHelper.utcnow()
        today = attendance_date_for(now, cfg.window)
        month_start = today.replace(day=1)

        total_days = today.day
        present = self.repository.count_days_present(student_id, month_start, today)
        absent = max(0, total_days - present)

        return {
            "month": today.strftime("%Y-%m"),
            "present": present,
            "absent": absent,
            "total_days": total_days,
            "percentage": round(present / total_days * 100, 2),
        }

    def list_for_date(self, attendance_date: date) -> List[AttendanceRecord]:
        return self.repository.list_for_date(attendance_date)
