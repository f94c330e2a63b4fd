# --- File: app/repositories/attendance/attendance_record_repository.py ---
"""
Attendance record repository.

Records are inserted once and never updated. The
``(student_id, attendance_date)`` unique constraint is the final word on
duplicates; ``create_record`` surfaces a violation as
``DuplicateEntityError`` after rolling the session back.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import handle_database_exception
from app.models.attendance.attendance_record import AttendanceRecord
from app.repositories.base.base_repository import BaseRepository


class AttendanceRecordRepository(BaseRepository[AttendanceRecord]):
    """
    Repository for attendance record operations.
    """

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy database session
        """
        super().__init__(AttendanceRecord, session)

    # ==================== Core Operations ====================

    def create_record(self, record: AttendanceRecord) -> AttendanceRecord:
        """
        Insert and commit a new attendance record.

        Raises:
            DuplicateEntityError: If the student already has a record for that day
        """
        return self.create(record, commit=True)

    def find_for_day(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        """
        Get the student's record for a given attendance day.

        Args:
            student_id: Student identifier
            attendance_date: Window-local attendance day

        Returns:
            Attendance record if it exists
        """
        try:
            return (
                self.db.query(AttendanceRecord)
                .filter(
                    AttendanceRecord.student_id == student_id,
                    AttendanceRecord.attendance_date == attendance_date,
                )
                .first()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_for_day") from e

    # ==================== Query Operations ====================

    def get_student_history(
        self,
        student_id: str,
        skip: int = 0,
        limit: int = 30,
    ) -> List[AttendanceRecord]:
        """
        Student's records, newest first.

        Args:
            student_id: Student identifier
            skip: Number of records to skip
            limit: Maximum number of records

        Returns:
            List of attendance records
        """
        try:
            return (
                self.db.query(AttendanceRecord)
                .filter(AttendanceRecord.student_id == student_id)
                .order_by(AttendanceRecord.attendance_date.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "get_student_history") from e

    def count_for_student(self, student_id: str) -> int:
        return self.count({"student_id": student_id})

    def count_days_present(self, student_id: str, start_date: date, end_date: date) -> int:
        """Number of distinct attendance days in ``[start_date, end_date]``."""
        try:
            return (
                self.db.query(func.count(func.distinct(AttendanceRecord.attendance_date)))
                .filter(
                    AttendanceRecord.student_id == student_id,
                    AttendanceRecord.attendance_date >= start_date,
                    AttendanceRecord.attendance_date <= end_date,
                )
                .scalar()
                or 0
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "count_days_present") from e

    def list_for_date(self, attendance_date: date) -> List[AttendanceRecord]:
        """All records for one attendance day, in the order they were marked."""
        try:
            return (
                self.db.query(AttendanceRecord)
                .filter(AttendanceRecord.attendance_date == attendance_date)
                .order_by(AttendanceRecord.marked_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "list_for_date") from e
