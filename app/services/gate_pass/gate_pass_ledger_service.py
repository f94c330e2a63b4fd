"""
Entry/exit ledger.

Read-only projections over gate passes for guards and wardens. Nothing
here writes: "students out" and "late returns" are derived from the exit
and entry timestamps stored on each pass.
"""

import enum
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.base.enums import GatePassStatus
from app.models.gate_pass.gate_pass import GatePass
from app.repositories.gate_pass import GatePassLogRepository, GatePassRepository
from app.services.base.base_service import BaseService
from app.services.system.system_config_service import SystemConfigService
from app.utils.datetime_utils import DateTimeHelper, coerce_utc


class QrValidationStatus(str, enum.Enum):
    VALID = "VALID"
    INVALID = "INVALID"
    NOT_STARTED = "NOT_STARTED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class StudentOut:
    gate_pass: GatePass
    exit_time: datetime
    is_expired: bool


@dataclass(frozen=True)
class LateReturn:
    gate_pass: GatePass
    late_duration: timedelta

    @property
    def late_label(self) -> str:
        return DateTimeHelper.humanize_late_duration(self.late_duration)


@dataclass(frozen=True)
class QrValidation:
    status: QrValidationStatus
    gate_pass: Optional[GatePass]
    is_student_outside: bool
    message: str

    @property
    def valid(self) -> bool:
        return self.status == QrValidationStatus.VALID


class GatePassLedgerService(BaseService):
    """
    Guard and warden views of who is out, who came back late and what
    happened at the gate.
    """

    def __init__(self, db_session: Session, config_service: Optional[SystemConfigService] = None):
        super().__init__(db_session)
        self.repository = GatePassRepository(db_session)
        self.log_repository = GatePassLogRepository(db_session)
        self.config_service = config_service or SystemConfigService(db_session)

    def students_out(self, now: Optional[datetime] = None) -> List[StudentOut]:
        """Passes with an exit and no entry, most recent exit first."""
        now = DateTimeHelper.ensure_utc(now) if now else DateTimeHelper.utcnow()
        return [
            StudentOut(
                gate_pass=gate_pass,
                exit_time=coerce_utc(gate_pass.exit_time),
                is_expired=now > coerce_utc(gate_pass.to_date),
            )
            for gate_pass in self.repository.find_students_out()
        ]

    def late_returns(self, limit: int = 100) -> List[LateReturn]:
        """Closed passes returned after ``to_date``, with how late they were."""
        return [
            LateReturn(
                gate_pass=gate_pass,
                late_duration=coerce_utc(gate_pass.entry_time) - coerce_utc(gate_pass.to_date),
            )
            for gate_pass in self.repository.find_late_returns(limit=limit)
        ]

    def recent_entries(self, since: Optional[datetime] = None, limit: int = 100) -> List[GatePass]:
        """
        Entries recorded since ``since``.

        Defaults to local midnight of today in the hostel's attendance
        timezone.
        """
        if since is None:
            tz_name = self.config_service.get_config().window.timezone
            today = DateTimeHelper.local_date(DateTimeHelper.utcnow(), tz_name)
            since = DateTimeHelper.start_of_day(today, tz_name)
        return self.repository.find_entries_since(DateTimeHelper.ensure_utc(since), limit=limit)

    def validate_qr(self, qr_value: str, now: Optional[datetime] = None) -> QrValidation:
        """
        Check a scanned pass code at the gate.

        Only approved passes validate. An expired pass is reported as
        such even when the student is still outside, so the guard can
        flag the late return while recording the entry.
        """
        now = DateTimeHelper.ensure_utc(now) if now else DateTimeHelper.utcnow()
        gate_pass = self.repository.find_by_qr(qr_value.strip().upper())

        if gate_pass is None or GatePassStatus(gate_pass.status) != GatePassStatus.APPROVED:
            self._logger.warning(f"validate_qr: no approved pass for code {qr_value}")
            return QrValidation(
                status=QrValidationStatus.INVALID,
                gate_pass=None,
                is_student_outside=False,
                message="Invalid or expired pass",
            )

        is_outside = gate_pass.is_out
        if now > coerce_utc(gate_pass.to_date):
            status = QrValidationStatus.EXPIRED
            message = "Pass expired - Student is still outside!" if is_outside else "Pass has expired"
        elif now < coerce_utc(gate_pass.from_date):
            status = QrValidationStatus.NOT_STARTED
            message = f"Pass not valid yet - starts on {coerce_utc(gate_pass.from_date).date().isoformat()}"
        else:
            status = QrValidationStatus.VALID
            message = "Gate pass validated"

        self._logger.info(f"validate_qr: pass_id={gate_pass.id} -> {status.value}")
        return QrValidation(
            status=status,
            gate_pass=gate_pass,
            is_student_outside=is_outside,
            message=message,
        )

    def activity_logs(self, page: int = 1, page_size: int = 50) -> Dict[str, Any]:
        """Gate activity, newest first."""
        page = max(1, page)
        page_size = max(1, min(page_size, 200))
        total = self.log_repository.count()
        items = self.log_repository.list_recent(skip=(page - 1) * page_size, limit=page_size)
        return {
            "items": items,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size) if total else 0,
        }
