"""
Gate pass lifecycle service.

Handles:
- Pass creation with duration and pending-count limits
- Parent and warden decisions
- Guard-recorded exit and entry, with late-return detection
- Student and approver queries

Every state change is a conditional update that names the status the
caller acted on. If another request changed the pass first the update
touches no rows and the caller gets ``InvalidStateError``; nothing is
retried here.
"""

import math
import threading
import uuid
import zlib
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    DurationExceededError,
    GatePassNotFoundError,
    InvalidDateRangeError,
    InvalidStateError,
    TooManyPendingError,
    ValidationError,
)
from app.models.base.enums import GatePassStatus
from app.models.gate_pass.gate_pass import GatePass, GatePassLog
from app.repositories.gate_pass import GatePassLogRepository, GatePassRepository
from app.services.base.base_service import BaseService
from app.services.gate_pass.gate_pass_state import (
    GatePassLimits,
    MovementGuard,
    Transition,
    lift,
)
from app.services.student.parent_link_service import ParentLinkService
from app.services.system.system_config_service import SystemConfigService
from app.utils.datetime_utils import DateRangeCalculator, DateTimeHelper

MIN_REASON_LENGTH = 5
MAX_REASON_LENGTH = 500


class _StudentLocks:
    """
    Fixed pool of locks shared by all service instances.

    A student id always maps to the same stripe; unrelated students may
    share one, which only serializes them briefly.
    """

    def __init__(self, stripes: int = 64):
        self._locks = [threading.Lock() for _ in range(stripes)]

    def lock_for(self, student_id: str) -> threading.Lock:
        return self._locks[zlib.crc32(student_id.encode("utf-8")) % len(self._locks)]

    @contextmanager
    def hold(self, student_id: str):
        with self.lock_for(student_id):
            yield


_student_locks = _StudentLocks()


def generate_qr_value() -> str:
    """Guard-scannable pass code, e.g. ``GP-1A2B3C4D``."""
    return f"GP-{uuid.uuid4().hex[:8].upper()}"


class GatePassService(BaseService):
    """
    Service driving gate passes through their lifecycle.
    """

    def __init__(
        self,
        db_session: Session,
        config_service: Optional[SystemConfigService] = None,
        link_service: Optional[ParentLinkService] = None,
    ):
        super().__init__(db_session)
        self.repository = GatePassRepository(db_session)
        self.log_repository = GatePassLogRepository(db_session)
        self.config_service = config_service or SystemConfigService(db_session)
        self.link_service = link_service or ParentLinkService(db_session)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_pass(
        self,
        student_id: str,
        reason: str,
        from_date: datetime,
        to_date: datetime,
        limits: Optional[GatePassLimits] = None,
    ) -> GatePass:
        """
        Create a gate pass in ``PENDING_PARENT``.

        Raises:
            ValidationError: Reason is too short or too long
            InvalidDateRangeError: ``from_date`` is not before ``to_date``
            DurationExceededError: Longer than ``max_gate_pass_days``
            TooManyPendingError: Student already holds the maximum pending passes
        """
        operation = "create_pass"
        limits = limits or self.config_service.get_config().limits
        reason = (reason or "").strip()
        from_date = DateTimeHelper.ensure_utc(from_date)
        to_date = DateTimeHelper.ensure_utc(to_date)

        self._logger.info(
            f"{operation}: student_id={student_id}, from={from_date.isoformat()}, to={to_date.isoformat()}"
        )

        if not MIN_REASON_LENGTH <= len(reason) <= MAX_REASON_LENGTH:
            raise ValidationError(
                "Invalid gate pass reason",
                field_errors={
                    "reason": [f"Reason must be between {MIN_REASON_LENGTH} and {MAX_REASON_LENGTH} characters"]
                },
            )
        if from_date >= to_date:
            raise InvalidDateRangeError(
                "Return date must be after departure date",
                start_date=from_date.isoformat(),
                end_date=to_date.isoformat(),
            )
        requested_days = DateRangeCalculator.duration_in_days(from_date, to_date)
        if requested_days > limits.max_gate_pass_days:
            self._logger.warning(
                f"{operation}: duration {requested_days:.2f}d exceeds {limits.max_gate_pass_days}d"
            )
            raise DurationExceededError(requested_days, limits.max_gate_pass_days)

        with _student_locks.hold(student_id):
            with self.transaction(operation):
                self.repository.lock_student(student_id)
                pending = self.repository.count_pending(student_id)
                if pending >= limits.max_pending_passes:
                    self._logger.warning(
                        f"{operation}: student_id={student_id} has {pending} pending passes"
                    )
                    raise TooManyPendingError(pending, limits.max_pending_passes, student_id)

                gate_pass = self.repository.add(GatePass(
                    student_id=student_id,
                    reason=reason,
                    from_date=from_date,
                    to_date=to_date,
                    status=GatePassStatus.PENDING_PARENT,
                    is_late=False,
                ))
                pass_id = gate_pass.id

        self._audit.info("gate_pass_created", pass_id=pass_id, student_id=student_id)
        return self.get_pass(pass_id)

    # -------------------------------------------------------------------------
    # Decisions
    # -------------------------------------------------------------------------

    def parent_decide(
        self,
        pass_id: str,
        approve: bool,
        reason: Optional[str] = None,
        decided_by: Optional[str] = None,
        enforce_link: bool = True,
    ) -> GatePass:
        """
        Parent approval moves the pass to ``PENDING_WARDEN``; rejection ends it.

        ``decided_by`` must be actively linked to the pass's student unless
        ``enforce_link`` is off (administrators deciding on a parent's behalf).

        Raises:
            GatePassNotFoundError: Unknown pass
            AuthorizationError: Decider is not linked to the student
            InvalidStateError: Pass is not awaiting a parent decision
        """
        gate_pass = self.get_pass(pass_id)
        if enforce_link:
            self.link_service.ensure_linked(decided_by, gate_pass.student_id)
        transition = lift(gate_pass).parent_decide(approve, decided_by, DateTimeHelper.utcnow(), reason)
        return self._apply(gate_pass, transition, "parent_decide", decided_by)

    def warden_decide(
        self,
        pass_id: str,
        approve: bool,
        reason: Optional[str] = None,
        decided_by: Optional[str] = None,
    ) -> GatePass:
        """Warden approval issues the pass's QR value and makes it usable."""
        gate_pass = self.get_pass(pass_id)
        transition = lift(gate_pass).warden_decide(
            approve,
            decided_by,
            DateTimeHelper.utcnow(),
            reason,
            qr_value=generate_qr_value() if approve else None,
        )
        return self._apply(gate_pass, transition, "warden_decide", decided_by)

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------

    def record_exit(
        self,
        pass_id: str,
        timestamp: Optional[datetime] = None,
        marked_by: Optional[str] = None,
    ) -> GatePass:
        """Guard records the student leaving. Refused once the pass has expired."""
        at = DateTimeHelper.ensure_utc(timestamp) if timestamp else DateTimeHelper.utcnow()
        gate_pass = self.get_pass(pass_id)
        return self._apply(gate_pass, lift(gate_pass).record_exit(at, marked_by), "record_exit", marked_by)

    def record_entry(
        self,
        pass_id: str,
        timestamp: Optional[datetime] = None,
        marked_by: Optional[str] = None,
    ) -> GatePass:
        """Guard records the student's return; the pass closes, late if after ``to_date``."""
        at = DateTimeHelper.ensure_utc(timestamp) if timestamp else DateTimeHelper.utcnow()
        gate_pass = self.get_pass(pass_id)
        transition = lift(gate_pass).record_entry(at, marked_by)

        note = None
        if transition.values["is_late"]:
            note = DateTimeHelper.humanize_late_duration(at - DateTimeHelper.ensure_utc(gate_pass.to_date))
            self._logger.warning(f"record_entry: late return pass_id={pass_id}, {note}")

        return self._apply(gate_pass, transition, "record_entry", marked_by, note=note)

    # -------------------------------------------------------------------------
    # Transition plumbing
    # -------------------------------------------------------------------------

    def _apply(
        self,
        gate_pass: GatePass,
        transition: Transition,
        operation: str,
        actor: Optional[str],
        note: Optional[str] = None,
    ) -> GatePass:
        student_id = gate_pass.student_id
        conditions = []
        if transition.guard == MovementGuard.NOT_EXITED:
            conditions.append(GatePass.exit_time.is_(None))
        elif transition.guard == MovementGuard.OUT:
            conditions.extend([GatePass.exit_time.isnot(None), GatePass.entry_time.is_(None)])

        values: Dict[str, Any] = dict(transition.values)
        values["status"] = transition.new_status

        with self.transaction(operation):
            affected = self.repository.conditional_update(
                transition.pass_id,
                transition.expected_status,
                values,
                conditions,
            )
            if affected == 0:
                self._raise_conflict(transition, operation)

            if transition.action is not None:
                self.log_repository.append(GatePassLog(
                    gate_pass_id=transition.pass_id,
                    student_id=student_id,
                    action=transition.action,
                    timestamp=values.get("exit_time") or values.get("entry_time"),
                    marked_by=actor,
                    is_late=bool(values.get("is_late", False)),
                    note=note,
                ))

        self._logger.info(
            f"{operation}: pass_id={transition.pass_id} "
            f"{transition.expected_status.value} -> {transition.new_status.value}"
        )
        self._audit.info(
            "gate_pass_transition",
            pass_id=transition.pass_id,
            student_id=student_id,
            operation=operation,
            from_status=transition.expected_status.value,
            to_status=transition.new_status.value,
            actor=actor,
        )
        return self.get_pass(transition.pass_id)

    def _raise_conflict(self, transition: Transition, operation: str) -> None:
        current_status = self.repository.get_status(transition.pass_id)
        if current_status is None:
            raise GatePassNotFoundError(transition.pass_id)
        self._logger.warning(
            f"{operation}: conflict on pass_id={transition.pass_id}, "
            f"expected {transition.expected_status.value}, found {current_status.value}"
        )
        raise InvalidStateError(
            "Gate pass was modified by another request",
            pass_id=transition.pass_id,
            current_status=current_status.value,
            expected_status=transition.expected_status.value,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_pass(self, pass_id: str) -> GatePass:
        gate_pass = self.repository.find_by_id(pass_id)
        if gate_pass is None:
            raise GatePassNotFoundError(pass_id)
        self.db.refresh(gate_pass)
        return gate_pass

    def list_for_student(self, student_id: str, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """Student's passes, newest first."""
        page = max(1, page)
        page_size = max(1, min(page_size, 100))
        total = self.repository.count({"student_id": student_id})
        items = self.repository.list_for_student(
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

    def list_pending(
        self,
        status: GatePassStatus = GatePassStatus.PENDING_WARDEN,
        student_ids: Optional[Iterable[str]] = None,
    ) -> List[GatePass]:
        """
        Approval queue: ``PENDING_PARENT`` for parents, ``PENDING_WARDEN`` for wardens.

        ``student_ids`` narrows the queue, e.g. to a parent's linked children.
        """
        if status not in GatePassStatus.pending():
            raise ValidationError(
                "Only pending statuses have an approval queue",
                field_errors={"status": [f"Expected one of {[s.value for s in GatePassStatus.pending()]}"]},
            )
        return self.repository.list_by_status(status, student_ids=student_ids)

    def list_pending_for_parent(self, parent_id: str) -> List[GatePass]:
        """Passes awaiting ``parent_id``'s decision, limited to linked students."""
        return self.list_pending(GatePassStatus.PENDING_PARENT, student_ids=self.link_service.children_of(parent_id))

    def get_current_pass(self, student_id: str, now: Optional[datetime] = None) -> Optional[GatePass]:
        """The approved pass the student is out on or may use right now."""
        now = DateTimeHelper.ensure_utc(now) if now else DateTimeHelper.utcnow()
        return self.repository.find_current(student_id, now)
