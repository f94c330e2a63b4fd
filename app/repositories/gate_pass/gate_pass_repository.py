"""
Gate pass repository.

State changes are conditional updates: every write names the status (and
movement timestamps) it expects, and the caller inspects the affected
row count. Nothing here commits; the service owns the transaction.
All datetimes passed in must be UTC.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, or_, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import handle_database_exception
from app.models.base.enums import GatePassStatus
from app.models.gate_pass.gate_pass import GatePass
from app.repositories.base.base_repository import BaseRepository


class GatePassRepository(BaseRepository[GatePass]):
    """
    Repository for gate pass persistence and ledger queries.
    """

    def __init__(self, session: Session):
        super().__init__(GatePass, session)

    # ==================== Creation ====================

    def lock_student(self, student_id: str) -> None:
        """
        Serialize pass creation for one student across processes.

        Takes a transaction-scoped advisory lock on PostgreSQL; other
        dialects rely on the in-process lock held by the service.
        """
        if self.db.get_bind().dialect.name != "postgresql":
            return
        try:
            self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:lock_key))"),
                {"lock_key": f"gate_pass:{student_id}"},
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "lock_student") from e

    def count_pending(self, student_id: str) -> int:
        """Passes awaiting a parent or warden decision."""
        return self.count({
            "student_id": student_id,
            "status": GatePassStatus.pending(),
        })

    def add(self, gate_pass: GatePass) -> GatePass:
        """Stage a new pass in the current transaction."""
        try:
            self.db.add(gate_pass)
            self.db.flush()
            return gate_pass
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "add_gate_pass") from e

    # ==================== Transitions ====================

    def conditional_update(
        self,
        pass_id: str,
        expected_status: GatePassStatus,
        values: Dict[str, Any],
        conditions: Sequence[Any] = (),
    ) -> int:
        """
        Apply ``values`` only if the row is still in ``expected_status``.

        Args:
            pass_id: Gate pass identifier
            expected_status: Status the caller observed
            values: Column values to set
            conditions: Extra WHERE clauses (e.g. ``exit_time IS NULL``)

        Returns:
            Number of affected rows (0 or 1)
        """
        stmt = (
            update(GatePass)
            .where(
                GatePass.id == pass_id,
                GatePass.status == expected_status,
                *conditions,
            )
            .values(updated_at=func.now(), **values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "conditional_update") from e

    # ==================== Lookups ====================

    def get_status(self, pass_id: str) -> Optional[GatePassStatus]:
        """Stored status, read straight from the database."""
        try:
            status = (
                self.db.query(GatePass.status)
                .filter(GatePass.id == pass_id)
                .scalar()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "get_status") from e
        return None if status is None else GatePassStatus(status)

    def find_by_qr(self, qr_value: str) -> Optional[GatePass]:
        try:
            return self.db.query(GatePass).filter(GatePass.qr_value == qr_value).first()
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_by_qr") from e

    def list_for_student(
        self,
        student_id: str,
        skip: int = 0,
        limit: int = 20,
        statuses: Optional[Iterable[GatePassStatus]] = None,
    ) -> List[GatePass]:
        """Student's passes, newest request first."""
        try:
            query = self.db.query(GatePass).filter(GatePass.student_id == student_id)
            if statuses:
                query = query.filter(GatePass.status.in_(list(statuses)))
            return (
                query.order_by(GatePass.created_at.desc(), GatePass.from_date.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "list_for_student") from e

    def list_by_status(
        self,
        status: GatePassStatus,
        skip: int = 0,
        limit: int = 50,
        student_ids: Optional[Iterable[str]] = None,
    ) -> List[GatePass]:
        """Approval queue for one status, oldest request first."""
        query = self.db.query(GatePass).filter(GatePass.status == status)
        if student_ids is not None:
            student_ids = list(student_ids)
            if not student_ids:
                return []
            query = query.filter(GatePass.student_id.in_(student_ids))
        try:
            return (
                query.order_by(GatePass.created_at.asc(), GatePass.from_date.asc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "list_by_status") from e

    def find_current(self, student_id: str, now: datetime) -> Optional[GatePass]:
        """
        The approved pass the student is currently using.

        Either the student is out on it, or ``now`` falls inside its
        validity period and it has not been returned yet.
        """
        try:
            return (
                self.db.query(GatePass)
                .filter(
                    GatePass.student_id == student_id,
                    GatePass.status == GatePassStatus.APPROVED,
                    GatePass.entry_time.is_(None),
                    or_(
                        GatePass.exit_time.isnot(None),
                        (GatePass.from_date <= now) & (GatePass.to_date >= now),
                    ),
                )
                .order_by(GatePass.from_date.desc())
                .first()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_current") from e

    # ==================== Ledger Queries ====================

    def find_students_out(self) -> List[GatePass]:
        """Passes with an exit and no entry, most recent exit first."""
        try:
            return (
                self.db.query(GatePass)
                .filter(GatePass.exit_time.isnot(None), GatePass.entry_time.is_(None))
                .order_by(GatePass.exit_time.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_students_out") from e

    def find_late_returns(self, limit: int = 100) -> List[GatePass]:
        try:
            return (
                self.db.query(GatePass)
                .filter(GatePass.status == GatePassStatus.CLOSED, GatePass.is_late.is_(True))
                .order_by(GatePass.entry_time.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_late_returns") from e

    def find_entries_since(self, since: datetime, limit: int = 100) -> List[GatePass]:
        try:
            return (
                self.db.query(GatePass)
                .filter(GatePass.entry_time.isnot(None), GatePass.entry_time >= since)
                .order_by(GatePass.entry_time.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "find_entries_since") from e
