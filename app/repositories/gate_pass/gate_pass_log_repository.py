"""Repository for the append-only gate pass activity log."""

from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import handle_database_exception
from app.models.gate_pass.gate_pass import GatePassLog
from app.repositories.base.base_repository import BaseRepository


class GatePassLogRepository(BaseRepository[GatePassLog]):

    def __init__(self, session: Session):
        super().__init__(GatePassLog, session)

    def append(self, log: GatePassLog) -> GatePassLog:
        """Stage a log entry in the current transaction."""
        return self.create(log, commit=False)

    def list_recent(self, skip: int = 0, limit: int = 50) -> List[GatePassLog]:
        try:
            return (
                self.db.query(GatePassLog)
                .order_by(GatePassLog.timestamp.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "list_recent_logs") from e

    def list_for_pass(self, gate_pass_id: str) -> List[GatePassLog]:
        try:
            return (
                self.db.query(GatePassLog)
                .filter(GatePassLog.gate_pass_id == gate_pass_id)
                .order_by(GatePassLog.timestamp.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "list_for_pass") from e
