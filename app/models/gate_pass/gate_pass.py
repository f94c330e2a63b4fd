"""
Gate pass database models.

A gate pass is a student's request to leave the hostel between
``from_date`` and ``to_date``. Parent and warden decisions, the guard's
exit/entry timestamps and the late-return flag are all stored on the
same row; ``GatePassLog`` keeps an append-only audit of guard events.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base.base_model import TimestampModel
from app.models.base.enums import GatePassAction, GatePassStatus

__all__ = [
    "GatePass",
    "GatePassLog",
]


class GatePass(TimestampModel):
    """
    Gate pass with its full approval and movement history.
    """

    __tablename__ = "gate_passes"
    __table_args__ = (
        CheckConstraint(
            "to_date > from_date",
            name="ck_gate_pass_date_order"
        ),
        Index("ix_gate_pass_student_status", "student_id", "status"),
        Index("ix_gate_pass_exit_entry", "exit_time", "entry_time"),
        {"comment": "Gate passes with approval and exit/entry tracking"}
    )

    student_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Student requesting the pass"
    )
    reason: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    from_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    to_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Expected return time"
    )
    status: Mapped[GatePassStatus] = mapped_column(
        Enum(GatePassStatus, name="gate_pass_status_enum"),
        nullable=False,
        default=GatePassStatus.PENDING_PARENT,
    )

    # Parent decision
    parent_approved: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    parent_decided_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    parent_decided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    parent_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Warden decision
    warden_approved: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    warden_decided_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    warden_decided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    warden_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Issued on warden approval, scanned by guards
    qr_value: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        unique=True,
    )

    # Guard-recorded movement
    exit_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    exit_marked_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    entry_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    entry_marked_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_late: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Returned after to_date"
    )

    logs: Mapped[List["GatePassLog"]] = relationship(
        "GatePassLog",
        back_populates="gate_pass",
        cascade="all, delete-orphan",
        order_by="GatePassLog.timestamp",
        lazy="select",
    )

    @property
    def is_out(self) -> bool:
        """Student has left on this pass and not yet returned."""
        return self.exit_time is not None and self.entry_time is None

    def __repr__(self) -> str:
        return f"<GatePass(id={self.id}, student_id={self.student_id}, status={self.status})>"


class GatePassLog(TimestampModel):
    """
    Append-only record of a guard-observed exit or entry.
    """

    __tablename__ = "gate_pass_logs"
    __table_args__ = (
        Index("ix_gate_pass_log_pass_timestamp", "gate_pass_id", "timestamp"),
    )

    gate_pass_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("gate_passes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    action: Mapped[GatePassAction] = mapped_column(
        Enum(GatePassAction, name="gate_pass_action_enum"),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    marked_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_late: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    gate_pass: Mapped["GatePass"] = relationship(
        "GatePass",
        back_populates="logs",
    )

    def __repr__(self) -> str:
        return f"<GatePassLog(pass={self.gate_pass_id}, action={self.action}, at={self.timestamp})>"
