# --- File: app/schemas/gate_pass/gate_pass.py ---
"""
Gate pass request and response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.base.enums import GatePassAction, GatePassStatus
from app.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "GatePassCreate",
    "GatePassDecision",
    "GatePassMovement",
    "GatePassResponse",
    "GatePassLogResponse",
]


class GatePassCreate(BaseSchema):
    """Student request to leave the hostel."""

    reason: str = Field(..., min_length=5, max_length=500)
    from_date: datetime = Field(..., description="Departure time")
    to_date: datetime = Field(..., description="Expected return time")


class GatePassDecision(BaseSchema):
    """Parent or warden decision."""

    approved: bool
    reason: Optional[str] = Field(None, max_length=500)


class GatePassMovement(BaseSchema):
    """Guard-recorded exit or entry; defaults to the server time."""

    timestamp: Optional[datetime] = None


class GatePassResponse(BaseResponseSchema):
    """
    Gate pass with its decisions and movement history.
    """

    student_id: str
    reason: str
    from_date: datetime
    to_date: datetime
    status: GatePassStatus

    parent_approved: Optional[bool] = None
    parent_decided_by: Optional[str] = None
    parent_decided_at: Optional[datetime] = None
    parent_reason: Optional[str] = None

    warden_approved: Optional[bool] = None
    warden_decided_by: Optional[str] = None
    warden_decided_at: Optional[datetime] = None
    warden_reason: Optional[str] = None

    qr_value: Optional[str] = None
    exit_time: Optional[datetime] = None
    exit_marked_by: Optional[str] = None
    entry_time: Optional[datetime] = None
    entry_marked_by: Optional[str] = None
    is_late: bool = False
    is_out: bool = Field(False, description="Exited and not yet returned")


class GatePassLogResponse(BaseResponseSchema):
    gate_pass_id: str
    student_id: str
    action: GatePassAction
    timestamp: datetime
    marked_by: Optional[str] = None
    is_late: bool = False
    note: Optional[str] = None
