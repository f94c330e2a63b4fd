# --- File: app/schemas/gate_pass/gate_pass_ledger.py ---
"""
Ledger view schemas for guards and wardens.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common.base import BaseSchema
from app.schemas.gate_pass.gate_pass import GatePassResponse

__all__ = [
    "StudentOutResponse",
    "LateReturnResponse",
    "QrValidationRequest",
    "QrValidationResponse",
]


class StudentOutResponse(BaseSchema):
    gate_pass: GatePassResponse
    exit_time: datetime
    is_expired: bool = Field(..., description="Expected return time has passed")


class LateReturnResponse(BaseSchema):
    gate_pass: GatePassResponse
    late_minutes: int = Field(..., ge=0)
    late_label: str = Field(..., description="e.g. '2h 5m late'")


class QrValidationRequest(BaseSchema):
    qr_value: str = Field(..., min_length=1, max_length=32)


class QrValidationResponse(BaseSchema):
    valid: bool
    status: str
    message: str
    is_student_outside: bool = False
    gate_pass: Optional[GatePassResponse] = None
