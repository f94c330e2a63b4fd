from app.schemas.gate_pass.gate_pass import (
    GatePassCreate,
    GatePassDecision,
    GatePassLogResponse,
    GatePassMovement,
    GatePassResponse,
)
from app.schemas.gate_pass.gate_pass_ledger import (
    LateReturnResponse,
    QrValidationRequest,
    QrValidationResponse,
    StudentOutResponse,
)

__all__ = [
    "GatePassCreate",
    "GatePassDecision",
    "GatePassLogResponse",
    "GatePassMovement",
    "GatePassResponse",
    "LateReturnResponse",
    "QrValidationRequest",
    "QrValidationResponse",
    "StudentOutResponse",
]
