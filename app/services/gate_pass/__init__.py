"""
Gate pass service layer.

Provides business logic for:
- The gate pass lifecycle (request, parent and warden decisions)
- Guard-recorded exit and entry
- Read-only ledger views (students out, late returns, QR validation)

Services live in ``gate_pass_service`` and ``gate_pass_ledger_service``;
the package itself only exposes the pure state model.
"""

from app.services.gate_pass.gate_pass_state import GatePassLimits, PassState, Transition, lift

__all__ = [
    "GatePassLimits",
    "PassState",
    "Transition",
    "lift",
]
