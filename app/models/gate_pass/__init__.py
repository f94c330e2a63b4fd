from app.models.gate_pass.gate_pass import GatePass, GatePassLog

__all__ = ["GatePass", "GatePassLog"]
