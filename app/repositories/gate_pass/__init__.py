from app.repositories.gate_pass.gate_pass_repository import GatePassRepository
from app.repositories.gate_pass.gate_pass_log_repository import GatePassLogRepository

__all__ = ["GatePassRepository", "GatePassLogRepository"]
