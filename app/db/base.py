"""SQLAlchemy Base class for all models."""
from app.models.base import Base


def import_models():
    """Import all models to register them with SQLAlchemy."""
    from app.models.attendance import AttendanceRecord  # noqa: F401
    from app.models.gate_pass import GatePass, GatePassLog  # noqa: F401
    from app.models.student import ParentStudentLink  # noqa: F401
    from app.models.system import SystemConfig  # noqa: F401


# Import models on module load
import_models()
