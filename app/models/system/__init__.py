# models/system/__init__.py
from .system_config import SystemConfig, SYSTEM_CONFIG_ID

__all__ = [
    "SystemConfig",
    "SYSTEM_CONFIG_ID",
]
