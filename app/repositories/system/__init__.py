# app/repositories/system/__init__.py
from .system_config_repository import SystemConfigRepository

__all__ = [
    "SystemConfigRepository",
]
