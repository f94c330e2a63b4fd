"""
Base services module.

Provides the shared service base class with logging and transaction
helpers.
"""

from app.services.base.base_service import BaseService

__all__ = [
    "BaseService",
]
