# --- File: app/schemas/common/response.py ---
"""
Standard API response wrappers.
"""

from typing import Any, Dict

from pydantic import Field

from app.schemas.common.base import BaseSchema

__all__ = [
    "ErrorBody",
    "ErrorResponse",
]


class ErrorBody(BaseSchema):
    message: str
    code: str
    details: Dict[str, Any] = Field(default_factory=dict)
    type: str


class ErrorResponse(BaseSchema):
    """Shape of every error returned by the API."""

    error: ErrorBody
