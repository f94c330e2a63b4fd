"""
Parent-student link schemas.
"""

from typing import List, Optional

from pydantic import Field

from app.models.base.enums import ParentRelationship
from app.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "ParentLinkCreate",
    "ParentLinkResponse",
    "LinkedChildrenResponse",
]


class ParentLinkCreate(BaseSchema):
    parent_id: str = Field(..., min_length=1, max_length=64)
    student_id: str = Field(..., min_length=1, max_length=64)
    relationship: ParentRelationship


class ParentLinkResponse(BaseResponseSchema):
    parent_id: str
    student_id: str
    relationship: ParentRelationship
    linked_by: Optional[str] = None
    is_active: bool


class LinkedChildrenResponse(BaseSchema):
    parent_id: str
    student_ids: List[str]
