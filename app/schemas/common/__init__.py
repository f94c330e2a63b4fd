from app.schemas.common.base import BaseResponseSchema, BaseSchema
from app.schemas.common.pagination import PaginatedResponse, PaginationMeta
from app.schemas.common.response import ErrorBody, ErrorResponse

__all__ = [
    "BaseSchema",
    "BaseResponseSchema",
    "PaginatedResponse",
    "PaginationMeta",
    "ErrorResponse",
    "ErrorBody",
]
