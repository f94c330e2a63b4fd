"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the hostel gate and attendance service
"""
from fastapi import APIRouter

from app.api.v1 import attendance, gate_passes, parent_links, system_config
from app.core.logging import get_logger
from app.schemas.common.response import ErrorResponse

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        403: {"model": ErrorResponse, "description": "Forbidden"},
        404: {"model": ErrorResponse, "description": "Not Found"},
        409: {"model": ErrorResponse, "description": "Conflict"},
        422: {"model": ErrorResponse, "description": "Validation Error"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"}
    }
)

router.include_router(attendance.router)
router.include_router(gate_passes.router)
router.include_router(parent_links.router)
router.include_router(system_config.router)

logger.info(
    "API v1 routers registered",
    extra={"routers": ["attendance", "gate_passes", "parent_links", "system_config"]},
)

__all__ = ["router"]
