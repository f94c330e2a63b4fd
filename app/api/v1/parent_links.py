"""
Parent-student links. Admins link and unlink parents; parents list the
students they are linked to.
"""
from fastapi import APIRouter, Depends, Query, status

from app.api import deps
from app.schemas.common import PaginatedResponse
from app.schemas.student import LinkedChildrenResponse, ParentLinkCreate, ParentLinkResponse
from app.services.student.parent_link_service import ParentLinkService

router = APIRouter(prefix="/parent-links", tags=["Parent Links"])


@router.post(
    "",
    response_model=ParentLinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link a parent to a student",
)
def create_link(
    payload: ParentLinkCreate,
    current_user: deps.CurrentUser = Depends(deps.require_admin),
    service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> ParentLinkResponse:
    link = service.link(payload.parent_id, payload.student_id, payload.relationship, linked_by=current_user.id)
    return ParentLinkResponse.model_validate(link)


@router.get(
    "",
    response_model=PaginatedResponse[ParentLinkResponse],
    summary="Active links, newest first",
)
def list_links(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    _: deps.CurrentUser = Depends(deps.require_admin),
    service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> PaginatedResponse[ParentLinkResponse]:
    result = service.list_links(page=page, page_size=page_size)
    return PaginatedResponse[ParentLinkResponse].create(
        items=[ParentLinkResponse.model_validate(link) for link in result["items"]],
        total_items=result["total"],
        page=result["page"],
        page_size=result["page_size"],
    )


@router.get(
    "/children",
    response_model=LinkedChildrenResponse,
    summary="Students the calling parent is linked to",
)
def my_children(
    current_user: deps.CurrentUser = Depends(deps.require_parent),
    service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> LinkedChildrenResponse:
    return LinkedChildrenResponse(parent_id=current_user.id, student_ids=service.children_of(current_user.id))


@router.delete(
    "/{link_id}",
    response_model=ParentLinkResponse,
    summary="Deactivate a link",
)
def remove_link(
    link_id: str,
    current_user: deps.CurrentUser = Depends(deps.require_admin),
    service: ParentLinkService = Depends(deps.get_parent_link_service),
) -> ParentLinkResponse:
    return ParentLinkResponse.model_validate(service.unlink(link_id, unlinked_by=current_user.id))
