from app.schemas.student.parent_link import LinkedChildrenResponse, ParentLinkCreate, ParentLinkResponse

__all__ = ["LinkedChildrenResponse", "ParentLinkCreate", "ParentLinkResponse"]
