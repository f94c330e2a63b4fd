import pytest

from app.core.exceptions import (
    AuthorizationError,
    DuplicateEntityError,
    ResourceNotFoundError,
    ValidationError,
)
from app.models.base.enums import ParentRelationship
from app.services.student.parent_link_service import ParentLinkService


@pytest.fixture
def link_service(db):
    return ParentLinkService(db)


class TestLink:

    def test_link_and_check(self, link_service):
        link = link_service.link("parent-1", "student-1", ParentRelationship.FATHER, linked_by="admin-1")

        assert link.is_active is True
        assert link.linked_by == "admin-1"
        assert link_service.is_linked("parent-1", "student-1") is True
        assert link_service.is_linked("parent-1", "student-2") is False
        link_service.ensure_linked("parent-1", "student-1")

    def test_active_pair_cannot_be_linked_twice(self, link_service):
        link_service.link("parent-1", "student-1", ParentRelationship.FATHER)

        with pytest.raises(DuplicateEntityError):
            link_service.link("parent-1", "student-1", ParentRelationship.GUARDIAN)

    @pytest.mark.parametrize("parent_id, student_id", [("", "student-1"), ("parent-1", "  "), ("user-1", "user-1")])
    def test_invalid_pairs(self, link_service, parent_id, student_id):
        with pytest.raises(ValidationError):
            link_service.link(parent_id, student_id, ParentRelationship.MOTHER)

    def test_relinking_reactivates_the_same_row(self, link_service):
        link = link_service.link("parent-1", "student-1", ParentRelationship.FATHER)
        link_service.unlink(link.id, unlinked_by="admin-1")

        relinked = link_service.link("parent-1", "student-1", ParentRelationship.GUARDIAN, linked_by="admin-2")

        assert relinked.id == link.id
        assert relinked.is_active is True
        assert relinked.relationship == ParentRelationship.GUARDIAN
        assert relinked.linked_by == "admin-2"


class TestUnlink:

    def test_unlink_revokes_access(self, link_service):
        link = link_service.link("parent-1", "student-1", ParentRelationship.MOTHER)

        assert link_service.unlink(link.id).is_active is False
        with pytest.raises(AuthorizationError):
            link_service.ensure_linked("parent-1", "student-1")

    def test_unlinking_twice_is_harmless(self, link_service):
        link = link_service.link("parent-1", "student-1", ParentRelationship.MOTHER)
        link_service.unlink(link.id)
        assert link_service.unlink(link.id).is_active is False

    def test_unknown_link(self, link_service):
        with pytest.raises(ResourceNotFoundError):
            link_service.unlink("missing")


class TestQueries:

    def test_children_and_listing(self, link_service):
        link_service.link("parent-1", "student-2", ParentRelationship.FATHER)
        link_service.link("parent-1", "student-1", ParentRelationship.FATHER)
        link_service.link("parent-2", "student-1", ParentRelationship.MOTHER)

        assert link_service.children_of("parent-1") == ["student-1", "student-2"]
        assert link_service.children_of("parent-9") == []

        page = link_service.list_links(page=1, page_size=2)
        assert page["total"] == 3
        assert page["total_pages"] == 2
        assert len(page["items"]) == 2

    def test_missing_parent_is_never_linked(self, link_service):
        with pytest.raises(AuthorizationError):
            link_service.ensure_linked(None, "student-1")
