import pytest

from choir.application.services.resource_service import ResourceRequestService, ResourceService
from choir.domain.errors import ConflictError
from choir.domain.models import MemberRole, MemberStatus
from choir.domain.ports.collaborators import FileUpload
from choir.infrastructure.repositories.resource_repository import (
    ResourceRepository,
    ResourceRequestRepository,
)

SCORE = FileUpload(content=b"%PDF-1.4 score", filename="ave-maria.pdf", content_type="application/pdf")


class FailingResourceRepository(ResourceRepository):
    def create_resource(self, **kwargs):
        raise RuntimeError("disk full")


class FailingRequestRepository(ResourceRequestRepository):
    def create_request(self, **kwargs):
        raise RuntimeError("disk full")


class ApprovedWhileDeleting(ResourceRequestRepository):
    """Another moderator approves the request during the next read once armed."""

    def __init__(self, database, reviewer_id):
        super().__init__(database)
        self._reviewer_id = reviewer_id
        self.armed = False

    def get_request(self, request_id):
        request = super().get_request(request_id)
        if request is not None and self.armed:
            self.armed = False
            self.settle_review(
                request_id, status="approved", reviewer_id=self._reviewer_id, reviewed_at=request.created_at, reason=None
            )
        return request


@pytest.fixture
def singer(members, hasher):
    return members.create_member(
        first_name="Nimal",
        last_name="Fernando",
        student_id="IT20000001",
        email="it20000001@my.sliit.lk",
        password_hash=hasher.hash("secret1"),
        status=MemberStatus.ACTIVE,
        email_verified=True,
    )


@pytest.fixture
def moderator(members, hasher):
    return members.create_member(
        first_name="Kumari",
        last_name="Silva",
        student_id="IT20000002",
        email="it20000002@my.sliit.lk",
        password_hash=hasher.hash("secret1"),
        role=MemberRole.MODERATOR,
        status=MemberStatus.ACTIVE,
        email_verified=True,
    )


def submit(service, singer):
    return service.create_request(
        singer, song_title="Ave Maria", description="Alto part", resource_type="sheet_music", upload=SCORE
    )


def test_failed_publish_leaves_request_pending_and_retryable(database, blob_store, singer, moderator):
    requests = ResourceRequestRepository(database)
    request = submit(ResourceRequestService(requests, ResourceRepository(database), blob_store), singer)

    failing = ResourceRequestService(requests, FailingResourceRepository(database), blob_store)
    with pytest.raises(RuntimeError):
        failing.approve(request.id, moderator)

    assert requests.get_request(request.id).status == "pending"
    assert ResourceRepository(database).list_resources() == []

    service = ResourceRequestService(requests, ResourceRepository(database), blob_store)
    approved, resource = service.approve(request.id, moderator)
    assert approved.status == "approved"
    assert resource.content == request.content
    assert blob_store.deleted == []


def test_upload_is_removed_when_the_request_cannot_be_saved(database, blob_store, singer):
    service = ResourceRequestService(FailingRequestRepository(database), ResourceRepository(database), blob_store)

    with pytest.raises(RuntimeError):
        submit(service, singer)

    assert blob_store.blobs == {}
    assert len(blob_store.deleted) == 1


def test_upload_is_removed_when_the_resource_cannot_be_saved(database, blob_store, moderator):
    service = ResourceService(FailingResourceRepository(database), blob_store)

    with pytest.raises(RuntimeError):
        service.create_resource(
            moderator, song_title="Ave Maria", description="Full score", resource_type="sheet_music", upload=SCORE
        )

    assert blob_store.blobs == {}


def test_moderator_delete_keeps_file_of_a_request_approved_meanwhile(database, blob_store, singer, moderator):
    requests = ApprovedWhileDeleting(database, reviewer_id=moderator.id)
    service = ResourceRequestService(requests, ResourceRepository(database), blob_store)
    request = submit(service, singer)
    requests.armed = True

    service.delete_request(moderator, request.id)

    assert requests.get_request(request.id) is None
    assert blob_store.deleted == []
    assert len(blob_store.blobs) == 1


def test_owner_cannot_delete_a_request_approved_meanwhile(database, blob_store, singer, moderator):
    requests = ApprovedWhileDeleting(database, reviewer_id=moderator.id)
    service = ResourceRequestService(requests, ResourceRepository(database), blob_store)
    request = submit(service, singer)
    requests.armed = True

    with pytest.raises(ConflictError):
        service.delete_request(singer, request.id)

    assert requests.get_request(request.id).status == "approved"
    assert blob_store.deleted == []
