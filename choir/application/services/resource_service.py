from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ...domain.clock import utc_now
from ...domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...domain.models import (
    ExternalLink,
    Favorite,
    Member,
    Resource,
    ResourceContent,
    ResourceRequest,
    ResourceRequestStatus,
    ResourceStatus,
    ResourceType,
    UploadedFile,
    Visibility,
)
from ...domain.models.resource import content_blob_id
from ...domain.models.review import PENDING
from ...domain.ports.collaborators import BlobStore, FileUpload
from ...domain.ports.persistence import (
    FavoriteRepository,
    ResourceRepository,
    ResourceRequestRepository,
)
from ..validation import clean_text, parse_enum
from .review_workflow import ReviewPolicy, ReviewWorkflow

logger = logging.getLogger(__name__)

RESOURCE_REQUEST_REVIEW = ReviewPolicy(
    label="Resource request",
    approved_status=ResourceRequestStatus.APPROVED.value,
    rejected_status=ResourceRequestStatus.REJECTED.value,
)


def _delete_blob_quietly(blob_store: BlobStore, content: ResourceContent) -> None:
    blob_id = content_blob_id(content)
    if not blob_id:
        return
    try:
        blob_store.delete(blob_id)
    except Exception:
        logger.warning("Failed to delete stored file %s", blob_id, exc_info=True)


def _build_content(
    blob_store: BlobStore,
    resource_type: ResourceType,
    upload: Optional[FileUpload],
    file_url: Optional[str],
    folder: str,
) -> ResourceContent:
    """Store an uploaded file, or wrap the link for link resource types."""
    if resource_type.is_link:
        url = clean_text(file_url)
        if not url:
            raise ValidationError("File URL is required for link resources.")
        return ExternalLink(url=url, kind=resource_type.value)
    if upload is None or not upload.content:
        raise ValidationError("A file is required for sheet music and audio resources.")
    blob = blob_store.upload(
        upload.content,
        f"{folder}/{resource_type.upload_folder}",
        content_type=upload.content_type,
        filename=upload.filename,
    )
    return UploadedFile(url=blob.url, file_type=upload.subtype or None, file_size=upload.size, blob_id=blob.blob_id)


def _parse_submission(
    song_title: Optional[str], description: Optional[str], resource_type: Optional[str], visibility: Optional[str]
) -> Tuple[str, str, ResourceType, Visibility]:
    title = clean_text(song_title)
    text = clean_text(description)
    if not title or not text or not resource_type:
        raise ValidationError("Song title, description, and resource type are required.")
    return (
        title,
        text,
        parse_enum(ResourceType, resource_type, "Resource type"),
        parse_enum(Visibility, visibility or Visibility.ALL_MEMBERS.value, "Visibility"),
    )


class ResourceRequestService:
    """Member submissions that become shared resources once a moderator approves them."""

    def __init__(
        self,
        requests: ResourceRequestRepository,
        resources: ResourceRepository,
        blob_store: BlobStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._requests = requests
        self._resources = resources
        self._blob_store = blob_store
        self._workflow: ReviewWorkflow[ResourceRequest] = ReviewWorkflow(
            requests,
            RESOURCE_REQUEST_REVIEW,
            on_approved=self._publish,
            on_rejected=self._discard_upload,
            clock=clock,
        )

    def create_request(
        self,
        member: Member,
        *,
        song_title: Optional[str],
        description: Optional[str],
        resource_type: Optional[str],
        visibility: Optional[str] = None,
        file_url: Optional[str] = None,
        upload: Optional[FileUpload] = None,
    ) -> ResourceRequest:
        title, text, kind, audience = _parse_submission(song_title, description, resource_type, visibility)
        content = _build_content(self._blob_store, kind, upload, file_url, "resources/pending")
        try:
            request = self._requests.create_request(
                song_title=title,
                description=text,
                resource_type=kind.value,
                content=content,
                visibility=audience.value,
                requested_by=member.id,
            )
        except Exception:
            _delete_blob_quietly(self._blob_store, content)
            raise
        logger.info("Resource request %s submitted by member %s", request.id, member.id)
        return request

    def list_requests(self, *, status: Optional[str] = None) -> List[ResourceRequest]:
        return self._requests.list_requests(status=status)

    def list_member_requests(self, member_id: int) -> List[ResourceRequest]:
        return self._requests.list_requests(requested_by=member_id)

    def approve(self, request_id: int, reviewer: Member) -> Tuple[ResourceRequest, Resource]:
        decision = self._workflow.approve(request_id, reviewer.id)
        return decision.entity, decision.effect

    def reject(self, request_id: int, reviewer: Member, reason: Optional[str]) -> ResourceRequest:
        return self._workflow.reject(request_id, reviewer.id, reason).entity

    def delete_request(self, actor: Member, request_id: int) -> None:
        request = self._require_request(request_id)
        if actor.is_reviewer:
            # Conditional on the status last read; the file check below relies on it.
            while not self._requests.delete_request(request_id, status=request.status):
                request = self._require_request(request_id)
        else:
            if request.requested_by != actor.id:
                raise ForbiddenError("Not authorized to delete this request.")
            if not self._requests.delete_request(request_id, status=PENDING):
                raise ConflictError("Can only delete pending requests.", status_code=400)
        deleted_status = request.status if actor.is_reviewer else PENDING
        # An approved request shares its file with the published resource.
        if deleted_status != ResourceRequestStatus.APPROVED.value:
            _delete_blob_quietly(self._blob_store, request.content)
        logger.info("Resource request %s deleted by member %s", request_id, actor.id)

    def _require_request(self, request_id: int) -> ResourceRequest:
        request = self._requests.get_request(request_id)
        if request is None:
            raise NotFoundError("Resource request not found.")
        return request

    def _publish(self, request: ResourceRequest) -> Resource:
        resource = self._resources.create_resource(
            song_title=request.song_title,
            description=request.description,
            resource_type=request.resource_type.value,
            content=request.content,
            visibility=request.visibility.value,
            uploaded_by=request.requested_by,
        )
        logger.info("Resource %s published from request %s", resource.id, request.id)
        return resource

    def _discard_upload(self, request: ResourceRequest) -> None:
        _delete_blob_quietly(self._blob_store, request.content)


class ResourceService:
    """Published sheet music, audio parts and links."""

    def __init__(self, resources: ResourceRepository, blob_store: BlobStore) -> None:
        self._resources = resources
        self._blob_store = blob_store

    def create_resource(
        self,
        member: Member,
        *,
        song_title: Optional[str],
        description: Optional[str],
        resource_type: Optional[str],
        visibility: Optional[str] = None,
        file_url: Optional[str] = None,
        upload: Optional[FileUpload] = None,
    ) -> Resource:
        title, text, kind, audience = _parse_submission(song_title, description, resource_type, visibility)
        content = _build_content(self._blob_store, kind, upload, file_url, "resources")
        try:
            resource = self._resources.create_resource(
                song_title=title,
                description=text,
                resource_type=kind.value,
                content=content,
                visibility=audience.value,
                uploaded_by=member.id,
            )
        except Exception:
            _delete_blob_quietly(self._blob_store, content)
            raise
        logger.info("Resource %s created by member %s", resource.id, member.id)
        return resource

    def list_resources(
        self,
        viewer: Member,
        *,
        search: Optional[str] = None,
        resource_type: Optional[str] = None,
        visibility: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Resource]:
        return self._resources.list_resources(
            status=status or ResourceStatus.ACTIVE.value,
            resource_type=resource_type,
            visibility=visibility if viewer.is_reviewer else None,
            search=clean_text(search) or None,
            visible_to_member=None if viewer.is_reviewer else viewer.id,
        )

    def resources_by_song(self, viewer: Member) -> Dict[str, List[Resource]]:
        resources = self.list_resources(viewer)
        grouped: Dict[str, List[Resource]] = OrderedDict()
        for resource in sorted(resources, key=lambda item: item.song_title.lower()):
            grouped.setdefault(resource.song_title, []).append(resource)
        return grouped

    def get_resource(self, viewer: Member, resource_id: int) -> Resource:
        resource = self._resources.get_resource(resource_id)
        if resource is None:
            raise NotFoundError("Resource not found.")
        if (
            resource.visibility is Visibility.ADMIN_MODERATOR_ONLY
            and not viewer.is_reviewer
            and resource.uploaded_by != viewer.id
        ):
            raise ForbiddenError("Not authorized to view this resource.")
        return resource

    def update_resource(self, resource_id: int, changes: Dict[str, Any]) -> Resource:
        resource = self._resources.get_resource(resource_id)
        if resource is None:
            raise NotFoundError("Resource not found.")
        fields: Dict[str, Any] = {}
        if clean_text(changes.get("song_title")):
            fields["song_title"] = clean_text(changes["song_title"])
        if clean_text(changes.get("description")):
            fields["description"] = clean_text(changes["description"])
        if changes.get("visibility"):
            fields["visibility"] = parse_enum(Visibility, changes["visibility"], "Visibility").value
        if changes.get("status"):
            fields["status"] = parse_enum(ResourceStatus, changes["status"], "Status").value
        if clean_text(changes.get("file_url")) and resource.resource_type.is_link:
            fields["file_url"] = clean_text(changes["file_url"])
        return self._resources.update_resource(resource_id, fields)

    def delete_resource(self, resource_id: int) -> None:
        resource = self._resources.get_resource(resource_id)
        if resource is None:
            raise NotFoundError("Resource not found.")
        self._resources.delete_resource(resource_id)
        _delete_blob_quietly(self._blob_store, resource.content)
        logger.info("Resource %s deleted", resource_id)


class FavoriteService:
    def __init__(self, favorites: FavoriteRepository, resources: ResourceRepository) -> None:
        self._favorites = favorites
        self._resources = resources

    def add_favorite(self, member: Member, resource_id: Optional[int]) -> Favorite:
        if not resource_id:
            raise ValidationError("Resource ID is required.")
        if self._resources.get_resource(resource_id) is None:
            raise NotFoundError("Resource not found.")
        favorite = self._favorites.add_favorite(member.id, resource_id)
        if favorite is None:
            raise ConflictError("Resource already in favorites.", status_code=400)
        return favorite

    def remove_favorite(self, member: Member, resource_id: int) -> None:
        if not self._favorites.remove_favorite(member.id, resource_id):
            raise NotFoundError("Favorite not found.")

    def list_favorites(self, member: Member) -> List[Tuple[Favorite, Resource]]:
        entries = []
        for favorite in self._favorites.list_favorites(member.id):
            resource = self._resources.get_resource(favorite.resource_id)
            if resource is not None:
                entries.append((favorite, resource))
        return entries

    def is_favorite(self, member: Member, resource_id: int) -> bool:
        return self._favorites.is_favorite(member.id, resource_id)
