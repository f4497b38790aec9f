from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ....application.services.resource_service import ResourceRequestService
from ....core.dependencies import get_resource_request_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, require_reviewer
from ...api.schemas.review import ReviewReasonPayload
from ...api.serializers import envelope, serialize_resource, serialize_resource_request
from ...api.uploads import read_upload

router = APIRouter(prefix="/api/resource-requests", tags=["Resource Requests"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_resource_request(
    song_title: Optional[str] = Form(default=None, alias="songTitle"),
    description: Optional[str] = Form(default=None),
    resource_type: Optional[str] = Form(default=None, alias="resourceType"),
    visibility: Optional[str] = Form(default=None),
    file_url: Optional[str] = Form(default=None, alias="fileUrl"),
    file: Optional[UploadFile] = File(default=None),
    member: Member = Depends(get_current_member),
    service: ResourceRequestService = Depends(get_resource_request_service),
) -> Dict[str, Any]:
    request = service.create_request(
        member,
        song_title=song_title,
        description=description,
        resource_type=resource_type,
        visibility=visibility,
        file_url=file_url,
        upload=read_upload(file),
    )
    return envelope(
        serialize_resource_request(request),
        message="Resource request submitted. A moderator will review it shortly.",
    )


@router.get("/my-requests")
def my_requests(
    member: Member = Depends(get_current_member),
    service: ResourceRequestService = Depends(get_resource_request_service),
) -> Dict[str, Any]:
    requests = service.list_member_requests(member.id)
    return envelope([serialize_resource_request(item) for item in requests], count=len(requests))


@router.get("")
def list_requests(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    _: Member = Depends(require_reviewer),
    service: ResourceRequestService = Depends(get_resource_request_service),
) -> Dict[str, Any]:
    requests = service.list_requests(status=status_filter)
    return envelope([serialize_resource_request(item) for item in requests], count=len(requests))


@router.put("/{request_id}/approve")
def approve_request(
    request_id: int,
    reviewer: Member = Depends(require_reviewer),
    service: ResourceRequestService = Depends(get_resource_request_service),
) -> Dict[str, Any]:
    request, resource = service.approve(request_id, reviewer)
    return envelope(
        {"request": serialize_resource_request(request), "resource": serialize_resource(resource)},
        message="Resource request approved and published.",
    )


@router.put("/{request_id}/reject")
def reject_request(
    request_id: int,
    payload: ReviewReasonPayload,
    reviewer: Member = Depends(require_reviewer),
    service: ResourceRequestService = Depends(get_resource_request_service),
) -> Dict[str, Any]:
    request = service.reject(request_id, reviewer, payload.reason)
    return envelope(serialize_resource_request(request), message="Resource request rejected.")


@router.delete("/{request_id}")
def delete_request(
    request_id: int,
    member: Member = Depends(get_current_member),
    service: ResourceRequestService = Depends(get_resource_request_service),
) -> Dict[str, Any]:
    service.delete_request(member, request_id)
    return envelope(message="Resource request deleted.")
