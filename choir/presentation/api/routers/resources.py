from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ....application.services.resource_service import ResourceService
from ....core.dependencies import get_resource_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, require_reviewer
from ...api.schemas.resources import ResourceUpdatePayload
from ...api.serializers import envelope, serialize_resource
from ...api.uploads import read_upload

router = APIRouter(prefix="/api/resources", tags=["Resources"])


@router.get("/by-song")
def resources_by_song(
    member: Member = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    grouped = service.resources_by_song(member)
    return envelope(
        [
            {"songTitle": title, "resources": [serialize_resource(item) for item in items]}
            for title, items in grouped.items()
        ]
    )


@router.get("")
def list_resources(
    search: Optional[str] = Query(default=None),
    resource_type: Optional[str] = Query(default=None, alias="resourceType"),
    visibility: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    member: Member = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    resources = service.list_resources(
        member,
        search=search,
        resource_type=resource_type,
        visibility=visibility,
        status=status_filter,
    )
    return envelope([serialize_resource(item) for item in resources], count=len(resources))


@router.get("/{resource_id}")
def get_resource(
    resource_id: int,
    member: Member = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return envelope(serialize_resource(service.get_resource(member, resource_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_resource(
    song_title: Optional[str] = Form(default=None, alias="songTitle"),
    description: Optional[str] = Form(default=None),
    resource_type: Optional[str] = Form(default=None, alias="resourceType"),
    visibility: Optional[str] = Form(default=None),
    file_url: Optional[str] = Form(default=None, alias="fileUrl"),
    file: Optional[UploadFile] = File(default=None),
    member: Member = Depends(require_reviewer),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    resource = service.create_resource(
        member,
        song_title=song_title,
        description=description,
        resource_type=resource_type,
        visibility=visibility,
        file_url=file_url,
        upload=read_upload(file),
    )
    return envelope(serialize_resource(resource), message="Resource created successfully.")


@router.put("/{resource_id}")
def update_resource(
    resource_id: int,
    payload: ResourceUpdatePayload,
    _: Member = Depends(require_reviewer),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    resource = service.update_resource(resource_id, payload.model_dump(exclude_unset=True))
    return envelope(serialize_resource(resource), message="Resource updated successfully.")


@router.delete("/{resource_id}")
def delete_resource(
    resource_id: int,
    _: Member = Depends(require_reviewer),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    service.delete_resource(resource_id)
    return envelope(message="Resource deleted successfully.")
