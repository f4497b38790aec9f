from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....application.services.member_service import MemberService
from ....core.dependencies import get_member_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, require_admin, require_reviewer
from ...api.schemas.members import ProfileUpdatePayload, StatusPayload
from ...api.serializers import envelope, serialize_member

router = APIRouter(prefix="/api/members", tags=["Members"])


@router.get("")
def list_members(
    _: Member = Depends(require_reviewer),
    service: MemberService = Depends(get_member_service),
) -> Dict[str, Any]:
    return envelope([serialize_member(member) for member in service.list_members()])


@router.get("/{member_id}")
def get_member(
    member_id: int,
    _: Member = Depends(get_current_member),
    service: MemberService = Depends(get_member_service),
) -> Dict[str, Any]:
    return envelope(serialize_member(service.get_member(member_id)))


@router.put("/{member_id}")
def update_member(
    member_id: int,
    payload: ProfileUpdatePayload,
    actor: Member = Depends(get_current_member),
    service: MemberService = Depends(get_member_service),
) -> Dict[str, Any]:
    member = service.update_profile(actor, member_id, payload.model_dump(exclude_unset=True))
    return envelope(serialize_member(member), message="Profile updated.")


@router.put("/{member_id}/status")
def update_member_status(
    member_id: int,
    payload: StatusPayload,
    _: Member = Depends(require_reviewer),
    service: MemberService = Depends(get_member_service),
) -> Dict[str, Any]:
    member = service.update_status(member_id, payload.status)
    return envelope(serialize_member(member), message=f"Member status updated to {member.status.value}.")


@router.delete("/{member_id}")
def delete_member(
    member_id: int,
    _: Member = Depends(require_admin),
    service: MemberService = Depends(get_member_service),
) -> Dict[str, Any]:
    service.delete_member(member_id)
    return envelope(message="Member deleted.")
