from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ...domain.errors import ForbiddenError, NotFoundError, ValidationError
from ...domain.models import Member, MemberRole, MemberStatus
from ...domain.ports.persistence import MemberRepository

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "bio", "avatar")


class MemberService:
    """Administrative access to member records."""

    def __init__(self, members: MemberRepository) -> None:
        self._members = members

    def list_members(self) -> List[Member]:
        return self._members.list_members()

    def get_member(self, member_id: int) -> Member:
        member = self._members.get_member_by_id(member_id)
        if member is None:
            raise NotFoundError("Member not found.")
        return member

    def update_profile(self, actor: Member, member_id: int, changes: Dict[str, Any]) -> Member:
        if actor.id != member_id and actor.role is not MemberRole.ADMIN:
            raise ForbiddenError("You can only update your own profile.")
        self.get_member(member_id)
        fields: Dict[str, Any] = {}
        for key in PROFILE_FIELDS:
            if key not in changes or changes[key] is None:
                continue
            value = changes[key]
            if isinstance(value, str):
                value = value.strip()
            if key in ("first_name", "last_name") and not value:
                raise ValidationError("Name fields cannot be empty.")
            fields[key] = value
        if not fields:
            return self.get_member(member_id)
        return self._members.update_profile(member_id, fields)

    def update_status(self, member_id: int, status: Optional[str]) -> Member:
        try:
            new_status = MemberStatus(status)
        except ValueError as exc:
            raise ValidationError("Status must be one of: active, inactive, suspended.") from exc
        member = self.get_member(member_id)
        if new_status is MemberStatus.INACTIVE and member.email_verified:
            raise ValidationError("A verified member cannot be set back to inactive. Suspend the account instead.")
        updated = self._members.update_status(member_id, new_status)
        logger.info("Member %s status changed to %s", member.student_id, new_status.value)
        return updated

    def delete_member(self, member_id: int) -> None:
        if not self._members.delete_member(member_id):
            raise NotFoundError("Member not found.")
        logger.info("Member %s deleted", member_id)
