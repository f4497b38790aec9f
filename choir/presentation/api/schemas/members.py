from typing import Optional

from .base import CamelPayload


class ProfileUpdatePayload(CamelPayload):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class StatusPayload(CamelPayload):
    status: Optional[str] = None
