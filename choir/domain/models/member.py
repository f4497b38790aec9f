"""Member domain model for authentication and membership management."""

import re
from datetime import datetime
from enum import Enum
from typing import Optional

STUDENT_ID_PATTERN = re.compile(r"^[A-Z]{2}\d{8}$")
STUDENT_EMAIL_DOMAIN = "my.sliit.lk"


class MemberRole(str, Enum):
    MEMBER = "member"
    MODERATOR = "moderator"
    ADMIN = "admin"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


REVIEWER_ROLES = frozenset({MemberRole.MODERATOR, MemberRole.ADMIN})


def student_email(student_id: str, domain: str = STUDENT_EMAIL_DOMAIN) -> str:
    """Return the university mailbox that belongs to ``student_id``."""
    return f"{student_id.strip().lower()}@{domain}"


class Member:
    """
    Member entity holding identity, credentials and profile data.

    Attributes:
        id: Unique identifier
        first_name: Given name
        last_name: Family name
        student_id: University student id, two letters and eight digits (unique)
        email: University mailbox derived from the student id (unique)
        password_hash: bcrypt hash of the password
        role: member, moderator or admin
        status: active, inactive or suspended
        email_verified: Whether the emailed one-time code was confirmed
        verification_code_hash: Hash of the pending verification code
        verification_expires_at: Expiry of the pending verification code
        password_reset_code_hash: Hash of the pending password reset code
        password_reset_expires_at: Expiry of the pending password reset code
        last_login_at: Timestamp of the last successful login
        phone_number: Optional contact number
        bio: Free-form profile text
        avatar: Optional avatar URL
        member_since: Membership start
        created_at: Record creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: int,
        first_name: str,
        last_name: str,
        student_id: str,
        email: str,
        password_hash: str,
        role: MemberRole = MemberRole.MEMBER,
        status: MemberStatus = MemberStatus.INACTIVE,
        email_verified: bool = False,
        verification_code_hash: Optional[str] = None,
        verification_expires_at: Optional[datetime] = None,
        password_reset_code_hash: Optional[str] = None,
        password_reset_expires_at: Optional[datetime] = None,
        last_login_at: Optional[datetime] = None,
        phone_number: Optional[str] = None,
        bio: str = "",
        avatar: Optional[str] = None,
        member_since: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.first_name = first_name
        self.last_name = last_name
        self.student_id = student_id
        self.email = email
        self.password_hash = password_hash
        self.role = MemberRole(role)
        self.status = MemberStatus(status)
        self.email_verified = email_verified
        self.verification_code_hash = verification_code_hash
        self.verification_expires_at = verification_expires_at
        self.password_reset_code_hash = password_reset_code_hash
        self.password_reset_expires_at = password_reset_expires_at
        self.last_login_at = last_login_at
        self.phone_number = phone_number
        self.bio = bio
        self.avatar = avatar
        self.member_since = member_since or created_at
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES

    def __repr__(self) -> str:
        return (
            f"<Member id={self.id} student_id={self.student_id} "
            f"status={self.status.value} verified={self.email_verified}>"
        )
