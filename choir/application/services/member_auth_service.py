from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ...domain.clock import utc_now
from ...domain.errors import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...domain.models import Member, MemberRole, MemberStatus
from ...domain.models.member import STUDENT_EMAIL_DOMAIN, STUDENT_ID_PATTERN, student_email
from ...domain.ports.collaborators import Mailer
from ...domain.ports.persistence import ChallengePurpose, MemberRepository
from ...services.otp_service import OtpOutcome, OtpService
from ...services.password_service import PasswordHasher
from ...services.token_service import TokenService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid student ID or password."
FORGOT_PASSWORD_MESSAGE = "If the account exists, a password reset code has been sent to its email."


@dataclass(slots=True)
class AuthResult:
    member: Member
    token: str


def _normalize_student_id(student_id: Optional[str]) -> str:
    return (student_id or "").strip().upper()


class MemberAuthService:
    """Registration, email verification, login and password recovery for members."""

    def __init__(
        self,
        members: MemberRepository,
        otp_service: OtpService,
        token_service: TokenService,
        hasher: PasswordHasher,
        mailer: Mailer,
        email_domain: str = STUDENT_EMAIL_DOMAIN,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._members = members
        self._otp = otp_service
        self._tokens = token_service
        self._hasher = hasher
        self._mailer = mailer
        self._email_domain = email_domain
        self._clock = clock

    # ------------------------------------------------------------------
    def register(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        student_id: Optional[str],
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> Member:
        """Create an unverified member and mail the verification code.

        No session token is issued here; the member has to verify the code
        before logging in. If the code cannot be delivered the new record is
        removed again so the student can retry the registration.
        """
        first = (first_name or "").strip()
        last = (last_name or "").strip()
        if not all([first, last, (student_id or "").strip(), (email or "").strip(), password, confirm_password]):
            raise ValidationError("Please provide all required fields.")

        normalized_id = _normalize_student_id(student_id)
        if not STUDENT_ID_PATTERN.match(normalized_id):
            raise ValidationError(
                "Student ID must be 2 letters followed by 8 digits (for example CS12345678)."
            )
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")

        normalized_email = email.strip().lower()
        expected_email = student_email(normalized_id, self._email_domain)
        if normalized_email != expected_email:
            raise ValidationError(f"Email must be your student email ({expected_email}).")

        if self._members.get_member_by_student_id(normalized_id):
            raise ConflictError("A member with this student ID is already registered.")
        if self._members.get_member_by_email(normalized_email):
            raise ConflictError("A member with this email is already registered.")

        member = self._members.create_member(
            first_name=first,
            last_name=last,
            student_id=normalized_id,
            email=normalized_email,
            password_hash=self._hasher.hash(password),
        )
        code = self._otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
        try:
            self._mailer.send_verification_email(member.email, code, member.first_name)
        except Exception:
            logger.error("Verification email for %s could not be sent; removing member", member.student_id)
            self._members.delete_member(member.id)
            raise
        logger.info("Registered member %s, awaiting email verification", member.student_id)
        return member

    def verify_email(self, student_id: Optional[str], otp: Optional[str]) -> AuthResult:
        normalized_id = _normalize_student_id(student_id)
        code = (otp or "").strip()
        if not normalized_id or not code:
            raise ValidationError("Student ID and verification code are required.")

        member = self._members.get_member_by_student_id(normalized_id)
        if member is None:
            raise NotFoundError("Member not found.")
        if member.email_verified:
            raise ValidationError("Email is already verified. Please log in.")

        outcome = self._otp.verify(member.id, code, ChallengePurpose.EMAIL_VERIFICATION)
        if outcome is OtpOutcome.NONE_PENDING:
            raise ValidationError("No pending verification code. Please register again.")
        if outcome is OtpOutcome.EXPIRED:
            raise ValidationError("Verification code has expired. Please register again.")
        if outcome is OtpOutcome.MISMATCH:
            raise ValidationError("Invalid verification code.")

        member = self._members.mark_email_verified(member.id)
        logger.info("Member %s verified their email", member.student_id)
        return AuthResult(member=member, token=self._tokens.issue(member))

    def resend_verification(self, student_id: Optional[str]) -> Member:
        normalized_id = _normalize_student_id(student_id)
        if not normalized_id:
            raise ValidationError("Student ID is required.")
        member = self._members.get_member_by_student_id(normalized_id)
        if member is None:
            raise NotFoundError("Member not found.")
        if member.email_verified:
            raise ValidationError("Email is already verified. Please log in.")
        code = self._otp.issue(member.id, ChallengePurpose.EMAIL_VERIFICATION)
        self._mailer.send_verification_email(member.email, code, member.first_name)
        return member

    def login(self, student_id: Optional[str], password: Optional[str]) -> AuthResult:
        normalized_id = _normalize_student_id(student_id)
        if not normalized_id or not password:
            raise ValidationError("Please provide student ID and password.")

        member = self._members.get_member_by_student_id(normalized_id)
        if member is None or not self._hasher.verify(password, member.password_hash):
            raise AuthError(INVALID_CREDENTIALS)
        if not member.email_verified:
            raise ForbiddenError("Please verify your email before logging in.")
        if member.status is not MemberStatus.ACTIVE:
            raise ForbiddenError("Account is not active.")

        member = self._members.record_login(member.id, self._clock())
        return AuthResult(member=member, token=self._tokens.issue(member))

    def get_profile(self, member_id: int) -> Member:
        member = self._members.get_member_by_id(member_id)
        if member is None:
            raise NotFoundError("Member not found.")
        return member

    def forgot_password(self, student_id: Optional[str]) -> str:
        """Mail a reset code when the account exists; the answer never reveals whether it does."""
        normalized_id = _normalize_student_id(student_id)
        if not normalized_id:
            raise ValidationError("Student ID is required.")
        member = self._members.get_member_by_student_id(normalized_id)
        if member is not None and member.email_verified:
            code = self._otp.issue(member.id, ChallengePurpose.PASSWORD_RESET)
            self._mailer.send_password_reset_email(member.email, code, member.first_name)
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(
        self,
        student_id: Optional[str],
        otp: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> Member:
        normalized_id = _normalize_student_id(student_id)
        code = (otp or "").strip()
        if not normalized_id or not code or not password or not confirm_password:
            raise ValidationError("Please provide all required fields.")
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")

        member = self._members.get_member_by_student_id(normalized_id)
        if member is None:
            raise ValidationError("Invalid or expired reset code.")
        outcome = self._otp.verify(member.id, code, ChallengePurpose.PASSWORD_RESET)
        if outcome is OtpOutcome.NONE_PENDING:
            raise ValidationError("No pending reset code. Please request a new one.")
        if outcome is OtpOutcome.EXPIRED:
            raise ValidationError("Reset code has expired. Please request a new one.")
        if outcome is OtpOutcome.MISMATCH:
            raise ValidationError("Invalid reset code.")

        member = self._members.update_password(member.id, self._hasher.hash(password))
        logger.info("Member %s reset their password", member.student_id)
        return member

    def ensure_default_admin(
        self,
        student_id: Optional[str],
        password: Optional[str],
        first_name: str = "Choir",
        last_name: str = "Admin",
    ) -> Optional[Member]:
        normalized_id = _normalize_student_id(student_id)
        if not normalized_id or not password:
            return None
        if not STUDENT_ID_PATTERN.match(normalized_id):
            raise RuntimeError("ADMIN_STUDENT_ID must be 2 letters followed by 8 digits.")
        existing = self._members.get_member_by_student_id(normalized_id)
        if existing:
            return existing
        logger.info("Creating default administrator account for %s", normalized_id)
        return self._members.create_member(
            first_name=first_name,
            last_name=last_name,
            student_id=normalized_id,
            email=student_email(normalized_id, self._email_domain),
            password_hash=self._hasher.hash(password),
            role=MemberRole.ADMIN,
            status=MemberStatus.ACTIVE,
            email_verified=True,
        )
