from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ....application.services.member_auth_service import MemberAuthService
from ....core.dependencies import get_auth_service
from ....domain.models import Member
from ...api.dependencies import get_current_member
from ...api.schemas.auth import (
    LoginPayload,
    RegisterPayload,
    ResetPasswordPayload,
    StudentIdPayload,
    VerifyEmailPayload,
)
from ...api.serializers import envelope, serialize_member

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterPayload,
    service: MemberAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    member = service.register(
        first_name=payload.first_name,
        last_name=payload.last_name,
        student_id=payload.student_id,
        email=payload.email,
        password=payload.password,
        confirm_password=payload.confirm_password,
    )
    return envelope(
        {"member": serialize_member(member), "requiresVerification": True},
        message="Registration successful. Please check your student email for the verification code.",
        requiresVerification=True,
    )


@router.post("/verify-email")
def verify_email(
    payload: VerifyEmailPayload,
    service: MemberAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    result = service.verify_email(payload.student_id, payload.otp)
    return envelope(
        {"token": result.token, "member": serialize_member(result.member)},
        message="Email verified successfully.",
    )


@router.post("/resend-verification")
def resend_verification(
    payload: StudentIdPayload,
    service: MemberAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    service.resend_verification(payload.student_id)
    return envelope(message="A new verification code has been sent to your student email.")


@router.post("/login")
def login(
    payload: LoginPayload,
    service: MemberAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    result = service.login(payload.student_id, payload.password)
    return envelope(
        {"token": result.token, "member": serialize_member(result.member)},
        message="Login successful.",
    )


@router.post("/forgot-password")
def forgot_password(
    payload: StudentIdPayload,
    service: MemberAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return envelope(message=service.forgot_password(payload.student_id))


@router.post("/reset-password")
def reset_password(
    payload: ResetPasswordPayload,
    service: MemberAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    service.reset_password(payload.student_id, payload.otp, payload.password, payload.confirm_password)
    return envelope(message="Password has been reset. You can now log in.")


@router.get("/profile")
def profile(member: Member = Depends(get_current_member)) -> Dict[str, Any]:
    return envelope(serialize_member(member))
