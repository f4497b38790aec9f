from typing import Optional

from .base import CamelPayload


class RegisterPayload(CamelPayload):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    student_id: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None


class VerifyEmailPayload(CamelPayload):
    student_id: Optional[str] = None
    otp: Optional[str] = None


class StudentIdPayload(CamelPayload):
    student_id: Optional[str] = None


class LoginPayload(CamelPayload):
    student_id: Optional[str] = None
    password: Optional[str] = None


class ResetPasswordPayload(CamelPayload):
    student_id: Optional[str] = None
    otp: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
