"""Signed session tokens for authenticated members."""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict

from jose import JWTError, jwt

from ..domain.clock import utc_now
from ..domain.errors import AuthError
from ..domain.models import Member

logger = logging.getLogger(__name__)

DEFAULT_SECRET = "change-me"


class TokenService:
    """Issues and validates HS256 JWTs. Tokens are stateless and never revoked."""

    def __init__(
        self,
        secret_key: str,
        expire_minutes: int = 60 * 24 * 7,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not secret_key:
            raise RuntimeError("JWT_SECRET is not configured.")
        if secret_key == DEFAULT_SECRET:
            logger.warning("JWT_SECRET is using the default value. Configure a real secret in production.")
        self._secret_key = secret_key
        self._expire_minutes = expire_minutes
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, member: Member) -> str:
        now = self._clock()
        payload = {
            "sub": str(member.id),
            "id": member.id,
            "role": member.role.value,
            "studentId": member.student_id,
            "email": member.email,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=self._expire_minutes)).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def validate(self, token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            raise AuthError("Invalid or expired token.") from exc
        try:
            claims["id"] = int(claims["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthError("Invalid or expired token.") from exc
        return claims
