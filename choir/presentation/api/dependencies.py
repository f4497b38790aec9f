from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.member_auth_service import MemberAuthService
from ...core.dependencies import get_auth_service, get_token_service
from ...domain.errors import NotFoundError
from ...domain.models import Member, MemberRole
from ...services.token_service import TokenService

_bearer_scheme = HTTPBearer(auto_error=False)


def _resolve_member(
    credentials: Optional[HTTPAuthorizationCredentials],
    tokens: TokenService,
    auth_service: MemberAuthService,
) -> Member:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided.")
    claims = tokens.validate(credentials.credentials)
    try:
        return auth_service.get_profile(claims["id"])
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Member not found.") from exc


def get_current_member(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    auth_service: MemberAuthService = Depends(get_auth_service),
) -> Member:
    return _resolve_member(credentials, tokens, auth_service)


def get_optional_member(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    auth_service: MemberAuthService = Depends(get_auth_service),
) -> Optional[Member]:
    if credentials is None:
        return None
    return _resolve_member(credentials, tokens, auth_service)


def require_reviewer(member: Member = Depends(get_current_member)) -> Member:
    """Moderators and admins only."""
    if not member.is_reviewer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action.",
        )
    return member


def require_admin(member: Member = Depends(get_current_member)) -> Member:
    if member.role is not MemberRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action.",
        )
    return member
