from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ....application.services.resource_service import FavoriteService
from ....core.dependencies import get_favorite_service
from ....domain.models import Member
from ...api.dependencies import get_current_member
from ...api.schemas.resources import FavoritePayload
from ...api.serializers import envelope, serialize_favorite

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.post("", status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoritePayload,
    member: Member = Depends(get_current_member),
    service: FavoriteService = Depends(get_favorite_service),
) -> Dict[str, Any]:
    favorite = service.add_favorite(member, payload.resource_id)
    return envelope(serialize_favorite(favorite), message="Added to favorites.")


@router.get("")
def list_favorites(
    member: Member = Depends(get_current_member),
    service: FavoriteService = Depends(get_favorite_service),
) -> Dict[str, Any]:
    entries = service.list_favorites(member)
    return envelope([serialize_favorite(favorite, resource) for favorite, resource in entries], count=len(entries))


@router.get("/check/{resource_id}")
def check_favorite(
    resource_id: int,
    member: Member = Depends(get_current_member),
    service: FavoriteService = Depends(get_favorite_service),
) -> Dict[str, Any]:
    return envelope({"isFavorite": service.is_favorite(member, resource_id)})


@router.delete("/{resource_id}")
def remove_favorite(
    resource_id: int,
    member: Member = Depends(get_current_member),
    service: FavoriteService = Depends(get_favorite_service),
) -> Dict[str, Any]:
    service.remove_favorite(member, resource_id)
    return envelope(message="Removed from favorites.")
