from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.merchandise_service import MerchandiseService
from ....core.dependencies import get_merchandise_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, require_reviewer
from ...api.schemas.merchandise import MerchandiseCreatePayload, MerchandiseUpdatePayload
from ...api.serializers import envelope, serialize_merchandise

router = APIRouter(prefix="/api/merchandise", tags=["Merchandise"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_merchandise(
    payload: MerchandiseCreatePayload,
    actor: Member = Depends(require_reviewer),
    service: MerchandiseService = Depends(get_merchandise_service),
) -> Dict[str, Any]:
    item = service.create(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        sizes=payload.sizes,
        category=payload.category,
        created_by=actor.id,
        image=payload.image,
        stock=payload.stock,
        status=payload.status,
    )
    return envelope(serialize_merchandise(item), message="Merchandise created successfully.")


@router.get("")
def list_merchandise(
    category: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    _: Member = Depends(get_current_member),
    service: MerchandiseService = Depends(get_merchandise_service),
) -> Dict[str, Any]:
    items = service.list_merchandise(category=category, status=status_filter)
    return envelope([serialize_merchandise(item) for item in items], count=len(items))


@router.get("/{merchandise_id}")
def get_merchandise(
    merchandise_id: int,
    _: Member = Depends(get_current_member),
    service: MerchandiseService = Depends(get_merchandise_service),
) -> Dict[str, Any]:
    return envelope(serialize_merchandise(service.get(merchandise_id)))


@router.put("/{merchandise_id}")
def update_merchandise(
    merchandise_id: int,
    payload: MerchandiseUpdatePayload,
    _: Member = Depends(require_reviewer),
    service: MerchandiseService = Depends(get_merchandise_service),
) -> Dict[str, Any]:
    item = service.update(merchandise_id, payload.model_dump(exclude_unset=True))
    return envelope(serialize_merchandise(item), message="Merchandise updated successfully.")


@router.delete("/{merchandise_id}")
def delete_merchandise(
    merchandise_id: int,
    _: Member = Depends(require_reviewer),
    service: MerchandiseService = Depends(get_merchandise_service),
) -> Dict[str, Any]:
    service.delete(merchandise_id)
    return envelope(message="Merchandise deleted successfully.")
