from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ....application.services.order_service import OrderService
from ....core.dependencies import get_order_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, require_reviewer
from ...api.schemas.review import ReviewReasonPayload
from ...api.serializers import envelope, serialize_order
from ...api.uploads import parse_json_field, read_upload

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    items: Optional[str] = Form(default=None),
    receipt: Optional[UploadFile] = File(default=None),
    member: Member = Depends(get_current_member),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    order = service.create_order(member, parse_json_field(items, "items"), read_upload(receipt))
    return envelope(serialize_order(order), message="Order placed successfully. Awaiting verification.")


@router.get("/stats/summary")
def order_statistics(
    _: Member = Depends(require_reviewer),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    stats = service.statistics()
    return envelope(
        {
            "totalOrders": stats["total_orders"],
            "pendingOrders": stats["pending_orders"],
            "confirmedOrders": stats["confirmed_orders"],
            "declinedOrders": stats["declined_orders"],
            "totalRevenue": stats["total_revenue"],
        }
    )


@router.get("/my-orders")
def my_orders(
    member: Member = Depends(get_current_member),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    orders = service.list_member_orders(member.id)
    return envelope([serialize_order(order) for order in orders], count=len(orders))


@router.get("")
def list_orders(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    period: Optional[str] = Query(default=None),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    category: Optional[str] = Query(default=None),
    size: Optional[str] = Query(default=None),
    _: Member = Depends(require_reviewer),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    orders = service.list_orders(
        status=status_filter,
        period=period,
        start_date=start_date,
        end_date=end_date,
        category=category,
        size=size,
    )
    return envelope([serialize_order(order) for order in orders], count=len(orders))


@router.get("/{order_id}")
def get_order(
    order_id: int,
    member: Member = Depends(get_current_member),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    return envelope(serialize_order(service.get_order(member, order_id)))


@router.put("/{order_id}/confirm")
def confirm_order(
    order_id: int,
    reviewer: Member = Depends(require_reviewer),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    order = service.confirm_order(order_id, reviewer)
    return envelope(serialize_order(order), message="Order confirmed successfully.")


@router.put("/{order_id}/decline")
def decline_order(
    order_id: int,
    payload: ReviewReasonPayload,
    reviewer: Member = Depends(require_reviewer),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    order = service.decline_order(order_id, reviewer, payload.reason)
    return envelope(serialize_order(order), message="Order declined.")


@router.delete("/{order_id}")
def delete_order(
    order_id: int,
    member: Member = Depends(get_current_member),
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    service.delete_order(member, order_id)
    return envelope(message="Order deleted successfully.")
