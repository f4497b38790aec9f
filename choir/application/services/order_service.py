from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ...domain.clock import utc_now
from ...domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...domain.models import Member, Order, OrderItem, OrderStatus
from ...domain.ports.collaborators import BlobStore, FileUpload
from ...domain.ports.persistence import MerchandiseRepository, OrderRepository
from .review_workflow import ReviewPolicy, ReviewWorkflow

logger = logging.getLogger(__name__)

RECEIPT_FOLDER = "receipts"
ORDER_REVIEW = ReviewPolicy(
    label="Order",
    approved_status=OrderStatus.CONFIRMED.value,
    rejected_status=OrderStatus.DECLINED.value,
)
PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}


class OrderService:
    """Merchandise orders paid by uploaded bank receipt and confirmed by a moderator."""

    def __init__(
        self,
        orders: OrderRepository,
        merchandise: MerchandiseRepository,
        blob_store: BlobStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._orders = orders
        self._merchandise = merchandise
        self._blob_store = blob_store
        self._clock = clock
        self._workflow: ReviewWorkflow[Order] = ReviewWorkflow(orders, ORDER_REVIEW, clock=clock)

    def create_order(self, member: Member, items: Any, receipt: Optional[FileUpload]) -> Order:
        """Price every item from the catalogue, store the receipt and open a pending order."""
        if not isinstance(items, list) or not items:
            raise ValidationError("At least one item must be ordered.")
        if receipt is None or not receipt.content:
            raise ValidationError("Receipt file is required.")

        order_items = [self._build_item(raw) for raw in items]
        total_amount = round(sum(item.total for item in order_items), 2)

        blob = self._blob_store.upload(
            receipt.content,
            RECEIPT_FOLDER,
            content_type=receipt.content_type,
            filename=receipt.filename,
        )
        try:
            order = self._orders.create_order(
                member_id=member.id,
                items=order_items,
                total_amount=total_amount,
                receipt_url=blob.url,
                receipt_blob_id=blob.blob_id,
            )
        except Exception:
            self._discard_receipt(blob.blob_id)
            raise
        logger.info("Order %s created by member %s (total %.2f)", order.id, member.id, total_amount)
        return order

    def _discard_receipt(self, blob_id: str) -> None:
        try:
            self._blob_store.delete(blob_id)
        except Exception:
            logger.warning("Failed to delete stored receipt %s", blob_id, exc_info=True)

    def _build_item(self, raw: Any) -> OrderItem:
        if not isinstance(raw, dict):
            raise ValidationError("Each item must have merchandiseId, size, and quantity.")
        merchandise_id = raw.get("merchandiseId", raw.get("merchandise_id"))
        size = raw.get("size")
        quantity = raw.get("quantity")
        if not merchandise_id or not size or not quantity:
            raise ValidationError("Each item must have merchandiseId, size, and quantity.")
        try:
            merchandise_id = int(merchandise_id)
            quantity = int(quantity)
        except (TypeError, ValueError) as exc:
            raise ValidationError("merchandiseId and quantity must be integers.") from exc
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1.")

        merchandise = self._merchandise.get_merchandise(merchandise_id)
        if merchandise is None:
            raise NotFoundError(f"Merchandise with ID {merchandise_id} not found.")
        if not merchandise.is_available:
            raise ValidationError(f"{merchandise.name} is not available for purchase.")
        if size not in merchandise.sizes:
            raise ValidationError(f"Size {size} is not available for {merchandise.name}.")
        return OrderItem(
            merchandise_id=merchandise.id,
            name=merchandise.name,
            size=size,
            quantity=quantity,
            price=merchandise.price,
            category=merchandise.category,
        )

    def list_orders(
        self,
        *,
        status: Optional[str] = None,
        period: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        size: Optional[str] = None,
    ) -> List[Order]:
        created_from: Optional[datetime] = None
        created_to: Optional[datetime] = None
        if period:
            days = PERIOD_DAYS.get(period)
            if days is not None:
                created_from = self._clock() - timedelta(days=days)
        else:
            if start_date:
                created_from = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
            if end_date:
                created_to = datetime.combine(end_date, time.max, tzinfo=timezone.utc)
        orders = self._orders.list_orders(status=status, created_from=created_from, created_to=created_to)
        if category:
            orders = [o for o in orders if any(item.category == category for item in o.items)]
        if size:
            orders = [o for o in orders if any(item.size == size for item in o.items)]
        return orders

    def list_member_orders(self, member_id: int) -> List[Order]:
        return self._orders.list_orders(member_id=member_id)

    def get_order(self, actor: Member, order_id: int) -> Order:
        order = self._orders.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found.")
        if not actor.is_reviewer and order.member_id != actor.id:
            raise ForbiddenError("Not authorized to view this order.")
        return order

    def confirm_order(self, order_id: int, reviewer: Member) -> Order:
        return self._workflow.approve(order_id, reviewer.id).entity

    def decline_order(self, order_id: int, reviewer: Member, reason: Optional[str]) -> Order:
        return self._workflow.reject(order_id, reviewer.id, reason).entity

    def delete_order(self, actor: Member, order_id: int) -> None:
        order = self._orders.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found.")
        if actor.is_reviewer:
            self._orders.delete_order(order_id)
        else:
            if order.member_id != actor.id:
                raise ForbiddenError("Not authorized to delete this order.")
            if not self._orders.delete_order(order_id, only_pending=True):
                raise ConflictError("Can only delete pending orders.", status_code=400)
        logger.info("Order %s deleted by member %s", order_id, actor.id)

    def statistics(self) -> Dict[str, Any]:
        counts = self._orders.count_orders_by_status()
        return {
            "total_orders": sum(counts.values()),
            "pending_orders": counts.get(OrderStatus.PENDING.value, 0),
            "confirmed_orders": counts.get(OrderStatus.CONFIRMED.value, 0),
            "declined_orders": counts.get(OrderStatus.DECLINED.value, 0),
            "total_revenue": self._orders.confirmed_revenue(),
        }
