from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


@dataclass(slots=True)
class OrderItem:
    merchandise_id: int
    name: str
    size: str
    quantity: int
    price: float
    category: Optional[str] = None

    @property
    def total(self) -> float:
        return self.price * self.quantity


@dataclass(slots=True)
class Order:
    id: int
    member_id: int
    items: List[OrderItem]
    total_amount: float
    receipt_url: str
    receipt_blob_id: Optional[str]
    status: str
    reason: Optional[str]
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
