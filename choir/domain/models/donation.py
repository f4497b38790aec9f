from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class DonationTier(str, Enum):
    SUPPORTER = "supporter"
    PATRON = "patron"
    BENEFACTOR = "benefactor"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    OTHER = "other"


class DonationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass(slots=True)
class Donation:
    id: int
    donor_name: str
    donor_email: str
    amount: float
    currency: str
    tier: str
    payment_method: str
    transaction_id: str
    status: str
    message: str
    is_anonymous: bool
    member_id: Optional[int]
    created_at: datetime
    updated_at: datetime
