from typing import Optional

from .base import CamelPayload


class DonationPayload(CamelPayload):
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    tier: Optional[str] = None
    payment_method: Optional[str] = None
    message: Optional[str] = None
    is_anonymous: bool = False
    member_id: Optional[int] = None


class DonationStatusPayload(CamelPayload):
    status: Optional[str] = None
