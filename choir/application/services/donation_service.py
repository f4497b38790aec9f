from __future__ import annotations

import logging
import secrets
import string
from collections import defaultdict
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional

from ...domain.clock import utc_now
from ...domain.errors import ForbiddenError, NotFoundError, ValidationError
from ...domain.models import (
    Donation,
    DonationStatus,
    DonationTier,
    Member,
    MemberRole,
    PaymentMethod,
)
from ...domain.ports.persistence import DonationRepository
from ..validation import clean_text, parse_enum

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"
_TXN_ALPHABET = string.ascii_uppercase + string.digits


def _parse_amount(value: Any) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Amount must be a number.") from exc
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0.")
    return round(amount, 2)


class DonationService:
    """Donations from supporters, recorded pending until an admin settles them."""

    def __init__(self, donations: DonationRepository, clock: Callable[[], datetime] = utc_now) -> None:
        self._donations = donations
        self._clock = clock

    def new_transaction_id(self) -> str:
        millis = int(self._clock().timestamp() * 1000)
        suffix = "".join(secrets.choice(_TXN_ALPHABET) for _ in range(9))
        return f"TXN_{millis}_{suffix}"

    def create_donation(
        self,
        *,
        donor_name: Optional[str],
        donor_email: Optional[str],
        amount: Any,
        currency: Optional[str] = None,
        tier: Optional[str] = None,
        payment_method: Optional[str] = None,
        message: Optional[str] = None,
        is_anonymous: bool = False,
        member_id: Optional[int] = None,
    ) -> Donation:
        if not clean_text(donor_name) or not clean_text(donor_email) or amount is None:
            raise ValidationError("Missing required fields: donorName, donorEmail and amount.")
        donation = self._donations.create_donation(
            donor_name=clean_text(donor_name),
            donor_email=clean_text(donor_email).lower(),
            amount=_parse_amount(amount),
            currency=(clean_text(currency) or DEFAULT_CURRENCY).upper(),
            tier=parse_enum(DonationTier, tier or DonationTier.SUPPORTER.value, "Tier").value,
            payment_method=parse_enum(
                PaymentMethod, payment_method or PaymentMethod.CREDIT_CARD.value, "Payment method"
            ).value,
            transaction_id=self.new_transaction_id(),
            message=clean_text(message),
            is_anonymous=bool(is_anonymous),
            member_id=member_id,
        )
        logger.info("Donation %s recorded (%s %.2f)", donation.transaction_id, donation.currency, donation.amount)
        return donation

    def list_donations(
        self,
        *,
        status: Optional[str] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Donation]:
        return self._donations.list_donations(
            status=status,
            min_amount=min_amount,
            max_amount=max_amount,
            created_from=datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None,
            created_to=datetime.combine(end_date, time.max, tzinfo=timezone.utc) if end_date else None,
        )

    def statistics(self) -> Dict[str, Any]:
        """Totals over completed donations, overall and per tier."""
        completed = self._donations.list_donations(status=DonationStatus.COMPLETED.value)
        amounts = [donation.amount for donation in completed]
        by_tier: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "total": 0.0})
        for donation in completed:
            by_tier[donation.tier]["count"] += 1
            by_tier[donation.tier]["total"] = round(by_tier[donation.tier]["total"] + donation.amount, 2)
        return {
            "total_donations": round(sum(amounts), 2),
            "donor_count": len(completed),
            "average_donation": round(sum(amounts) / len(amounts), 2) if amounts else 0,
            "max_donation": max(amounts) if amounts else 0,
            "min_donation": min(amounts) if amounts else 0,
            "by_tier": [{"tier": tier, **values} for tier, values in sorted(by_tier.items())],
        }

    def get_donation(self, viewer: Optional[Member], donation_id: int) -> Donation:
        donation = self._donations.get_donation(donation_id)
        if donation is None:
            raise NotFoundError("Donation not found.")
        if donation.is_anonymous and (viewer is None or viewer.role is not MemberRole.ADMIN):
            raise ForbiddenError("Not authorized to view this donation.")
        return donation

    def update_status(self, donation_id: int, status: Optional[str]) -> Donation:
        if not status:
            raise ValidationError("Status is required.")
        new_status = parse_enum(DonationStatus, status, "Status")
        donation = self._donations.update_donation_status(donation_id, new_status.value)
        if donation is None:
            raise NotFoundError("Donation not found.")
        logger.info("Donation %s marked %s", donation_id, new_status.value)
        return donation

    def delete_donation(self, donation_id: int) -> None:
        if not self._donations.delete_donation(donation_id):
            raise NotFoundError("Donation not found.")
        logger.info("Donation %s deleted", donation_id)
