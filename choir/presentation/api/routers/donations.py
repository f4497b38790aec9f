from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.donation_service import DonationService
from ....core.dependencies import get_donation_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, get_optional_member, require_admin, require_reviewer
from ...api.schemas.donations import DonationPayload, DonationStatusPayload
from ...api.serializers import envelope, serialize_donation

router = APIRouter(prefix="/api/donations", tags=["Donations"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_donation(
    payload: DonationPayload,
    member: Optional[Member] = Depends(get_optional_member),
    service: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    donation = service.create_donation(
        donor_name=payload.donor_name,
        donor_email=payload.donor_email,
        amount=payload.amount,
        currency=payload.currency,
        tier=payload.tier,
        payment_method=payload.payment_method,
        message=payload.message,
        is_anonymous=payload.is_anonymous,
        member_id=member.id if member else payload.member_id,
    )
    return envelope(serialize_donation(donation), message="Donation recorded.")


@router.get("")
def list_donations(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    min_amount: Optional[float] = Query(default=None, alias="minAmount"),
    max_amount: Optional[float] = Query(default=None, alias="maxAmount"),
    _: Member = Depends(require_reviewer),
    service: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    donations = service.list_donations(
        status=status_filter,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=start_date,
        end_date=end_date,
    )
    return envelope([serialize_donation(item) for item in donations], count=len(donations))


@router.get("/stats/summary")
def donation_statistics(
    _: Member = Depends(require_reviewer),
    service: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    stats = service.statistics()
    return envelope(
        {
            "totalDonations": stats["total_donations"],
            "donorCount": stats["donor_count"],
            "averageDonation": stats["average_donation"],
            "maxDonation": stats["max_donation"],
            "minDonation": stats["min_donation"],
            "byTier": stats["by_tier"],
        }
    )


@router.get("/{donation_id}")
def get_donation(
    donation_id: int,
    viewer: Member = Depends(get_current_member),
    service: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    return envelope(serialize_donation(service.get_donation(viewer, donation_id)))


@router.put("/{donation_id}/status")
def update_donation_status(
    donation_id: int,
    payload: DonationStatusPayload,
    _: Member = Depends(require_admin),
    service: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    donation = service.update_status(donation_id, payload.status)
    return envelope(serialize_donation(donation), message="Donation status updated.")


@router.delete("/{donation_id}")
def delete_donation(
    donation_id: int,
    _: Member = Depends(require_admin),
    service: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    service.delete_donation(donation_id)
    return envelope(message="Donation deleted.")
