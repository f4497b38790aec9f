from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..models import (
    Attendance,
    Donation,
    Event,
    Favorite,
    Member,
    MemberRole,
    MemberStatus,
    Merchandise,
    Order,
    OrderItem,
    PracticeSchedule,
    Resource,
    ResourceContent,
    ResourceRequest,
)
from ..models.review import Reviewable


class ChallengePurpose(str, Enum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class RegistrationOutcome(str, Enum):
    REGISTERED = "registered"
    ALREADY_REGISTERED = "already_registered"
    FULL = "full"
    MISSING_EVENT = "missing_event"


class ChallengeRepository(Protocol):
    """Storage of hashed one-time codes embedded in the member record."""

    def store_challenge(
        self, member_id: int, purpose: ChallengePurpose, code_hash: str, expires_at: datetime
    ) -> None:
        ...

    def get_challenge(
        self, member_id: int, purpose: ChallengePurpose
    ) -> Optional[Tuple[str, datetime]]:
        ...

    def consume_challenge(self, member_id: int, purpose: ChallengePurpose, code_hash: str) -> bool:
        """Clear the challenge only if ``code_hash`` is still the stored one."""
        ...

    def clear_challenge(self, member_id: int, purpose: ChallengePurpose) -> None:
        ...


class MemberRepository(ChallengeRepository, Protocol):
    """Credential store for member identity records."""

    def get_member_by_id(self, member_id: int) -> Optional[Member]:
        ...

    def get_member_by_student_id(self, student_id: str) -> Optional[Member]:
        ...

    def get_member_by_email(self, email: str) -> Optional[Member]:
        ...

    def list_members(self) -> List[Member]:
        ...

    def create_member(
        self,
        *,
        first_name: str,
        last_name: str,
        student_id: str,
        email: str,
        password_hash: str,
        role: MemberRole = MemberRole.MEMBER,
        status: MemberStatus = MemberStatus.INACTIVE,
        email_verified: bool = False,
    ) -> Member:
        ...

    def mark_email_verified(self, member_id: int) -> Member:
        ...

    def record_login(self, member_id: int, logged_in_at: datetime) -> Member:
        ...

    def update_password(self, member_id: int, password_hash: str) -> Member:
        ...

    def update_profile(self, member_id: int, fields: Dict[str, Any]) -> Member:
        ...

    def update_status(self, member_id: int, status: MemberStatus) -> Member:
        ...

    def delete_member(self, member_id: int) -> bool:
        ...


class ReviewRepository(Protocol):
    """Persistence needed by the review workflow for a single entity kind."""

    def get_reviewable(self, entity_id: int) -> Optional[Reviewable]:
        ...

    def settle_review(
        self,
        entity_id: int,
        *,
        status: str,
        reviewer_id: int,
        reviewed_at: datetime,
        reason: Optional[str],
    ) -> bool:
        """Move a pending entity to ``status``; False when it was no longer pending."""
        ...

    def reopen_review(self, entity_id: int, *, status: str, reviewer_id: int) -> bool:
        """Return an entity this reviewer settled as ``status`` to pending."""
        ...



class MerchandiseRepository(Protocol):
    def create_merchandise(
        self,
        *,
        name: str,
        description: str,
        price: float,
        image: Optional[str],
        sizes: List[str],
        stock: int,
        category: str,
        status: str,
        created_by: int,
    ) -> Merchandise:
        ...

    def get_merchandise(self, merchandise_id: int) -> Optional[Merchandise]:
        ...

    def list_merchandise(
        self, *, category: Optional[str] = None, status: Optional[str] = None
    ) -> List[Merchandise]:
        ...

    def update_merchandise(self, merchandise_id: int, fields: Dict[str, Any]) -> Merchandise:
        ...

    def delete_merchandise(self, merchandise_id: int) -> bool:
        ...


class OrderRepository(ReviewRepository, Protocol):
    def create_order(
        self,
        *,
        member_id: int,
        items: List[OrderItem],
        total_amount: float,
        receipt_url: str,
        receipt_blob_id: Optional[str],
    ) -> Order:
        ...

    def get_order(self, order_id: int) -> Optional[Order]:
        ...

    def list_orders(
        self,
        *,
        status: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        member_id: Optional[int] = None,
    ) -> List[Order]:
        ...

    def delete_order(self, order_id: int, *, only_pending: bool = False) -> bool:
        ...

    def count_orders_by_status(self) -> Dict[str, int]:
        ...

    def confirmed_revenue(self) -> float:
        ...


class ResourceRequestRepository(ReviewRepository, Protocol):
    def create_request(
        self,
        *,
        song_title: str,
        description: str,
        resource_type: str,
        content: ResourceContent,
        visibility: str,
        requested_by: int,
    ) -> ResourceRequest:
        ...

    def get_request(self, request_id: int) -> Optional[ResourceRequest]:
        ...

    def list_requests(
        self, *, status: Optional[str] = None, requested_by: Optional[int] = None
    ) -> List[ResourceRequest]:
        ...

    def delete_request(self, request_id: int, *, status: Optional[str] = None) -> bool:
        """Delete the request, only while it still has ``status`` when one is given."""
        ...


class ResourceRepository(Protocol):
    def create_resource(
        self,
        *,
        song_title: str,
        description: str,
        resource_type: str,
        content: ResourceContent,
        visibility: str,
        uploaded_by: int,
    ) -> Resource:
        ...

    def get_resource(self, resource_id: int) -> Optional[Resource]:
        ...

    def list_resources(
        self,
        *,
        status: Optional[str] = None,
        resource_type: Optional[str] = None,
        visibility: Optional[str] = None,
        search: Optional[str] = None,
        visible_to_member: Optional[int] = None,
    ) -> List[Resource]:
        ...

    def update_resource(self, resource_id: int, fields: Dict[str, Any]) -> Resource:
        ...

    def delete_resource(self, resource_id: int) -> bool:
        ...


class FavoriteRepository(Protocol):
    def add_favorite(self, member_id: int, resource_id: int) -> Optional[Favorite]:
        """Return None when the resource is already a favourite."""
        ...

    def remove_favorite(self, member_id: int, resource_id: int) -> bool:
        ...

    def list_favorites(self, member_id: int) -> List[Favorite]:
        ...

    def is_favorite(self, member_id: int, resource_id: int) -> bool:
        ...


class EventRepository(Protocol):
    def create_event(
        self,
        *,
        title: str,
        description: str,
        event_date: date,
        time: str,
        location: str,
        event_type: str,
        capacity: Optional[int],
        image: Optional[str],
        created_by: int,
    ) -> Event:
        ...

    def get_event(self, event_id: int) -> Optional[Event]:
        ...

    def list_events(
        self,
        *,
        status: Optional[str] = None,
        event_type: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Event]:
        ...

    def update_event(self, event_id: int, fields: Dict[str, Any]) -> Event:
        ...

    def delete_event(self, event_id: int) -> bool:
        ...

    def add_registration(
        self, event_id: int, member_id: int, registered_at: datetime
    ) -> RegistrationOutcome:
        ...

    def remove_registration(self, event_id: int, member_id: int) -> bool:
        ...


class ScheduleRepository(Protocol):
    def create_schedule(
        self,
        *,
        title: str,
        description: Optional[str],
        schedule_date: date,
        start_time: str,
        end_time: str,
        lecture_hall_id: str,
        created_by: int,
    ) -> PracticeSchedule:
        ...

    def get_schedule(self, schedule_id: int) -> Optional[PracticeSchedule]:
        ...

    def list_schedules(
        self,
        *,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[PracticeSchedule]:
        ...

    def update_schedule(self, schedule_id: int, fields: Dict[str, Any]) -> PracticeSchedule:
        ...

    def delete_schedule(self, schedule_id: int) -> bool:
        ...


class AttendanceRepository(Protocol):
    def upsert_attendance(
        self,
        *,
        member_id: int,
        event_id: Optional[int],
        schedule_id: Optional[int],
        status: str,
        marked_by: int,
        marked_at: datetime,
        comments: Optional[str],
    ) -> Attendance:
        ...

    def get_attendance(self, attendance_id: int) -> Optional[Attendance]:
        ...

    def list_attendance(
        self,
        *,
        event_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        member_id: Optional[int] = None,
        status: Optional[str] = None,
        marked_from: Optional[datetime] = None,
        marked_to: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Attendance], int]:
        ...

    def update_attendance(self, attendance_id: int, fields: Dict[str, Any]) -> Attendance:
        ...

    def delete_attendance(self, attendance_id: int) -> bool:
        ...


class DonationRepository(Protocol):
    def create_donation(
        self,
        *,
        donor_name: str,
        donor_email: str,
        amount: float,
        currency: str,
        tier: str,
        payment_method: str,
        transaction_id: str,
        message: str,
        is_anonymous: bool,
        member_id: Optional[int],
    ) -> Donation:
        ...

    def get_donation(self, donation_id: int) -> Optional[Donation]:
        ...

    def list_donations(
        self,
        *,
        status: Optional[str] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> List[Donation]:
        ...

    def update_donation_status(self, donation_id: int, status: str) -> Optional[Donation]:
        ...

    def delete_donation(self, donation_id: int) -> bool:
        ...
