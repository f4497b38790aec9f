"""Domain models for the choir backend."""

from .attendance import Attendance, AttendanceStatus
from .donation import Donation, DonationStatus, DonationTier, PaymentMethod
from .event import Event, EventRegistration, EventStatus, EventType
from .member import Member, MemberRole, MemberStatus
from .merchandise import Merchandise, MerchandiseCategory, MerchandiseStatus
from .order import Order, OrderItem, OrderStatus
from .resource import (
    ExternalLink,
    Favorite,
    Resource,
    ResourceContent,
    ResourceRequest,
    ResourceRequestStatus,
    ResourceStatus,
    ResourceType,
    UploadedFile,
    Visibility,
)
from .schedule import PracticeSchedule

__all__ = [
    "Attendance",
    "AttendanceStatus",
    "Donation",
    "DonationStatus",
    "DonationTier",
    "Event",
    "EventRegistration",
    "EventStatus",
    "EventType",
    "ExternalLink",
    "Favorite",
    "Member",
    "MemberRole",
    "MemberStatus",
    "Merchandise",
    "MerchandiseCategory",
    "MerchandiseStatus",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "PracticeSchedule",
    "Resource",
    "ResourceContent",
    "ResourceRequest",
    "ResourceRequestStatus",
    "ResourceStatus",
    "ResourceType",
    "UploadedFile",
    "Visibility",
]
