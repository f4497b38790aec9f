from dataclasses import dataclass

from ..application.services.attendance_service import AttendanceService
from ..application.services.donation_service import DonationService
from ..application.services.event_service import EventService, ScheduleService
from ..application.services.member_auth_service import MemberAuthService
from ..application.services.member_service import MemberService
from ..application.services.merchandise_service import MerchandiseService
from ..application.services.order_service import OrderService
from ..application.services.resource_service import (
    FavoriteService,
    ResourceRequestService,
    ResourceService,
)
from ..domain.ports.collaborators import BlobStore, Mailer
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..services.token_service import TokenService
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    database: SQLiteDatabase
    mailer: Mailer
    blob_store: BlobStore
    token_service: TokenService
    auth_service: MemberAuthService
    member_service: MemberService
    merchandise_service: MerchandiseService
    order_service: OrderService
    resource_request_service: ResourceRequestService
    resource_service: ResourceService
    favorite_service: FavoriteService
    event_service: EventService
    schedule_service: ScheduleService
    attendance_service: AttendanceService
    donation_service: DonationService
