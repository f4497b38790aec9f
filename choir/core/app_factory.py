from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
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
from ..domain.errors import ChoirError
from ..domain.ports.collaborators import BlobStore, Mailer
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..infrastructure.repositories.attendance_repository import AttendanceRepository
from ..infrastructure.repositories.donation_repository import DonationRepository
from ..infrastructure.repositories.event_repository import EventRepository, ScheduleRepository
from ..infrastructure.repositories.member_repository import MemberRepository
from ..infrastructure.repositories.merchandise_repository import MerchandiseRepository
from ..infrastructure.repositories.order_repository import OrderRepository
from ..infrastructure.repositories.resource_repository import (
    FavoriteRepository,
    ResourceRepository,
    ResourceRequestRepository,
)
from ..infrastructure.storage.blob_store import LocalBlobStore, S3BlobStore
from ..presentation.api.routers import attendance as attendance_router
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import donations as donations_router
from ..presentation.api.routers import events as events_router
from ..presentation.api.routers import favorites as favorites_router
from ..presentation.api.routers import members as members_router
from ..presentation.api.routers import merchandise as merchandise_router
from ..presentation.api.routers import orders as orders_router
from ..presentation.api.routers import resource_requests as resource_requests_router
from ..presentation.api.routers import resources as resources_router
from ..presentation.api.routers import schedules as schedules_router
from ..services.email_service import EmailService
from ..services.otp_service import OtpService
from ..services.password_service import PasswordHasher
from ..services.token_service import TokenService

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    *,
    mailer: Optional[Mailer] = None,
    blob_store: Optional[BlobStore] = None,
) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="University Choir API", lifespan=_create_lifespan(settings, mailer, blob_store))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(members_router.router)
    app.include_router(merchandise_router.router)
    app.include_router(orders_router.router)
    app.include_router(resource_requests_router.router)
    app.include_router(resources_router.router)
    app.include_router(favorites_router.router)
    app.include_router(events_router.router)
    app.include_router(schedules_router.router)
    app.include_router(attendance_router.router)
    app.include_router(donations_router.router)

    if blob_store is None and settings.blob_storage == "local":
        settings.upload_dir.mkdir(parents=True, exist_ok=True)
        app.mount(settings.uploads_base_url, StaticFiles(directory=settings.upload_dir), name="uploads")

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True, "message": "Choir API is running"}

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChoirError)
    async def handle_choir_error(request: Request, exc: ChoirError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "; ".join(messages) or "Invalid request."},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc) or "Internal server error."},
        )


def _build_blob_store(settings: Settings) -> BlobStore:
    if settings.blob_storage == "s3":
        return S3BlobStore(
            bucket_name=settings.s3_bucket_name,
            region=settings.s3_region,
            aws_access_key=settings.s3_access_key,
            aws_secret_key=settings.s3_secret_key,
            public_base_url=settings.s3_public_base_url,
        )
    return LocalBlobStore(settings.upload_dir, public_base_url=settings.uploads_base_url)


def _create_lifespan(settings: Settings, mailer: Optional[Mailer], blob_store: Optional[BlobStore]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        database = SQLiteDatabase(settings.database_path)

        members = MemberRepository(database)
        merchandise = MerchandiseRepository(database)
        orders = OrderRepository(database)
        resource_requests = ResourceRequestRepository(database)
        resources = ResourceRepository(database)
        favorites = FavoriteRepository(database)
        events = EventRepository(database)
        schedules = ScheduleRepository(database)
        attendance = AttendanceRepository(database)
        donations = DonationRepository(database)

        active_mailer = mailer or EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            code_ttl_minutes=settings.otp_ttl_minutes,
        )
        active_blob_store = blob_store or _build_blob_store(settings)

        hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
        token_service = TokenService(settings.jwt_secret, expire_minutes=settings.jwt_expire_minutes)
        otp_service = OtpService(members, hasher, ttl_minutes=settings.otp_ttl_minutes)
        auth_service = MemberAuthService(
            members,
            otp_service,
            token_service,
            hasher,
            active_mailer,
            email_domain=settings.student_email_domain,
        )
        auth_service.ensure_default_admin(settings.admin_student_id, settings.admin_password)

        container = ApplicationContainer(
            settings=settings,
            database=database,
            mailer=active_mailer,
            blob_store=active_blob_store,
            token_service=token_service,
            auth_service=auth_service,
            member_service=MemberService(members),
            merchandise_service=MerchandiseService(merchandise),
            order_service=OrderService(orders, merchandise, active_blob_store),
            resource_request_service=ResourceRequestService(resource_requests, resources, active_blob_store),
            resource_service=ResourceService(resources, active_blob_store),
            favorite_service=FavoriteService(favorites, resources),
            event_service=EventService(events),
            schedule_service=ScheduleService(schedules),
            attendance_service=AttendanceService(attendance, members, events, schedules),
            donation_service=DonationService(donations),
        )

        app.state.container = container  # type: ignore[attr-defined]
        logger.info("Choir API started with database %s", settings.database_path)

        try:
            yield
        finally:
            database.close()

    return lifespan
