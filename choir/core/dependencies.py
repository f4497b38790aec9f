from fastapi import Depends, Request

from .container import ApplicationContainer


def get_container(request: Request) -> ApplicationContainer:
    container = getattr(request.app.state, "container", None)
    if not container:
        raise RuntimeError("Application container not initialised.")
    return container


def get_settings(container: ApplicationContainer = Depends(get_container)):
    return container.settings


def get_token_service(container: ApplicationContainer = Depends(get_container)):
    return container.token_service


def get_auth_service(container: ApplicationContainer = Depends(get_container)):
    return container.auth_service


def get_member_service(container: ApplicationContainer = Depends(get_container)):
    return container.member_service


def get_merchandise_service(container: ApplicationContainer = Depends(get_container)):
    return container.merchandise_service


def get_order_service(container: ApplicationContainer = Depends(get_container)):
    return container.order_service


def get_resource_request_service(container: ApplicationContainer = Depends(get_container)):
    return container.resource_request_service


def get_resource_service(container: ApplicationContainer = Depends(get_container)):
    return container.resource_service


def get_favorite_service(container: ApplicationContainer = Depends(get_container)):
    return container.favorite_service


def get_event_service(container: ApplicationContainer = Depends(get_container)):
    return container.event_service


def get_schedule_service(container: ApplicationContainer = Depends(get_container)):
    return container.schedule_service


def get_attendance_service(container: ApplicationContainer = Depends(get_container)):
    return container.attendance_service


def get_donation_service(container: ApplicationContainer = Depends(get_container)):
    return container.donation_service
