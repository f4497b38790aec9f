from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.event_service import EventService
from ....core.dependencies import get_event_service
from ....domain.models import Member
from ...api.dependencies import get_current_member, require_reviewer
from ...api.schemas.events import EventPayload
from ...api.serializers import envelope, serialize_event

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventPayload,
    actor: Member = Depends(require_reviewer),
    service: EventService = Depends(get_event_service),
) -> Dict[str, Any]:
    event = service.create_event(
        actor,
        title=payload.title,
        event_date=payload.date,
        event_type=payload.event_type,
        description=payload.description,
        time=payload.time,
        location=payload.location,
        capacity=payload.capacity,
        image=payload.image,
    )
    return envelope(serialize_event(event), message="Event created.")


@router.get("")
def list_events(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    event_type: Optional[str] = Query(default=None, alias="eventType"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    service: EventService = Depends(get_event_service),
) -> Dict[str, Any]:
    events = service.list_events(
        status=status_filter, event_type=event_type, start_date=start_date, end_date=end_date
    )
    return envelope([serialize_event(event) for event in events], count=len(events))


@router.get("/{event_id}")
def get_event(event_id: int, service: EventService = Depends(get_event_service)) -> Dict[str, Any]:
    return envelope(serialize_event(service.get_event(event_id)))


@router.put("/{event_id}")
def update_event(
    event_id: int,
    payload: EventPayload,
    _: Member = Depends(require_reviewer),
    service: EventService = Depends(get_event_service),
) -> Dict[str, Any]:
    event = service.update_event(event_id, payload.model_dump(exclude_unset=True))
    return envelope(serialize_event(event), message="Event updated.")


@router.delete("/{event_id}")
def delete_event(
    event_id: int,
    _: Member = Depends(require_reviewer),
    service: EventService = Depends(get_event_service),
) -> Dict[str, Any]:
    service.delete_event(event_id)
    return envelope(message="Event deleted.")


@router.post("/{event_id}/register")
def register_for_event(
    event_id: int,
    member: Member = Depends(get_current_member),
    service: EventService = Depends(get_event_service),
) -> Dict[str, Any]:
    event = service.register(event_id, member)
    return envelope(serialize_event(event), message="Registered for event.")


@router.delete("/{event_id}/register")
def unregister_from_event(
    event_id: int,
    member: Member = Depends(get_current_member),
    service: EventService = Depends(get_event_service),
) -> Dict[str, Any]:
    event = service.unregister(event_id, member)
    return envelope(serialize_event(event), message="Unregistered from event.")
