"""Dict renderings of domain objects for JSON responses (camelCase keys)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional

from ...domain.models import (
    Attendance,
    Donation,
    Event,
    Favorite,
    Member,
    Merchandise,
    Order,
    PracticeSchedule,
    Resource,
    ResourceContent,
    ResourceRequest,
    UploadedFile,
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.replace(microsecond=0).isoformat()


def _day(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def envelope(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def serialize_member(member: Member) -> Dict[str, Any]:
    return {
        "id": member.id,
        "firstName": member.first_name,
        "lastName": member.last_name,
        "fullName": member.full_name,
        "studentId": member.student_id,
        "email": member.email,
        "role": member.role.value,
        "status": member.status.value,
        "emailVerified": member.email_verified,
        "phoneNumber": member.phone_number,
        "bio": member.bio,
        "avatar": member.avatar,
        "memberSince": _iso(member.member_since),
        "lastLoginAt": _iso(member.last_login_at),
        "createdAt": _iso(member.created_at),
        "updatedAt": _iso(member.updated_at),
    }


def serialize_member_summary(member: Optional[Member]) -> Optional[Dict[str, Any]]:
    if member is None:
        return None
    return {
        "id": member.id,
        "firstName": member.first_name,
        "lastName": member.last_name,
        "studentId": member.student_id,
        "email": member.email,
    }


def serialize_merchandise(item: Merchandise) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price": item.price,
        "image": item.image,
        "sizes": list(item.sizes),
        "stock": item.stock,
        "category": item.category,
        "status": item.status,
        "createdBy": item.created_by,
        "createdAt": _iso(item.created_at),
        "updatedAt": _iso(item.updated_at),
    }


def serialize_order(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "memberId": order.member_id,
        "items": [
            {
                "merchandiseId": item.merchandise_id,
                "name": item.name,
                "size": item.size,
                "quantity": item.quantity,
                "price": item.price,
                "category": item.category,
            }
            for item in order.items
        ],
        "totalAmount": order.total_amount,
        "receiptUrl": order.receipt_url,
        "status": order.status,
        "verifiedBy": order.reviewed_by,
        "verifiedAt": _iso(order.reviewed_at),
        "declineReason": order.reason,
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
    }


def _serialize_content(content: ResourceContent) -> Dict[str, Any]:
    if isinstance(content, UploadedFile):
        return {
            "fileUrl": content.url,
            "fileType": content.file_type,
            "fileSize": content.file_size,
            "isLink": False,
        }
    return {"fileUrl": content.url, "fileType": content.file_type, "fileSize": None, "isLink": True}


def serialize_resource_request(request: ResourceRequest) -> Dict[str, Any]:
    return {
        "id": request.id,
        "songTitle": request.song_title,
        "description": request.description,
        "resourceType": request.resource_type.value,
        **_serialize_content(request.content),
        "visibility": request.visibility.value,
        "requestedBy": request.requested_by,
        "status": request.status,
        "reviewedBy": request.reviewed_by,
        "reviewedAt": _iso(request.reviewed_at),
        "rejectionReason": request.reason,
        "createdAt": _iso(request.created_at),
        "updatedAt": _iso(request.updated_at),
    }


def serialize_resource(resource: Resource) -> Dict[str, Any]:
    return {
        "id": resource.id,
        "songTitle": resource.song_title,
        "description": resource.description,
        "resourceType": resource.resource_type.value,
        **_serialize_content(resource.content),
        "visibility": resource.visibility.value,
        "uploadedBy": resource.uploaded_by,
        "status": resource.status,
        "createdAt": _iso(resource.created_at),
        "updatedAt": _iso(resource.updated_at),
    }


def serialize_favorite(favorite: Favorite, resource: Optional[Resource] = None) -> Dict[str, Any]:
    body = {
        "id": favorite.id,
        "memberId": favorite.member_id,
        "resourceId": favorite.resource_id,
        "createdAt": _iso(favorite.created_at),
    }
    if resource is not None:
        body["resource"] = serialize_resource(resource)
    return body


def serialize_event(event: Event) -> Dict[str, Any]:
    active = [reg for reg in event.registrations if reg.status != "cancelled"]
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "date": _day(event.date),
        "time": event.time,
        "location": event.location,
        "eventType": event.event_type,
        "image": event.image,
        "capacity": event.capacity,
        "status": event.status,
        "createdBy": event.created_by,
        "registeredCount": len(active),
        "registeredMembers": [
            {"memberId": reg.member_id, "registeredAt": _iso(reg.registered_at), "status": reg.status}
            for reg in event.registrations
        ],
        "createdAt": _iso(event.created_at),
        "updatedAt": _iso(event.updated_at),
    }


def serialize_schedule(schedule: PracticeSchedule) -> Dict[str, Any]:
    return {
        "id": schedule.id,
        "title": schedule.title,
        "description": schedule.description,
        "date": _day(schedule.date),
        "timePeriod": {"startTime": schedule.start_time, "endTime": schedule.end_time},
        "location": {"lectureHallId": schedule.lecture_hall_id},
        "status": schedule.status,
        "notes": schedule.notes,
        "createdBy": schedule.created_by,
        "createdAt": _iso(schedule.created_at),
        "updatedAt": _iso(schedule.updated_at),
    }


def serialize_attendance(record: Attendance) -> Dict[str, Any]:
    return {
        "id": record.id,
        "memberId": record.member_id,
        "eventId": record.event_id,
        "scheduleId": record.schedule_id,
        "status": record.status,
        "markedBy": record.marked_by,
        "markedAt": _iso(record.marked_at),
        "comments": record.comments,
        "createdAt": _iso(record.created_at),
        "updatedAt": _iso(record.updated_at),
    }


def serialize_donation(donation: Donation) -> Dict[str, Any]:
    return {
        "id": donation.id,
        "donorName": donation.donor_name,
        "donorEmail": donation.donor_email,
        "amount": donation.amount,
        "currency": donation.currency,
        "tier": donation.tier,
        "paymentMethod": donation.payment_method,
        "transactionId": donation.transaction_id,
        "status": donation.status,
        "message": donation.message,
        "isAnonymous": donation.is_anonymous,
        "memberId": donation.member_id,
        "createdAt": _iso(donation.created_at),
        "updatedAt": _iso(donation.updated_at),
    }
