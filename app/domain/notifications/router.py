"""Notification router - staff in-app inbox"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Notification, User
from ...shared.responses import raise_for_failure
from .schemas import NotificationResponse, UnreadCountResponse
from .service import InboxService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_inbox_service(db: Session = Depends(get_db)) -> InboxService:
    """Dependency injection for InboxService"""
    return InboxService(db)


def _to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        type=n.type,
        title=n.title,
        message=n.message,
        status=n.status,
        appointmentId=n.appointment_id,
        isRead=n.is_read,
        readAt=n.read_at,
        sentAt=n.sent_at,
        createdAt=n.created_at,
    )


@router.get("/me", response_model=list[NotificationResponse])
async def list_my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    service: InboxService = Depends(get_inbox_service),
):
    """Newest first"""
    return [_to_response(n) for n in service.list_notifications(current_user.id, unread_only, limit)]


@router.get("/me/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    service: InboxService = Depends(get_inbox_service),
):
    return UnreadCountResponse(unread=service.unread_count(current_user.id))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: InboxService = Depends(get_inbox_service),
):
    result = service.mark_as_read(notification_id, current_user.id)
    raise_for_failure(result)
    return _to_response(result.data)
