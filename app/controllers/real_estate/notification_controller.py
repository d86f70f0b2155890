"""
Notification Controller - in-app notification inbox
The caller identifies the user with the X-User-Id header.
"""
from fastapi import APIRouter, HTTPException, Header, status
from typing import List
from app.schemas.notification import NotificationResponse, UnreadCountResponse, MarkAllReadResponse
from app.services.notification_service import (
    get_user_notifications,
    get_unread_count,
    mark_as_read,
    mark_all_as_read,
)

router = APIRouter(prefix="/real-estate/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0,
    x_user_id: str = Header(...),
):
    notifications = await get_user_notifications(x_user_id, unread_only=unread_only, limit=limit, offset=offset)
    return [NotificationResponse(**n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_notifications_unread_count(x_user_id: str = Header(...)):
    return UnreadCountResponse(count=await get_unread_count(x_user_id))


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(x_user_id: str = Header(...)):
    return MarkAllReadResponse(updated=await mark_all_as_read(x_user_id))


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(notification_id: str, x_user_id: str = Header(...)):
    notification = await mark_as_read(notification_id, x_user_id)

    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    return NotificationResponse(**notification)
