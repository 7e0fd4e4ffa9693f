"""
Push Notification Router
========================
POST /push/send           — Record a simulated push notification.
GET  /push/notifications  — A user's notifications, newest first.

Nothing is delivered to a device; the prototype polls the listing.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from moodmap.models.common import ErrorEnvelope
from moodmap.models.notification import (
    PushNotificationCreate,
    PushNotificationList,
    PushNotificationSent,
)
from moodmap.services.moodmap import MoodMapService, get_moodmap_service

router = APIRouter(prefix="/push", tags=["push"])


@router.post(
    "/send",
    response_model=PushNotificationSent,
    summary="Send a push notification (simulated)",
    responses={400: {"model": ErrorEnvelope, "description": "userId or message missing"}},
)
async def send_push_notification(
    body: PushNotificationCreate,
    service: MoodMapService = Depends(get_moodmap_service),
) -> PushNotificationSent:
    notification = service.send_push_notification(
        user_id=body.user_id,
        message=body.message,
        title=body.title,
        type_=body.type,
    )
    return PushNotificationSent(message="Push notification sent", notification=notification)


@router.get(
    "/notifications",
    response_model=PushNotificationList,
    summary="List a user's push notifications",
    responses={400: {"model": ErrorEnvelope, "description": "userId missing"}},
)
async def list_push_notifications(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    service: MoodMapService = Depends(get_moodmap_service),
) -> PushNotificationList:
    notifications, unread = service.list_push_notifications(user_id)
    return PushNotificationList(notifications=notifications, unread=unread)
