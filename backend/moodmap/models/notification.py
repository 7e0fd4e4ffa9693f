"""
Push Notification Schemas
=========================
Simulated push notifications. Records are write-only: read is
initialised to False and nothing flips it, so the unread count in a
listing always equals the number of notifications.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from moodmap.models.common import CamelModel, Envelope

DEFAULT_NOTIFICATION_TITLE = "MoodMap"
DEFAULT_NOTIFICATION_TYPE = "info"


class PushNotificationCreate(CamelModel):
    user_id: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = None


class PushNotification(CamelModel):
    id: str
    user_id: str
    title: str = DEFAULT_NOTIFICATION_TITLE
    message: str
    type: str = DEFAULT_NOTIFICATION_TYPE
    timestamp: datetime
    read: bool = False


class PushNotificationSent(Envelope):
    notification: PushNotification


class PushNotificationList(Envelope):
    notifications: list[PushNotification]
    unread: int
