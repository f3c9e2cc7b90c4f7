# src/pressroom/schemas/notification.py
"""Notification-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pressroom.models.notification import NotificationType
from pressroom.schemas.post import UtcDatetime


class NotificationResponse(BaseModel):
    """Inbox entry returned to its recipient."""

    id: int
    type: NotificationType
    sender_id: int
    sender_name: str
    recipient_id: int
    post_id: int | None
    message: str
    is_read: bool
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class MarkReadRequest(BaseModel):
    """Identifiers of notifications to flag as read."""

    notification_ids: list[int] = Field(..., min_length=1)


class MarkReadResponse(BaseModel):
    """Number of notifications that changed state."""

    updated: int
