# src/pressroom/api/v1/endpoints/notifications.py
"""Notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from pressroom.models import Notification
from pressroom.schemas.notification import (
    MarkReadRequest,
    MarkReadResponse,
    NotificationResponse,
)

from ..dependencies import CurrentIdentityDep, FanoutDep

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=list[NotificationResponse])
async def list_notifications(
    identity: CurrentIdentityDep,
    fanout: FanoutDep,
    unread_only: bool = False,
) -> list[Notification]:
    """Return the caller's notifications, newest first."""
    return fanout.list_for(identity.user_id, unread_only=unread_only)


@router.post("/read", response_model=MarkReadResponse)
async def mark_read(
    payload: MarkReadRequest,
    identity: CurrentIdentityDep,
    fanout: FanoutDep,
) -> MarkReadResponse:
    """Mark the caller's notifications as read."""
    updated = fanout.mark_read(identity.user_id, payload.notification_ids)
    return MarkReadResponse(updated=updated)
