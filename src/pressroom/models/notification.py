# src/pressroom/models/notification.py
"""Model for notifications delivered to a recipient's inbox."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from pressroom.db.session import Base
from pressroom.db.time import utcnow


class NotificationType(enum.Enum):
    """Kinds of events that produce a notification."""

    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    POST_PUBLISHED = "postPublished"
    POST_REJECTED = "postRejected"
    NEW_POST = "new_post"


class Notification(Base):
    """Write-once inbox entry; only ``is_read`` changes after insert."""

    __tablename__ = "notification"
    __table_args__ = (Index("ix_notification_recipient_id", "recipient_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type", native_enum=False, length=32),
        nullable=False,
    )
    sender_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    # Snapshot taken at creation; later renames don't rewrite history.
    sender_name: Mapped[str] = mapped_column(Text, nullable=False)
    recipient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    post_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="SET NULL"),
        nullable=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
