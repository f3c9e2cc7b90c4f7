"""Notification fan-out and the recipient inbox.

Every state transition that someone else should hear about is described by
an event. :meth:`NotificationFanout.emit` turns an event into inbox rows
after the triggering change has been committed. Delivery is best-effort:
each row is written in its own savepoint, a failing row is logged and
skipped, and ``emit`` never raises.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pressroom.models import Notification, NotificationType
from pressroom.services.users import UserDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Liked:
    actor_id: int
    post_id: int
    post_author_id: int


@dataclass(frozen=True)
class Commented:
    actor_id: int
    post_id: int
    post_author_id: int


@dataclass(frozen=True)
class Followed:
    actor_id: int
    followed_id: int


@dataclass(frozen=True)
class PostPublished:
    moderator_id: int
    post_id: int
    author_id: int
    title: str


@dataclass(frozen=True)
class PostRejected:
    moderator_id: int
    post_id: int
    author_id: int
    title: str
    reason: str


@dataclass(frozen=True)
class NewPostFromFollowed:
    author_id: int
    post_id: int
    title: str


Event = Union[Liked, Commented, Followed, PostPublished, PostRejected, NewPostFromFollowed]


@dataclass(frozen=True)
class _Delivery:
    type: NotificationType
    sender_id: int
    recipient_id: int
    post_id: int | None
    message: str


class NotificationFanout:
    """Writes inbox rows for events; failures never reach the caller."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserDirectory(session)

    def emit(self, event: Event) -> int:
        """Deliver ``event`` and return the number of rows written."""
        try:
            deliveries = self._plan(event)
            if not deliveries:
                return 0
            written = 0
            sender_names: dict[int, str] = {}
            for delivery in deliveries:
                if self._write(delivery, sender_names):
                    written += 1
            self.session.commit()
        except Exception:
            logger.exception("Notification fan-out failed for %r", event)
            self.session.rollback()
            return 0
        logger.debug("Delivered %d notification(s) for %s", written, type(event).__name__)
        return written

    def _plan(self, event: Event) -> list[_Delivery]:
        match event:
            case Liked(actor_id=actor, post_id=post_id, post_author_id=owner):
                if actor == owner:
                    return []
                return [_Delivery(NotificationType.LIKE, actor, owner, post_id, "liked your post")]
            case Commented(actor_id=actor, post_id=post_id, post_author_id=owner):
                if actor == owner:
                    return []
                return [
                    _Delivery(NotificationType.COMMENT, actor, owner, post_id, "commented on your post")
                ]
            case Followed(actor_id=actor, followed_id=followed):
                if actor == followed:
                    return []
                return [
                    _Delivery(NotificationType.FOLLOW, actor, followed, None, "started following you")
                ]
            case PostPublished(moderator_id=moderator, post_id=post_id, author_id=author, title=title):
                return [
                    _Delivery(
                        NotificationType.POST_PUBLISHED,
                        moderator,
                        author,
                        post_id,
                        f'Your post "{title}" has been approved and published',
                    )
                ]
            case PostRejected(
                moderator_id=moderator, post_id=post_id, author_id=author, title=title, reason=reason
            ):
                return [
                    _Delivery(
                        NotificationType.POST_REJECTED,
                        moderator,
                        author,
                        post_id,
                        f'Your post "{title}" was rejected: {reason}',
                    )
                ]
            case NewPostFromFollowed(author_id=author, post_id=post_id, title=title):
                return [
                    _Delivery(
                        NotificationType.NEW_POST,
                        author,
                        follower_id,
                        post_id,
                        f'published a new post: "{title}"',
                    )
                    for follower_id in self.users.follower_ids(author)
                ]
        raise TypeError(f"Unsupported event: {event!r}")

    def _write(self, delivery: _Delivery, sender_names: dict[int, str]) -> bool:
        try:
            with self.session.begin_nested():
                sender_name = sender_names.get(delivery.sender_id)
                if sender_name is None:
                    sender = self.users.find(delivery.sender_id)
                    if sender is None:
                        logger.warning("Skipping notification from unknown user %s", delivery.sender_id)
                        return False
                    sender_name = sender_names[delivery.sender_id] = sender.display_name
                self.session.add(
                    Notification(
                        type=delivery.type,
                        sender_id=delivery.sender_id,
                        sender_name=sender_name,
                        recipient_id=delivery.recipient_id,
                        post_id=delivery.post_id,
                        message=delivery.message,
                        is_read=False,
                    )
                )
        except SQLAlchemyError:
            logger.warning(
                "Dropping %s notification for recipient %s",
                delivery.type.value,
                delivery.recipient_id,
                exc_info=True,
            )
            return False
        return True

    def list_for(self, recipient_id: int, *, unread_only: bool = False) -> list[Notification]:
        """Return the recipient's notifications, newest first."""
        stmt = select(Notification).where(Notification.recipient_id == recipient_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        return list(self.session.scalars(stmt))

    def mark_read(self, recipient_id: int, notification_ids: list[int]) -> int:
        """Flag the recipient's own unread notifications as read; return the count."""
        if not notification_ids:
            return 0
        result = self.session.execute(
            update(Notification)
            .where(
                Notification.id.in_(notification_ids),
                Notification.recipient_id == recipient_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount or 0
