# tests/services/test_notifications.py
"""Tests for best-effort notification fan-out and the inbox."""

from __future__ import annotations

from unittest.mock import patch

from sqlalchemy import event, select
from sqlalchemy.exc import IntegrityError, OperationalError

from pressroom.models import Follow, Notification, NotificationType
from pressroom.services import NotificationFanout
from pressroom.services.notifications import (
    Commented,
    Followed,
    Liked,
    NewPostFromFollowed,
    PostRejected,
)


def _inbox(db_session, user) -> list[Notification]:
    return list(
        db_session.scalars(
            select(Notification)
            .where(Notification.recipient_id == user.id)
            .order_by(Notification.id)
        )
    )


def test_self_actions_are_suppressed(db_session, author, make_post) -> None:
    post = make_post(author)
    fanout = NotificationFanout(db_session)

    assert fanout.emit(Liked(actor_id=author.id, post_id=post.id, post_author_id=author.id)) == 0
    assert fanout.emit(Commented(actor_id=author.id, post_id=post.id, post_author_id=author.id)) == 0
    assert fanout.emit(Followed(actor_id=author.id, followed_id=author.id)) == 0
    assert _inbox(db_session, author) == []


def test_like_notifies_post_author(db_session, author, reader, make_post) -> None:
    post = make_post(author)

    written = NotificationFanout(db_session).emit(
        Liked(actor_id=reader.id, post_id=post.id, post_author_id=author.id)
    )

    assert written == 1
    (note,) = _inbox(db_session, author)
    assert note.type is NotificationType.LIKE
    assert note.sender_id == reader.id
    assert note.sender_name == "bob"
    assert note.post_id == post.id
    assert note.is_read is False


def test_sender_name_is_a_snapshot(db_session, author, reader) -> None:
    NotificationFanout(db_session).emit(Followed(actor_id=reader.id, followed_id=author.id))
    reader.username = "robert"
    db_session.commit()

    (note,) = _inbox(db_session, author)
    db_session.refresh(note)
    assert note.sender_name == "bob"


def test_new_post_reaches_every_follower(db_session, author, reader, moderator, make_post) -> None:
    db_session.add_all(
        [
            Follow(follower_id=reader.id, following_id=author.id),
            Follow(follower_id=moderator.id, following_id=author.id),
        ]
    )
    db_session.commit()
    post = make_post(author, title="Launch day")

    written = NotificationFanout(db_session).emit(
        NewPostFromFollowed(author_id=author.id, post_id=post.id, title=post.title)
    )

    assert written == 2
    for follower in (reader, moderator):
        (note,) = _inbox(db_session, follower)
        assert note.type is NotificationType.NEW_POST
        assert "Launch day" in note.message


def test_rejection_message_carries_reason(db_session, author, moderator, make_post) -> None:
    post = make_post(author)

    NotificationFanout(db_session).emit(
        PostRejected(
            moderator_id=moderator.id,
            post_id=post.id,
            author_id=author.id,
            title=post.title,
            reason="Needs sources",
        )
    )

    (note,) = _inbox(db_session, author)
    assert note.type is NotificationType.POST_REJECTED
    assert "Needs sources" in note.message


def test_emit_swallows_store_failures(db_session, author, reader) -> None:
    """A broken store costs the notification, never the caller."""
    fanout = NotificationFanout(db_session)

    with patch.object(
        fanout.users,
        "follower_ids",
        side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
    ):
        written = fanout.emit(NewPostFromFollowed(author_id=author.id, post_id=1, title="x"))

    assert written == 0


def test_unknown_sender_is_skipped(db_session, author) -> None:
    written = NotificationFanout(db_session).emit(Followed(actor_id=987654, followed_id=author.id))

    assert written == 0
    assert _inbox(db_session, author) == []


def test_inbox_lists_newest_first_and_marks_read(db_session, author, reader, moderator) -> None:
    fanout = NotificationFanout(db_session)
    fanout.emit(Followed(actor_id=reader.id, followed_id=author.id))
    fanout.emit(Followed(actor_id=moderator.id, followed_id=author.id))
    fanout.emit(Followed(actor_id=author.id, followed_id=reader.id))

    inbox = fanout.list_for(author.id)
    assert [note.sender_id for note in inbox] == [moderator.id, reader.id]

    foreign = fanout.list_for(reader.id)[0].id
    assert fanout.mark_read(author.id, [inbox[0].id, foreign]) == 1
    assert fanout.mark_read(author.id, [inbox[0].id]) == 0

    unread = fanout.list_for(author.id, unread_only=True)
    assert [note.id for note in unread] == [inbox[1].id]


def test_one_failed_delivery_does_not_cost_the_others(
    db_session, author, reader, moderator, make_user, make_post
) -> None:
    third = make_user("dave")
    db_session.add_all(
        [Follow(follower_id=user.id, following_id=author.id) for user in (reader, moderator, third)]
    )
    db_session.commit()
    post = make_post(author, title="Partial")
    blocked = moderator.id

    def _reject_one_recipient(_mapper, _connection, target) -> None:  # type: ignore[no-untyped-def]
        if target.recipient_id == blocked:
            raise IntegrityError("INSERT INTO notification", {}, Exception("constraint failed"))

    event.listen(Notification, "before_insert", _reject_one_recipient)
    try:
        written = NotificationFanout(db_session).emit(
            NewPostFromFollowed(author_id=author.id, post_id=post.id, title=post.title)
        )
    finally:
        event.remove(Notification, "before_insert", _reject_one_recipient)

    assert written == 2
    assert len(_inbox(db_session, reader)) == 1
    assert len(_inbox(db_session, third)) == 1
    assert _inbox(db_session, moderator) == []
