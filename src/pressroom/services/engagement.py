"""Likes, bookmarks, comments and follows."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from pressroom.core.errors import BadRequest, Forbidden, NotFound
from pressroom.db.time import utcnow
from pressroom.models import Comment, Complaint, Follow, Like, Post, SavedPost
from pressroom.services.base import commit_or_raise
from pressroom.services.membership import MembershipAuthority
from pressroom.services.notifications import Commented, Followed, Liked, NotificationFanout
from pressroom.services.users import UserDirectory
from pressroom.services.visibility import can_view

logger = logging.getLogger(__name__)


class EngagementService:
    """Toggles and comments on posts the caller can see."""

    def __init__(
        self,
        session: Session,
        fanout: NotificationFanout | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = session
        self.fanout = fanout or NotificationFanout(session)
        self.clock = clock
        self.membership = MembershipAuthority(session)
        self.users = UserDirectory(session)

    def _visible_post(self, post_id: int, user_id: int) -> Post:
        post = self.session.get(Post, post_id)
        if post is None or not can_view(post, user_id, self.clock(), self.membership):
            raise NotFound("Post not found")
        return post

    def toggle_like(self, post_id: int, user_id: int) -> tuple[bool, int]:
        """Like or unlike a post; returns ``(liked, like_count)``."""
        post = self._visible_post(post_id, user_id)
        existing = self.session.get(Like, (post_id, user_id))
        if existing is not None:
            self.session.delete(existing)
            liked = False
        else:
            self.session.add(Like(post_id=post_id, user_id=user_id))
            liked = True
        commit_or_raise(self.session)

        like_count = self.session.scalar(
            select(func.count()).select_from(Like).where(Like.post_id == post_id)
        ) or 0
        if liked:
            self.fanout.emit(Liked(actor_id=user_id, post_id=post_id, post_author_id=post.author_id))
        return liked, like_count

    def toggle_save(self, post_id: int, user_id: int) -> bool:
        """Bookmark or un-bookmark a post; returns whether it is now saved."""
        self._visible_post(post_id, user_id)
        existing = self.session.get(SavedPost, (post_id, user_id))
        if existing is not None:
            self.session.delete(existing)
            saved = False
        else:
            self.session.add(SavedPost(post_id=post_id, user_id=user_id))
            saved = True
        commit_or_raise(self.session)
        return saved

    def add_comment(self, post_id: int, user_id: int, content: str) -> Comment:
        """Attach a comment to a visible post and notify its author."""
        content = content.strip()
        if not content:
            raise BadRequest("Comment cannot be empty")
        post = self._visible_post(post_id, user_id)
        comment = Comment(post_id=post_id, user_id=user_id, content=content, created_at=self.clock())
        self.session.add(comment)
        commit_or_raise(self.session)
        self.session.refresh(comment)
        self.fanout.emit(Commented(actor_id=user_id, post_id=post_id, post_author_id=post.author_id))
        return comment

    def delete_comment(self, comment_id: int, requester_id: int) -> None:
        """Delete a comment; allowed for its author and the post's author."""
        comment = self.session.get(Comment, comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        post = self.session.get(Post, comment.post_id)
        post_author_id = post.author_id if post is not None else None
        if requester_id not in (comment.user_id, post_author_id):
            raise Forbidden("You cannot delete this comment")
        self.session.execute(delete(Complaint).where(Complaint.comment_id == comment_id))
        self.session.delete(comment)
        commit_or_raise(self.session)
        logger.info("User %s deleted comment %s", requester_id, comment_id)

    def toggle_follow(self, follower_id: int, following_id: int) -> tuple[bool, int]:
        """Follow or unfollow a user; returns ``(followed, follower_count)``."""
        if follower_id == following_id:
            raise BadRequest("You cannot follow yourself")
        self.users.require(following_id)
        existing = self.session.get(Follow, (follower_id, following_id))
        if existing is not None:
            self.session.delete(existing)
            followed = False
        else:
            self.session.add(Follow(follower_id=follower_id, following_id=following_id))
            followed = True
        commit_or_raise(self.session)

        if followed:
            self.fanout.emit(Followed(actor_id=follower_id, followed_id=following_id))
        return followed, self.users.follower_count(following_id)
