"""Who may see a post."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import ColumnElement, and_

from pressroom.db.time import as_utc
from pressroom.models import Post, PostStatus
from pressroom.services.membership import MembershipAuthority, can_moderate


def public_clause(now: datetime) -> ColumnElement[bool]:
    """SQL predicate for posts every caller may see."""
    return and_(
        Post.status == PostStatus.PUBLISHED,
        Post.publish_at.is_not(None),
        Post.publish_at <= now,
    )


def is_public(post: Post, now: datetime) -> bool:
    """Return True when the post is published and its publish time has passed."""
    return (
        post.status is PostStatus.PUBLISHED
        and post.publish_at is not None
        and as_utc(post.publish_at) <= now
    )


def can_view(
    post: Post,
    viewer_id: int | None,
    now: datetime,
    membership: MembershipAuthority,
) -> bool:
    """Apply the visibility rules to one post.

    Drafts are private to their author. Pending, rejected and scheduled
    community posts are also open to that community's moderators.
    """
    if is_public(post, now):
        return True
    if viewer_id is None:
        return False
    if post.author_id == viewer_id:
        return True
    if post.status is PostStatus.DRAFT or post.community_id is None:
        return False
    return can_moderate(membership.role_of(post.community_id, viewer_id))
