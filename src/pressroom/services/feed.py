"""Read-side assembly of post lists and author profiles.

The assembler never mutates. It filters by visibility first, narrows by the
caller's filter, orders, pages, and then decorates each post with counts and,
for an identified viewer, whether that viewer liked or saved it.
"""
from __future__ import annotations

import enum
import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from pressroom.core.errors import Forbidden, Unauthenticated
from pressroom.core.settings import settings
from pressroom.db.time import utcnow
from pressroom.models import Comment, Follow, Like, Post, PostTag, PublicationMode, SavedPost, Tag
from pressroom.schemas.post import AuthorSummary, PostSummary
from pressroom.schemas.user import UserProfile
from pressroom.services.membership import MembershipAuthority
from pressroom.services.tags import TagRepository
from pressroom.services.users import UserDirectory
from pressroom.services.visibility import public_clause

logger = logging.getLogger(__name__)


class SortMode(enum.Enum):
    """Feed orderings."""

    NEWEST = "newest"
    POPULAR = "popular"
    SHUFFLE = "shuffle"


@dataclass
class FeedFilter:
    """Narrowing options for the public feed."""

    tag: str | None = None
    q: str | None = None
    community_id: int | None = None
    subscriptions_only: bool = False
    sort: SortMode | None = None
    limit: int | None = None
    offset: int = 0


class FeedAssembler:
    """Builds feeds and post summaries for a request."""

    def __init__(
        self,
        session: Session,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = session
        self.rng = rng or random.Random()
        self.clock = clock
        self.users = UserDirectory(session)
        self.tags = TagRepository(session)

    def list(self, feed_filter: FeedFilter, viewer_id: int | None = None) -> list[PostSummary]:
        """Return visible posts matching ``feed_filter``.

        Raises:
            Unauthenticated: When a subscriptions feed is requested anonymously.
        """
        if feed_filter.subscriptions_only and viewer_id is None:
            raise Unauthenticated("Sign in to see posts from people you follow")

        stmt = select(Post).where(public_clause(self.clock()))
        if feed_filter.tag:
            tag_name = feed_filter.tag.strip().lower()
            stmt = stmt.where(
                Post.id.in_(
                    select(PostTag.post_id)
                    .join(Tag, Tag.id == PostTag.tag_id)
                    .where(Tag.name == tag_name)
                )
            )
        if feed_filter.q and feed_filter.q.strip():
            needle = feed_filter.q.strip().lower()
            stmt = stmt.where(
                or_(
                    func.lower(Post.title).contains(needle, autoescape=True),
                    func.lower(Post.body).contains(needle, autoescape=True),
                )
            )
        if feed_filter.community_id is not None:
            stmt = stmt.where(Post.community_id == feed_filter.community_id)
        if feed_filter.subscriptions_only:
            stmt = stmt.where(
                Post.author_id.in_(
                    select(Follow.following_id).where(Follow.follower_id == viewer_id)
                )
            )

        posts = self._page(
            stmt,
            feed_filter.sort or SortMode.SHUFFLE,
            feed_filter.limit,
            feed_filter.offset,
        )
        logger.debug("Feed %s returned %d post(s)", feed_filter, len(posts))
        return self.summarize(posts, viewer_id)

    def search(
        self,
        q: str | None,
        tag: str | None = None,
        viewer_id: int | None = None,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PostSummary]:
        """Search visible posts by text and tag, newest first."""
        return self.list(
            FeedFilter(tag=tag, q=q, sort=SortMode.NEWEST, limit=limit, offset=offset),
            viewer_id,
        )

    def community(
        self,
        community_id: int,
        viewer_id: int | None = None,
        *,
        sort: SortMode | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PostSummary]:
        """Return visible posts of one community."""
        MembershipAuthority(self.session).get_community(community_id)
        return self.list(
            FeedFilter(
                community_id=community_id,
                sort=sort or SortMode.NEWEST,
                limit=limit,
                offset=offset,
            ),
            viewer_id,
        )

    def profile(
        self,
        author_id: int,
        viewer_id: int | None = None,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PostSummary]:
        """Return posts published on the author's profile.

        The owner sees every status, drafts included; other callers see only
        publicly visible posts.
        """
        self.users.require(author_id)
        stmt = select(Post).where(
            Post.author_id == author_id,
            Post.publication_mode == PublicationMode.USER,
        )
        if viewer_id != author_id:
            stmt = stmt.where(public_clause(self.clock()))
        posts = self._page(stmt, SortMode.NEWEST, limit, offset)
        return self.summarize(posts, viewer_id)

    def liked(
        self,
        user_id: int,
        viewer_id: int | None = None,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PostSummary]:
        """Return visible posts the user liked, most recent like first."""
        self.users.require(user_id)
        stmt = (
            select(Post)
            .join(Like, Like.post_id == Post.id)
            .where(Like.user_id == user_id, self._visible_to(viewer_id))
            .order_by(Like.created_at.desc(), Post.id.desc())
        )
        return self.summarize(self._slice(stmt, limit, offset), viewer_id)

    def saved(
        self,
        user_id: int,
        viewer_id: int | None,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PostSummary]:
        """Return the user's bookmarks; only the owner may list them.

        Raises:
            Unauthenticated: For anonymous callers.
            Forbidden: When the viewer is someone else.
        """
        if viewer_id is None:
            raise Unauthenticated("Sign in to see saved posts")
        self.users.require(user_id)
        if viewer_id != user_id:
            raise Forbidden("Saved posts are private")
        stmt = (
            select(Post)
            .join(SavedPost, SavedPost.post_id == Post.id)
            .where(SavedPost.user_id == user_id, self._visible_to(viewer_id))
            .order_by(SavedPost.created_at.desc(), Post.id.desc())
        )
        return self.summarize(self._slice(stmt, limit, offset), viewer_id)

    def author_profile(self, user_id: int, viewer_id: int | None = None) -> UserProfile:
        """Return a user's public profile with follow and post counts."""
        user = self.users.require(user_id)
        post_count = self.session.scalar(
            select(func.count())
            .select_from(Post)
            .where(
                Post.author_id == user_id,
                Post.publication_mode == PublicationMode.USER,
                public_clause(self.clock()),
            )
        ) or 0
        viewer_fields: dict[str, bool] = {}
        if viewer_id is not None:
            viewer_fields["is_followed"] = self.users.is_following(viewer_id, user_id)
        return UserProfile(
            id=user.id,
            username=user.username,
            name=user.name,
            created_at=user.created_at,
            follower_count=self.users.follower_count(user_id),
            following_count=self.users.following_count(user_id),
            post_count=post_count,
            **viewer_fields,
        )

    def _visible_to(self, viewer_id: int | None):  # type: ignore[no-untyped-def]
        clause = public_clause(self.clock())
        if viewer_id is None:
            return clause
        return or_(clause, Post.author_id == viewer_id)

    def _slice(self, stmt: Select[tuple[Post]], limit: int | None, offset: int) -> list[Post]:
        limit = min(limit or settings.feed_default_limit, settings.feed_max_limit)
        return list(self.session.scalars(stmt.limit(limit).offset(max(offset, 0))))

    def _page(
        self,
        stmt: Select[tuple[Post]],
        sort: SortMode,
        limit: int | None,
        offset: int,
    ) -> list[Post]:
        limit = min(limit or settings.feed_default_limit, settings.feed_max_limit)
        offset = max(offset, 0)
        match sort:
            case SortMode.NEWEST:
                stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc())
            case SortMode.POPULAR:
                like_counts = (
                    select(Like.post_id, func.count().label("like_count"))
                    .group_by(Like.post_id)
                    .subquery()
                )
                stmt = stmt.outerjoin(like_counts, like_counts.c.post_id == Post.id).order_by(
                    func.coalesce(like_counts.c.like_count, 0).desc(),
                    Post.created_at.desc(),
                    Post.id.desc(),
                )
            case SortMode.SHUFFLE:
                posts = list(self.session.scalars(stmt.order_by(Post.id)))
                self.rng.shuffle(posts)
                return posts[offset : offset + limit]
        return list(self.session.scalars(stmt.limit(limit).offset(offset)))

    def summarize(self, posts: Sequence[Post], viewer_id: int | None = None) -> list[PostSummary]:
        """Decorate posts with author, tags and counts in a fixed number of queries."""
        if not posts:
            return []
        post_ids = [post.id for post in posts]
        authors = self.users.get_many({post.author_id for post in posts})
        tag_names = self.tags.names_for(post_ids)
        like_counts = self._counts(Like.post_id, post_ids)
        comment_counts = self._counts(Comment.post_id, post_ids)

        viewer_fields: dict[int, dict[str, bool]] = {}
        if viewer_id is not None:
            liked = set(
                self.session.scalars(
                    select(Like.post_id).where(Like.user_id == viewer_id, Like.post_id.in_(post_ids))
                )
            )
            saved = set(
                self.session.scalars(
                    select(SavedPost.post_id).where(
                        SavedPost.user_id == viewer_id, SavedPost.post_id.in_(post_ids)
                    )
                )
            )
            viewer_fields = {
                post_id: {"is_liked": post_id in liked, "is_saved": post_id in saved}
                for post_id in post_ids
            }

        summaries = []
        for post in posts:
            author = authors[post.author_id]
            summaries.append(
                PostSummary(
                    id=post.id,
                    title=post.title,
                    body=post.body,
                    author=AuthorSummary(id=author.id, username=author.username, name=author.name),
                    community_id=post.community_id,
                    status=post.status,
                    publication_mode=post.publication_mode,
                    publication_type=post.publication_type,
                    tags=tag_names[post.id],
                    like_count=like_counts.get(post.id, 0),
                    comment_count=comment_counts.get(post.id, 0),
                    created_at=post.created_at,
                    publish_at=post.publish_at,
                    **viewer_fields.get(post.id, {}),
                )
            )
        return summaries

    def _counts(self, column, post_ids: list[int]) -> dict[int, int]:  # type: ignore[no-untyped-def]
        rows = self.session.execute(
            select(column, func.count()).where(column.in_(post_ids)).group_by(column)
        )
        return {post_id: count for post_id, count in rows}
