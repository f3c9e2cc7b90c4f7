"""Post lifecycle: creation, draft edits, moderation and deletion.

States::

    DRAFT ----------------------------> PUBLISHED   (personal posts)
    PENDING --approve--> PUBLISHED
    PENDING --reject---> REJECTED

PUBLISHED and REJECTED are terminal for moderation. Every check runs before
the first write, and notifications are emitted only after the commit.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from pressroom.core.errors import BadRequest, Conflict, Forbidden, InternalError, NotFound
from pressroom.db.time import utcnow
from pressroom.models import (
    Comment,
    Complaint,
    Like,
    Notification,
    Post,
    PostStatus,
    PostTag,
    PostVersion,
    PublicationMode,
    SavedPost,
)
from pressroom.models.post import DEFAULT_PUBLICATION_TYPE
from pressroom.schemas.moderation import PendingPost
from pressroom.schemas.post import (
    AuthorSummary,
    CommentOut,
    DraftPatch,
    PostContent,
    PostDetail,
    PostVersionOut,
)
from pressroom.services.base import commit_or_raise, is_lock_timeout
from pressroom.services.feed import FeedAssembler
from pressroom.services.membership import MembershipAuthority
from pressroom.services.notifications import (
    NewPostFromFollowed,
    NotificationFanout,
    PostPublished,
    PostRejected,
)
from pressroom.services.tags import TagRepository
from pressroom.services.users import UserDirectory
from pressroom.services.visibility import can_view

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonalTarget:
    """Publish on the author's own profile."""

    status: PostStatus | None = None
    publish_at: datetime | None = None


@dataclass(frozen=True)
class CommunityTarget:
    """Submit to a community's moderation queue."""

    community_id: int


Target = Union[PersonalTarget, CommunityTarget]


@dataclass(frozen=True)
class Approve:
    publication_mode: PublicationMode = PublicationMode.COMMUNITY


@dataclass(frozen=True)
class Reject:
    reason: str


Decision = Union[Approve, Reject]

_EDITABLE_STATUSES = (PostStatus.DRAFT, PostStatus.PUBLISHED)


def normalize_publication_type(value: str | None) -> str:
    """Upper-case a free-form publication type, falling back to ARTICLE."""
    if value is None or not value.strip():
        return DEFAULT_PUBLICATION_TYPE
    return value.strip().upper()


class PostLifecycleService:
    """Owns every state transition of a post."""

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
        self.tags = TagRepository(session)
        self.users = UserDirectory(session)

    def create(self, author_id: int, content: PostContent, target: Target) -> Post:
        """Create a personal post or a community submission."""
        now = self.clock()
        match target:
            case CommunityTarget(community_id=community_id):
                self.membership.get_community(community_id)
                self.membership.require_member(community_id, author_id)
                status = PostStatus.PENDING
                mode = PublicationMode.COMMUNITY
                publish_at = None
            case PersonalTarget(status=requested, publish_at=scheduled):
                status = requested or PostStatus.PUBLISHED
                if status not in _EDITABLE_STATUSES:
                    raise BadRequest("Personal posts can only be created as DRAFT or PUBLISHED")
                community_id = None
                mode = PublicationMode.USER
                publish_at = scheduled
                if publish_at is None and status is PostStatus.PUBLISHED:
                    publish_at = now
            case _:
                raise TypeError(f"Unsupported target: {target!r}")

        post = self._insert(author_id, content, status, mode, community_id, publish_at)
        commit_or_raise(self.session)
        self.session.refresh(post)
        logger.info(
            "User %s created post %s as %s (community=%s)",
            author_id,
            post.id,
            status.value,
            community_id,
        )
        if post.status is PostStatus.PUBLISHED:
            self.fanout.emit(NewPostFromFollowed(author_id=author_id, post_id=post.id, title=post.title))
        return post

    def share(self, author_id: int, content: PostContent, community_ids: list[int]) -> list[Post]:
        """Submit one post to several communities at once.

        Communities the author doesn't belong to are skipped. An empty list
        publishes a personal post instead.
        """
        if not community_ids:
            return [self.create(author_id, content, PersonalTarget())]

        eligible = []
        for community_id in dict.fromkeys(community_ids):
            if self.membership.role_of(community_id, author_id) is None:
                logger.debug("Skipping community %s for user %s: not a member", community_id, author_id)
                continue
            eligible.append(community_id)
        if not eligible:
            raise Forbidden("You are not a member of any of the selected communities")

        posts = [
            self._insert(
                author_id,
                content,
                PostStatus.PENDING,
                PublicationMode.COMMUNITY,
                community_id,
                None,
            )
            for community_id in eligible
        ]
        commit_or_raise(self.session)
        for post in posts:
            self.session.refresh(post)
        logger.info("User %s shared a post to communities %s", author_id, eligible)
        return posts

    def edit_draft(self, post_id: int, editor_id: int, patch: DraftPatch) -> Post:
        """Snapshot a draft and apply ``patch`` to it.

        Raises:
            NotFound: If the post doesn't exist.
            Forbidden: If the editor isn't the author.
            Conflict: If the post is no longer a draft.
            BadRequest: If the patch asks for a status other than DRAFT or PUBLISHED.
        """
        post = self.session.scalar(select(Post).where(Post.id == post_id).with_for_update())
        if post is None:
            raise NotFound("Post not found")
        if post.author_id != editor_id:
            raise Forbidden("Only the author can edit this post")
        if post.status is not PostStatus.DRAFT:
            raise Conflict("Only drafts can be edited")
        changes = patch.model_dump(exclude_unset=True)
        new_status = changes.get("status") or PostStatus.DRAFT
        if new_status not in _EDITABLE_STATUSES:
            raise BadRequest("A draft can only stay a draft or be published")

        self.session.add(
            PostVersion(post_id=post.id, title=post.title, body=post.body, editor_id=editor_id)
        )
        if changes.get("title") is not None:
            post.title = changes["title"]
        if changes.get("body") is not None:
            post.body = changes["body"]
        if "publication_type" in changes:
            post.publication_type = normalize_publication_type(changes["publication_type"])
        if "publish_at" in changes:
            post.publish_at = changes["publish_at"]
        if changes.get("tags") is not None:
            self.tags.attach(post.id, changes["tags"])
        post.status = new_status
        if new_status is PostStatus.PUBLISHED and post.publish_at is None:
            post.publish_at = self.clock()

        commit_or_raise(self.session)
        self.session.refresh(post)
        self.session.expire(post, ["post_tags"])
        logger.info("User %s edited draft %s (status=%s)", editor_id, post.id, new_status.value)
        if new_status is PostStatus.PUBLISHED:
            self.fanout.emit(NewPostFromFollowed(author_id=post.author_id, post_id=post.id, title=post.title))
        return post

    def moderate(self, post_id: int, moderator_id: int, decision: Decision) -> Post:
        """Approve or reject a pending community post.

        The transition is a compare-and-swap on ``status``: when two
        moderators race, the first decision wins and the other gets Conflict.
        The read transaction used for the checks is closed before the swap so
        that the swap starts a fresh write transaction. On SQLite a reader
        that upgrades to a writer cannot wait for the lock and fails at once.
        """
        post = self.session.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found")
        if post.community_id is None:
            raise Forbidden("Personal posts are not moderated")
        self.membership.require_moderator(post.community_id, moderator_id)
        self.session.rollback()

        now = self.clock()
        match decision:
            case Approve(publication_mode=mode):
                values = {
                    "status": PostStatus.PUBLISHED,
                    "publication_mode": mode,
                    "publish_at": func.coalesce(Post.publish_at, now),
                }
            case Reject(reason=reason):
                if not reason or not reason.strip():
                    raise BadRequest("A rejection reason is required")
                values = {"status": PostStatus.REJECTED}
            case _:
                raise TypeError(f"Unsupported decision: {decision!r}")

        try:
            result = self.session.execute(
                update(Post)
                .where(Post.id == post_id, Post.status == PostStatus.PENDING)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        except OperationalError as exc:
            self.session.rollback()
            if is_lock_timeout(exc):
                logger.warning("Moderation of post %s timed out waiting for a lock", post_id)
                raise Conflict("Post is being moderated by someone else") from exc
            logger.exception("Moderation update of post %s failed", post_id)
            raise InternalError("Storage failure") from exc
        if result.rowcount != 1:
            self.session.rollback()
            raise Conflict("Post is no longer pending moderation")
        commit_or_raise(self.session)
        self.session.refresh(post)
        logger.info(
            "Moderator %s set post %s to %s",
            moderator_id,
            post.id,
            post.status.value,
        )

        match decision:
            case Approve():
                self.fanout.emit(
                    PostPublished(
                        moderator_id=moderator_id,
                        post_id=post.id,
                        author_id=post.author_id,
                        title=post.title,
                    )
                )
                self.fanout.emit(
                    NewPostFromFollowed(author_id=post.author_id, post_id=post.id, title=post.title)
                )
            case Reject(reason=reason):
                self.fanout.emit(
                    PostRejected(
                        moderator_id=moderator_id,
                        post_id=post.id,
                        author_id=post.author_id,
                        title=post.title,
                        reason=reason.strip(),
                    )
                )
        return post

    def delete(self, post_id: int, requester_id: int) -> None:
        """Delete a post and everything hanging off it in one transaction."""
        post = self.session.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found")
        if post.author_id != requester_id:
            raise Forbidden("Only the author can delete this post")

        for model in (Complaint, PostTag, Like, Comment, SavedPost, PostVersion):
            self.session.execute(delete(model).where(model.post_id == post_id))
        self.session.execute(
            update(Notification)
            .where(Notification.post_id == post_id)
            .values(post_id=None)
            .execution_options(synchronize_session=False)
        )
        self.session.delete(post)
        commit_or_raise(self.session)
        logger.info("User %s deleted post %s", requester_id, post_id)

    def get_visible(self, post_id: int, viewer_id: int | None = None) -> PostDetail:
        """Return a post with comments, hiding it from callers who may not see it."""
        post = self.session.get(Post, post_id)
        if post is None or not can_view(post, viewer_id, self.clock(), self.membership):
            raise NotFound("Post not found")

        summary = FeedAssembler(self.session, clock=self.clock).summarize([post], viewer_id)[0]
        comments = list(
            self.session.scalars(
                select(Comment)
                .where(Comment.post_id == post_id)
                .order_by(Comment.created_at, Comment.id)
            )
        )
        commenters = self.users.get_many({comment.user_id for comment in comments})
        versions: list[PostVersion] = []
        if viewer_id == post.author_id:
            versions = list(
                self.session.scalars(
                    select(PostVersion)
                    .where(PostVersion.post_id == post_id)
                    .order_by(PostVersion.created_at, PostVersion.id)
                )
            )

        return PostDetail(
            **summary.model_dump(exclude_unset=True),
            comments=[
                CommentOut(
                    id=comment.id,
                    post_id=comment.post_id,
                    content=comment.content,
                    author=AuthorSummary(
                        id=commenters[comment.user_id].id,
                        username=commenters[comment.user_id].username,
                        name=commenters[comment.user_id].name,
                    ),
                    created_at=comment.created_at,
                )
                for comment in comments
            ],
            versions=[PostVersionOut.model_validate(version) for version in versions],
        )

    def list_pending(self, community_id: int, viewer_id: int) -> list[PendingPost]:
        """Return the community's moderation queue, newest first."""
        self.membership.get_community(community_id)
        self.membership.require_moderator(community_id, viewer_id)
        posts = list(
            self.session.scalars(
                select(Post)
                .where(Post.community_id == community_id, Post.status == PostStatus.PENDING)
                .order_by(Post.created_at.desc(), Post.id.desc())
            )
        )
        authors = self.users.get_many({post.author_id for post in posts})
        tag_names = self.tags.names_for(post.id for post in posts)
        return [
            PendingPost(
                id=post.id,
                title=post.title,
                body=post.body,
                author_id=post.author_id,
                author_name=authors[post.author_id].display_name,
                community_id=community_id,
                tags=tag_names[post.id],
                created_at=post.created_at,
            )
            for post in posts
        ]

    def _insert(
        self,
        author_id: int,
        content: PostContent,
        status: PostStatus,
        mode: PublicationMode,
        community_id: int | None,
        publish_at: datetime | None,
    ) -> Post:
        post = Post(
            title=content.title,
            body=content.body,
            author_id=author_id,
            community_id=community_id,
            status=status,
            publication_mode=mode,
            publication_type=normalize_publication_type(content.publication_type),
            publish_at=publish_at,
            created_at=self.clock(),
        )
        self.session.add(post)
        self.session.flush()
        self.tags.attach(post.id, content.tags)
        return post
