"""Complaints filed by readers and reviewed by moderators.

A complaint about a community post is reviewed by that community's
moderators. Complaints about personal posts go to anyone who moderates at
least one community.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from pressroom.core.errors import BadRequest, Forbidden, NotFound
from pressroom.db.time import utcnow
from pressroom.models import Comment, Complaint, ComplaintStatus, Post
from pressroom.services.base import commit_or_raise
from pressroom.services.membership import MembershipAuthority
from pressroom.services.visibility import can_view

logger = logging.getLogger(__name__)


class ComplaintService:
    """Files complaints and records moderators' reviews of them."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.session = session
        self.clock = clock
        self.membership = MembershipAuthority(session)

    def file(
        self,
        reporter_id: int,
        *,
        reason: str,
        post_id: int | None = None,
        comment_id: int | None = None,
        description: str | None = None,
    ) -> Complaint:
        """Report a post, or a comment on it, that the reporter can see.

        Raises:
            BadRequest: Without a target or reason, or when the comment is
                not on the given post.
            NotFound: When the target does not exist or is hidden.
        """
        if not reason or not reason.strip():
            raise BadRequest("A complaint reason is required")
        if comment_id is not None:
            comment = self.session.get(Comment, comment_id)
            if comment is None:
                raise NotFound("Comment not found")
            if post_id is not None and post_id != comment.post_id:
                raise BadRequest("The comment does not belong to that post")
            post_id = comment.post_id
        elif post_id is None:
            raise BadRequest("A complaint needs a post or a comment")

        post = self.session.get(Post, post_id)
        if post is None or not can_view(post, reporter_id, self.clock(), self.membership):
            raise NotFound("Post not found")

        complaint = Complaint(
            reporter_id=reporter_id,
            post_id=post.id,
            comment_id=comment_id,
            reason=reason.strip(),
            description=description,
            status=ComplaintStatus.PENDING,
        )
        self.session.add(complaint)
        commit_or_raise(self.session)
        self.session.refresh(complaint)
        logger.info(
            "User %s filed complaint %s about post %s (comment=%s)",
            reporter_id,
            complaint.id,
            post.id,
            comment_id,
        )
        return complaint

    def list_for(
        self,
        moderator_id: int,
        status: ComplaintStatus | None = None,
    ) -> list[Complaint]:
        """Return complaints the moderator may review, newest first."""
        moderated = self.membership.moderated_community_ids(moderator_id)
        if not moderated:
            raise Forbidden("Only moderators can review complaints")
        stmt = (
            select(Complaint)
            .join(Post, Post.id == Complaint.post_id)
            .where(or_(Post.community_id.in_(moderated), Post.community_id.is_(None)))
        )
        if status is not None:
            stmt = stmt.where(Complaint.status == status)
        stmt = stmt.order_by(Complaint.created_at.desc(), Complaint.id.desc())
        return list(self.session.scalars(stmt))

    def review(
        self,
        complaint_id: int,
        moderator_id: int,
        status: ComplaintStatus,
    ) -> Complaint:
        """Mark a complaint RESOLVED or REJECTED.

        A later review overwrites an earlier one.
        """
        complaint = self.session.get(Complaint, complaint_id)
        if complaint is None:
            raise NotFound("Complaint not found")
        if status is ComplaintStatus.PENDING:
            raise BadRequest("A complaint can only be resolved or rejected")

        post = self.session.get(Post, complaint.post_id)
        if post is not None and post.community_id is not None:
            self.membership.require_moderator(post.community_id, moderator_id)
        elif not self.membership.moderated_community_ids(moderator_id):
            raise Forbidden("Only moderators can review complaints")

        complaint.status = status
        complaint.reviewed_by_id = moderator_id
        complaint.reviewed_at = self.clock()
        commit_or_raise(self.session)
        self.session.refresh(complaint)
        logger.info("Moderator %s marked complaint %s %s", moderator_id, complaint_id, status.value)
        return complaint
