"""Membership authority: community roles and the checks built on them."""
from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pressroom.core.errors import BadRequest, Forbidden, NotFound
from pressroom.core.settings import settings
from pressroom.models import Community, CommunityMember, MemberRole, Post, PostStatus
from pressroom.schemas.community import (
    CommunityDetail,
    CommunityResponse,
    CommunitySummary,
    UserCommunity,
)
from pressroom.services.base import commit_or_raise

logger = logging.getLogger(__name__)


class CommunitySort(enum.Enum):
    """Orderings for the community directory."""

    NEWEST = "newest"
    OLDEST = "oldest"
    ALPHABETICAL = "alphabetical"
    POPULARITY = "popularity"


def can_moderate(role: MemberRole | None) -> bool:
    """Return True when ``role`` may decide on pending posts."""
    match role:
        case MemberRole.MODERATOR | MemberRole.ADMIN:
            return True
        case MemberRole.MEMBER | None:
            return False


class MembershipAuthority:
    """Answers "does user U hold role R in community C?"."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_community(self, community_id: int) -> Community:
        """Return a community or raise NotFound."""
        community = self.session.get(Community, community_id)
        if community is None:
            raise NotFound("Community not found")
        return community

    def membership(self, community_id: int, user_id: int) -> CommunityMember | None:
        """Return the membership row for the pair, if any."""
        return self.session.get(CommunityMember, (community_id, user_id))

    def role_of(self, community_id: int, user_id: int) -> MemberRole | None:
        """Return the user's role in the community; None means not a member."""
        member = self.membership(community_id, user_id)
        return None if member is None else member.role

    def require_member(self, community_id: int, user_id: int) -> MemberRole:
        """Return the caller's role or raise Forbidden for non-members."""
        role = self.role_of(community_id, user_id)
        if role is None:
            raise Forbidden("You are not a member of this community")
        return role

    def require_moderator(self, community_id: int, user_id: int) -> MemberRole:
        """Return the caller's role or raise Forbidden unless MODERATOR or ADMIN."""
        role = self.role_of(community_id, user_id)
        if role is None or not can_moderate(role):
            raise Forbidden("You are not a moderator of this community")
        return role

    def require_admin(self, community_id: int, user_id: int) -> MemberRole:
        """Return the caller's role or raise Forbidden unless ADMIN."""
        role = self.role_of(community_id, user_id)
        if role is not MemberRole.ADMIN:
            raise Forbidden("You are not an administrator of this community")
        return role

    def moderated_community_ids(self, user_id: int) -> set[int]:
        """Return ids of communities where the user may moderate."""
        rows = self.session.scalars(
            select(CommunityMember.community_id).where(
                CommunityMember.user_id == user_id,
                CommunityMember.role.in_([MemberRole.MODERATOR, MemberRole.ADMIN]),
            )
        )
        return set(rows)

    def list_communities(
        self,
        q: str | None = None,
        sort: CommunitySort | None = None,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[CommunitySummary]:
        """Search communities by name or description and order them."""
        stmt = select(Community)
        if q and q.strip():
            needle = q.strip().lower()
            stmt = stmt.where(
                or_(
                    func.lower(Community.name).contains(needle, autoescape=True),
                    func.lower(Community.description).contains(needle, autoescape=True),
                )
            )
        match sort or CommunitySort.NEWEST:
            case CommunitySort.NEWEST:
                stmt = stmt.order_by(Community.created_at.desc(), Community.id.desc())
            case CommunitySort.OLDEST:
                stmt = stmt.order_by(Community.created_at.asc(), Community.id.asc())
            case CommunitySort.ALPHABETICAL:
                stmt = stmt.order_by(func.lower(Community.name), Community.id)
            case CommunitySort.POPULARITY:
                member_counts = (
                    select(CommunityMember.community_id, func.count().label("member_count"))
                    .group_by(CommunityMember.community_id)
                    .subquery()
                )
                stmt = stmt.outerjoin(
                    member_counts, member_counts.c.community_id == Community.id
                ).order_by(
                    func.coalesce(member_counts.c.member_count, 0).desc(),
                    Community.id.desc(),
                )
        limit = min(limit or settings.feed_default_limit, settings.feed_max_limit)
        communities = list(self.session.scalars(stmt.limit(limit).offset(max(offset, 0))))
        return self.summarize(communities)

    def communities_of(self, user_id: int) -> list[UserCommunity]:
        """Return every community the user belongs to, by name."""
        rows = self.session.execute(
            select(Community, CommunityMember)
            .join(CommunityMember, CommunityMember.community_id == Community.id)
            .where(CommunityMember.user_id == user_id)
            .order_by(func.lower(Community.name), Community.id)
        ).all()
        summaries = self.summarize([community for community, _ in rows])
        return [
            UserCommunity(
                **summary.model_dump(),
                role=member.role,
                notifications_enabled=member.notifications_enabled,
            )
            for summary, (_, member) in zip(summaries, rows)
        ]

    def detail(self, community_id: int, viewer_id: int | None = None) -> CommunityDetail:
        """Return one community with counts and the viewer's membership."""
        community = self.get_community(community_id)
        (summary,) = self.summarize([community])
        member = self.membership(community_id, viewer_id) if viewer_id is not None else None
        return CommunityDetail(
            **summary.model_dump(),
            role=member.role if member else None,
            notifications_enabled=member.notifications_enabled if member else None,
        )

    def summarize(self, communities: Sequence[Community]) -> list[CommunitySummary]:
        """Attach member and published-post counts in two grouped queries."""
        if not communities:
            return []
        ids = [community.id for community in communities]
        member_counts = dict(
            self.session.execute(
                select(CommunityMember.community_id, func.count())
                .where(CommunityMember.community_id.in_(ids))
                .group_by(CommunityMember.community_id)
            ).all()
        )
        post_counts = dict(
            self.session.execute(
                select(Post.community_id, func.count())
                .where(Post.community_id.in_(ids), Post.status == PostStatus.PUBLISHED)
                .group_by(Post.community_id)
            ).all()
        )
        return [
            CommunitySummary(
                **CommunityResponse.model_validate(community).model_dump(),
                member_count=member_counts.get(community.id, 0),
                post_count=post_counts.get(community.id, 0),
            )
            for community in communities
        ]

    def create_community(
        self,
        owner_id: int,
        *,
        name: str,
        description: str | None,
        rules: str | None = None,
    ) -> Community:
        """Create a community whose creator becomes its ADMIN."""
        name = name.strip()
        exists = self.session.scalar(select(Community.id).where(Community.name == name))
        if exists is not None:
            raise BadRequest("Community name already exists")

        community = Community(name=name, description=description, rules=rules, owner_id=owner_id)
        self.session.add(community)
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            raise BadRequest("Community name already exists") from exc
        self.session.add(
            CommunityMember(
                community_id=community.id,
                user_id=owner_id,
                role=MemberRole.ADMIN,
                notifications_enabled=True,
            )
        )
        commit_or_raise(self.session)
        self.session.refresh(community)
        logger.info("Community %s created by user %s", community.id, owner_id)
        return community

    def toggle_subscription(self, community_id: int, user_id: int) -> CommunityMember | None:
        """Subscribe a non-member as MEMBER, or remove an existing membership.

        Returns:
            The new membership, or None after unsubscribing.
        """
        community = self.get_community(community_id)
        member = self.membership(community_id, user_id)
        if member is not None:
            if member.role is MemberRole.ADMIN and community.owner_id == user_id:
                raise BadRequest("The community owner cannot unsubscribe")
            self.session.delete(member)
            commit_or_raise(self.session)
            return None

        member = CommunityMember(
            community_id=community_id,
            user_id=user_id,
            role=MemberRole.MEMBER,
            notifications_enabled=True,
        )
        self.session.add(member)
        commit_or_raise(self.session)
        return member

    def toggle_notifications(self, community_id: int, user_id: int) -> bool:
        """Flip the member's notification preference and return the new value."""
        self.get_community(community_id)
        member = self.membership(community_id, user_id)
        if member is None:
            raise NotFound("You are not a member of this community")
        member.notifications_enabled = not member.notifications_enabled
        commit_or_raise(self.session)
        return member.notifications_enabled

    def set_role(
        self,
        community_id: int,
        admin_id: int,
        target_user_id: int,
        role: MemberRole,
    ) -> CommunityMember:
        """Promote or demote a member; only ADMINs may call this."""
        self.get_community(community_id)
        self.require_admin(community_id, admin_id)
        if target_user_id == admin_id:
            raise BadRequest("Administrators cannot change their own role")
        if role is MemberRole.ADMIN:
            raise BadRequest("The ADMIN role cannot be granted")
        member = self.membership(community_id, target_user_id)
        if member is None:
            raise NotFound("User is not a member of this community")
        member.role = role
        commit_or_raise(self.session)
        logger.info(
            "User %s set role of user %s in community %s to %s",
            admin_id,
            target_user_id,
            community_id,
            role.value,
        )
        return member
