# src/pressroom/api/v1/endpoints/communities.py
"""Community-related endpoints for the Pressroom API."""

from __future__ import annotations

from fastapi import APIRouter, status

from pressroom.models import Community, CommunityMember
from pressroom.schemas.community import (
    CommunityCreate,
    CommunityDetail,
    CommunityResponse,
    CommunitySummary,
    MembershipResponse,
    NotificationsToggleResponse,
    RoleUpdate,
    SubscriptionResponse,
)
from pressroom.schemas.post import PostSummary
from pressroom.services import CommunitySort, SortMode

from ..dependencies import (
    CurrentIdentityDep,
    FeedDep,
    LimitQuery,
    MembershipDep,
    OffsetQuery,
    OptionalIdentityDep,
)

router = APIRouter(prefix="/communities", tags=["communities"])


@router.post("/", response_model=CommunityResponse, status_code=status.HTTP_201_CREATED)
async def create_community(
    payload: CommunityCreate,
    identity: CurrentIdentityDep,
    membership: MembershipDep,
) -> Community:
    """Create a community; the creator becomes its administrator."""
    return membership.create_community(
        identity.user_id,
        name=payload.name,
        description=payload.description,
        rules=payload.rules,
    )


@router.get("/", response_model=list[CommunitySummary])
async def list_communities(
    membership: MembershipDep,
    q: str | None = None,
    sort: CommunitySort | None = None,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[CommunitySummary]:
    """Search and sort the community directory, newest first by default."""
    return membership.list_communities(q, sort, limit=limit, offset=offset)


@router.get("/{community_id}", response_model=CommunityDetail)
async def get_community(
    community_id: int,
    viewer: OptionalIdentityDep,
    membership: MembershipDep,
) -> CommunityDetail:
    """Get a community with counts and the caller's membership."""
    return membership.detail(community_id, viewer.user_id if viewer else None)


@router.get(
    "/{community_id}/posts",
    response_model=list[PostSummary],
    response_model_exclude_unset=True,
)
async def list_community_posts(
    community_id: int,
    feed: FeedDep,
    viewer: OptionalIdentityDep,
    sort: SortMode | None = None,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[PostSummary]:
    """List the community's visible posts, newest first by default."""
    return feed.community(
        community_id,
        viewer.user_id if viewer else None,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@router.post("/{community_id}/subscription", response_model=SubscriptionResponse)
async def toggle_subscription(
    community_id: int,
    identity: CurrentIdentityDep,
    membership: MembershipDep,
) -> SubscriptionResponse:
    """Join the community, or leave it when already a member."""
    member = membership.toggle_subscription(community_id, identity.user_id)
    return SubscriptionResponse(
        subscribed=member is not None,
        role=member.role if member is not None else None,
    )


@router.post("/{community_id}/notifications", response_model=NotificationsToggleResponse)
async def toggle_notifications(
    community_id: int,
    identity: CurrentIdentityDep,
    membership: MembershipDep,
) -> NotificationsToggleResponse:
    """Turn the caller's community notifications on or off."""
    enabled = membership.toggle_notifications(community_id, identity.user_id)
    return NotificationsToggleResponse(notifications_enabled=enabled)


@router.put("/{community_id}/members/{user_id}/role", response_model=MembershipResponse)
async def set_member_role(
    community_id: int,
    user_id: int,
    payload: RoleUpdate,
    identity: CurrentIdentityDep,
    membership: MembershipDep,
) -> CommunityMember:
    """Promote or demote a member (administrators only)."""
    return membership.set_role(community_id, identity.user_id, user_id, payload.role)
