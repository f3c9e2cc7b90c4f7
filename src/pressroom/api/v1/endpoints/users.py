# src/pressroom/api/v1/endpoints/users.py
"""User-related endpoints: profiles, follows and per-user post lists."""

from __future__ import annotations

from fastapi import APIRouter

from pressroom.schemas.community import UserCommunity
from pressroom.schemas.post import PostSummary
from pressroom.schemas.user import FollowToggleResponse, UserProfile

from ..dependencies import (
    CurrentIdentityDep,
    EngagementDep,
    FeedDep,
    LimitQuery,
    MembershipDep,
    OffsetQuery,
    OptionalIdentityDep,
)

router = APIRouter(prefix="/users", tags=["users"])


# Declared before the /{user_id} routes so "me" is never parsed as an id.
@router.get("/me/communities", response_model=list[UserCommunity])
async def list_my_communities(
    identity: CurrentIdentityDep,
    membership: MembershipDep,
) -> list[UserCommunity]:
    """List the communities the caller belongs to, with the caller's role."""
    return membership.communities_of(identity.user_id)


@router.get("/{user_id}", response_model=UserProfile, response_model_exclude_unset=True)
async def get_user_profile(
    user_id: int,
    feed: FeedDep,
    viewer: OptionalIdentityDep,
) -> UserProfile:
    """Get a profile with follower, following and post counts."""
    return feed.author_profile(user_id, viewer.user_id if viewer else None)


@router.post("/{user_id}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    user_id: int,
    identity: CurrentIdentityDep,
    engagement: EngagementDep,
) -> FollowToggleResponse:
    """Follow a user, or unfollow when already following."""
    followed, follower_count = engagement.toggle_follow(identity.user_id, user_id)
    return FollowToggleResponse(followed=followed, follower_count=follower_count)


@router.get(
    "/{user_id}/posts",
    response_model=list[PostSummary],
    response_model_exclude_unset=True,
)
async def list_user_posts(
    user_id: int,
    feed: FeedDep,
    viewer: OptionalIdentityDep,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[PostSummary]:
    """List a user's profile posts; the owner also sees drafts."""
    return feed.profile(user_id, viewer.user_id if viewer else None, limit=limit, offset=offset)


@router.get(
    "/{user_id}/liked",
    response_model=list[PostSummary],
    response_model_exclude_unset=True,
)
async def list_liked_posts(
    user_id: int,
    feed: FeedDep,
    viewer: OptionalIdentityDep,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[PostSummary]:
    """List visible posts the user liked."""
    return feed.liked(user_id, viewer.user_id if viewer else None, limit=limit, offset=offset)


@router.get(
    "/{user_id}/saved",
    response_model=list[PostSummary],
    response_model_exclude_unset=True,
)
async def list_saved_posts(
    user_id: int,
    feed: FeedDep,
    viewer: OptionalIdentityDep,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[PostSummary]:
    """List the caller's own saved posts."""
    return feed.saved(user_id, viewer.user_id if viewer else None, limit=limit, offset=offset)
