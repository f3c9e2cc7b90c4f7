# src/pressroom/api/v1/endpoints/posts.py
"""Post-related endpoints for the Pressroom API."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from pressroom.models import Post
from pressroom.schemas.post import (
    AuthorSummary,
    CommentCreate,
    CommentOut,
    DraftPatch,
    LikeToggleResponse,
    PostCreate,
    PostDetail,
    PostOut,
    PostShare,
    PostSummary,
    SaveToggleResponse,
)
from pressroom.services import CommunityTarget, FeedFilter, PersonalTarget, SortMode

from ..dependencies import (
    CurrentIdentityDep,
    EngagementDep,
    FeedDep,
    LimitQuery,
    OffsetQuery,
    OptionalIdentityDep,
    PostServiceDep,
)

router = APIRouter(prefix="/posts", tags=["posts"])
comments_router = APIRouter(prefix="/comments", tags=["posts"])


@router.get(
    "/",
    response_model=list[PostSummary],
    response_model_exclude_unset=True,
)
async def list_posts(
    feed: FeedDep,
    viewer: OptionalIdentityDep,
    tag: str | None = None,
    q: str | None = None,
    community_id: int | None = None,
    subscriptions: bool = False,
    sort: SortMode | None = None,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[PostSummary]:
    """List visible posts; without ``sort`` the order is shuffled."""
    return feed.list(
        FeedFilter(
            tag=tag,
            q=q,
            community_id=community_id,
            subscriptions_only=subscriptions,
            sort=sort,
            limit=limit,
            offset=offset,
        ),
        viewer.user_id if viewer else None,
    )


@router.get(
    "/search",
    response_model=list[PostSummary],
    response_model_exclude_unset=True,
)
async def search_posts(
    feed: FeedDep,
    viewer: OptionalIdentityDep,
    q: str | None = None,
    tag: str | None = None,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[PostSummary]:
    """Search visible posts by text and tag, newest first."""
    return feed.search(q, tag, viewer.user_id if viewer else None, limit=limit, offset=offset)


@router.post("/", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    identity: CurrentIdentityDep,
    service: PostServiceDep,
) -> Post:
    """Create a personal post, or submit one to a community for moderation."""
    if payload.community_id is not None:
        target = CommunityTarget(community_id=payload.community_id)
    else:
        target = PersonalTarget(status=payload.status, publish_at=payload.publish_at)
    return service.create(identity.user_id, payload, target)


@router.post("/share", response_model=list[PostOut], status_code=status.HTTP_201_CREATED)
async def share_post(
    payload: PostShare,
    identity: CurrentIdentityDep,
    service: PostServiceDep,
) -> list[Post]:
    """Submit one post to several communities."""
    return service.share(identity.user_id, payload, payload.community_ids)


@router.get(
    "/{post_id}",
    response_model=PostDetail,
    response_model_exclude_unset=True,
)
async def get_post(
    post_id: int,
    viewer: OptionalIdentityDep,
    service: PostServiceDep,
) -> PostDetail:
    """Get a post with its comments."""
    return service.get_visible(post_id, viewer.user_id if viewer else None)


@router.patch("/{post_id}", response_model=PostOut)
async def edit_draft(
    post_id: int,
    patch: DraftPatch,
    identity: CurrentIdentityDep,
    service: PostServiceDep,
) -> Post:
    """Edit a draft, optionally publishing it."""
    return service.edit_draft(post_id, identity.user_id, patch)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    identity: CurrentIdentityDep,
    service: PostServiceDep,
) -> Response:
    """Delete a post and its likes, comments, bookmarks and history."""
    service.delete(post_id, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: int,
    identity: CurrentIdentityDep,
    engagement: EngagementDep,
) -> LikeToggleResponse:
    """Like a post, or remove an existing like."""
    liked, like_count = engagement.toggle_like(post_id, identity.user_id)
    return LikeToggleResponse(liked=liked, like_count=like_count)


@router.post("/{post_id}/save", response_model=SaveToggleResponse)
async def toggle_save(
    post_id: int,
    identity: CurrentIdentityDep,
    engagement: EngagementDep,
) -> SaveToggleResponse:
    """Bookmark a post, or remove an existing bookmark."""
    return SaveToggleResponse(saved=engagement.toggle_save(post_id, identity.user_id))


@router.post(
    "/{post_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: int,
    payload: CommentCreate,
    identity: CurrentIdentityDep,
    engagement: EngagementDep,
) -> CommentOut:
    """Comment on a post."""
    comment = engagement.add_comment(post_id, identity.user_id, payload.content)
    author = engagement.users.require(comment.user_id)
    return CommentOut(
        id=comment.id,
        post_id=comment.post_id,
        content=comment.content,
        author=AuthorSummary(id=author.id, username=author.username, name=author.name),
        created_at=comment.created_at,
    )


@comments_router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    identity: CurrentIdentityDep,
    engagement: EngagementDep,
) -> Response:
    """Delete a comment; allowed for its author and the post's author."""
    engagement.delete_comment(comment_id, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
