# src/pressroom/api/v1/endpoints/moderation.py
"""Moderation endpoints for community submissions."""

from __future__ import annotations

from fastapi import APIRouter

from pressroom.models import Post
from pressroom.schemas.moderation import ApproveRequest, PendingPost, RejectRequest
from pressroom.schemas.post import PostOut
from pressroom.services import Approve, Reject

from ..dependencies import CurrentIdentityDep, PostServiceDep

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.get("/communities/{community_id}/pending", response_model=list[PendingPost])
async def list_pending(
    community_id: int,
    identity: CurrentIdentityDep,
    service: PostServiceDep,
) -> list[PendingPost]:
    """Return the community's moderation queue, newest first."""
    return service.list_pending(community_id, identity.user_id)


@router.post("/posts/{post_id}/approve", response_model=PostOut)
async def approve_post(
    post_id: int,
    identity: CurrentIdentityDep,
    service: PostServiceDep,
    payload: ApproveRequest | None = None,
) -> Post:
    """Publish a pending community post."""
    mode = (payload or ApproveRequest()).publication_mode
    return service.moderate(post_id, identity.user_id, Approve(publication_mode=mode))


@router.post("/posts/{post_id}/reject", response_model=PostOut)
async def reject_post(
    post_id: int,
    payload: RejectRequest,
    identity: CurrentIdentityDep,
    service: PostServiceDep,
) -> Post:
    """Reject a pending community post; the reason is sent to its author."""
    return service.moderate(post_id, identity.user_id, Reject(reason=payload.reason))
