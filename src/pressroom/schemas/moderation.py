# src/pressroom/schemas/moderation.py
"""Moderation-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pressroom.models.post import PublicationMode
from pressroom.schemas.post import UtcDatetime


class ApproveRequest(BaseModel):
    """Approve a pending community post."""

    publication_mode: PublicationMode = Field(
        PublicationMode.COMMUNITY,
        description="Where the approved post is published",
    )


class RejectRequest(BaseModel):
    """Reject a pending community post; the reason is sent to the author."""

    reason: str = Field(..., min_length=1, max_length=2000)


class PendingPost(BaseModel):
    """Entry in a community's moderation queue."""

    id: int
    title: str
    body: str
    author_id: int
    author_name: str | None
    community_id: int
    tags: list[str]
    created_at: UtcDatetime
