# src/pressroom/schemas/complaint.py
"""Complaint-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pressroom.models.complaint import ComplaintStatus
from pressroom.schemas.post import UtcDatetime


class ComplaintCreate(BaseModel):
    """Report a post, or one comment when ``comment_id`` is given."""

    post_id: int | None = None
    comment_id: int | None = None
    reason: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus


class ComplaintResponse(BaseModel):
    """Complaint as stored."""

    id: int
    reporter_id: int
    post_id: int
    comment_id: int | None
    reason: str
    description: str | None
    status: ComplaintStatus
    reviewed_by_id: int | None
    reviewed_at: UtcDatetime | None
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)
