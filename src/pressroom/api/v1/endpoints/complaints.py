# src/pressroom/api/v1/endpoints/complaints.py
"""Complaint endpoints: readers report content, moderators review it."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from pressroom.models import Complaint, ComplaintStatus
from pressroom.schemas.complaint import ComplaintCreate, ComplaintResponse, ComplaintStatusUpdate

from ..dependencies import ComplaintServiceDep, CurrentIdentityDep

router = APIRouter(prefix="/complaints", tags=["complaints"])


@router.post("/", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def file_complaint(
    payload: ComplaintCreate,
    identity: CurrentIdentityDep,
    complaints: ComplaintServiceDep,
) -> Complaint:
    """Report a post or a comment."""
    return complaints.file(
        identity.user_id,
        reason=payload.reason,
        post_id=payload.post_id,
        comment_id=payload.comment_id,
        description=payload.description,
    )


@router.get("/", response_model=list[ComplaintResponse])
async def list_complaints(
    identity: CurrentIdentityDep,
    complaints: ComplaintServiceDep,
    state: Annotated[ComplaintStatus | None, Query(alias="status")] = None,
) -> list[Complaint]:
    """List complaints the caller moderates, newest first."""
    return complaints.list_for(identity.user_id, state)


@router.patch("/{complaint_id}", response_model=ComplaintResponse)
async def review_complaint(
    complaint_id: int,
    payload: ComplaintStatusUpdate,
    identity: CurrentIdentityDep,
    complaints: ComplaintServiceDep,
) -> Complaint:
    """Resolve or reject a complaint (moderators only)."""
    return complaints.review(complaint_id, identity.user_id, payload.status)
