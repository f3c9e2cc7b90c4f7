# src/pressroom/api/v1/endpoints/tags.py
"""Tag listing endpoint."""

from fastapi import APIRouter

from pressroom.schemas.user import TagResponse
from pressroom.services.tags import TagRepository

from ..dependencies import SessionDep

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=list[TagResponse])
async def list_tags(db: SessionDep) -> list[TagResponse]:
    """Return every tag name alphabetically."""
    return [TagResponse(name=name) for name in TagRepository(db).all_names()]
