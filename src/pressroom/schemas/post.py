# src/pressroom/schemas/post.py
"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from typing import Annotated

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field

from pressroom.db.time import as_utc
from pressroom.models.post import PostStatus, PublicationMode

# SQLite returns naive datetimes; responses always carry UTC offsets.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class PostContent(BaseModel):
    """Fields shared by every post submission."""

    title: str = Field(..., min_length=1, max_length=300)
    body: str = Field(..., min_length=1, max_length=50_000)
    tags: list[str] = Field(default_factory=list, max_length=20)
    publication_type: str | None = Field(None, description="Free-form category, e.g. article")


class PostCreate(PostContent):
    """Schema for creating a post on the author's profile or in a community."""

    community_id: int | None = Field(None, description="Submit to this community for moderation")
    status: PostStatus | None = Field(
        None,
        description="DRAFT or PUBLISHED for personal posts; ignored for community submissions",
    )
    publish_at: UtcDatetime | None = Field(None, description="Schedule publication for later")


class PostShare(PostContent):
    """Schema for submitting one post to several communities at once."""

    community_ids: list[int] = Field(default_factory=list)


class DraftPatch(BaseModel):
    """Partial update applied to a draft; omitted fields stay unchanged."""

    title: str | None = Field(None, min_length=1, max_length=300)
    body: str | None = Field(None, min_length=1, max_length=50_000)
    tags: list[str] | None = Field(None, max_length=20)
    publication_type: str | None = None
    publish_at: UtcDatetime | None = None
    status: PostStatus | None = None


class AuthorSummary(BaseModel):
    """Public projection of a post or comment author."""

    id: int
    username: str
    name: str | None = None


class PostOut(BaseModel):
    """Schema for a post as stored, returned to its author after a mutation."""

    id: int
    title: str
    body: str
    author_id: int
    community_id: int | None
    status: PostStatus
    publication_mode: PublicationMode
    publication_type: str
    publish_at: UtcDatetime | None
    created_at: UtcDatetime
    tags: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("tags", "tag_names"),
    )

    model_config = ConfigDict(from_attributes=True)


class PostSummary(BaseModel):
    """Feed entry.

    ``is_liked`` and ``is_saved`` are only set for an identified viewer and
    are omitted from responses otherwise.
    """

    id: int
    title: str
    body: str
    author: AuthorSummary
    community_id: int | None
    status: PostStatus
    publication_mode: PublicationMode
    publication_type: str
    tags: list[str]
    like_count: int
    comment_count: int
    created_at: UtcDatetime
    publish_at: UtcDatetime | None
    is_liked: bool | None = None
    is_saved: bool | None = None


class PostVersionOut(BaseModel):
    """Snapshot of a draft before one of its edits."""

    id: int
    title: str
    body: str
    editor_id: int
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class CommentCreate(BaseModel):
    """Schema for adding a comment to a post."""

    content: str = Field(..., min_length=1, max_length=5000)


class CommentOut(BaseModel):
    """Comment with its author."""

    id: int
    post_id: int
    content: str
    author: AuthorSummary
    created_at: UtcDatetime


class PostDetail(PostSummary):
    """Single post view with comments and, for its author, edit history."""

    comments: list[CommentOut] = Field(default_factory=list)
    versions: list[PostVersionOut] = Field(default_factory=list)


class LikeToggleResponse(BaseModel):
    """Result of toggling a like."""

    liked: bool
    like_count: int


class SaveToggleResponse(BaseModel):
    """Result of toggling a bookmark."""

    saved: bool
