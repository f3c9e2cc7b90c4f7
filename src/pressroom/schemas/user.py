"""User-related Pydantic schemas."""

from pydantic import BaseModel

from pressroom.schemas.post import UtcDatetime


class UserProfile(BaseModel):
    """Public profile with follow counts.

    ``is_followed`` is only present for an identified viewer.
    """

    id: int
    username: str
    name: str | None
    created_at: UtcDatetime
    follower_count: int
    following_count: int
    post_count: int
    is_followed: bool | None = None


class FollowToggleResponse(BaseModel):
    """Result of toggling a follow edge."""

    followed: bool
    follower_count: int


class TagResponse(BaseModel):
    """Tag name as exposed to clients."""

    name: str
