# src/pressroom/schemas/community.py
"""Community-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from pressroom.models.community import MemberRole
from pressroom.schemas.post import UtcDatetime


class CommunityCreate(BaseModel):
    """Schema for creating a new community."""

    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=20, max_length=5000)
    rules: str | None = None


class CommunityResponse(BaseModel):
    """Schema for community information returned by the API."""

    id: int
    name: str
    description: str | None
    rules: str | None
    owner_id: int
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class CommunitySummary(CommunityResponse):
    """Community with its member and published-post counts."""

    member_count: int
    post_count: int


class CommunityDetail(CommunitySummary):
    """Community with counts and the viewer's membership."""

    role: MemberRole | None = None
    notifications_enabled: bool | None = None


class SubscriptionResponse(BaseModel):
    """Result of toggling membership."""

    subscribed: bool
    role: MemberRole | None


class NotificationsToggleResponse(BaseModel):
    """Result of toggling a member's community notifications."""

    notifications_enabled: bool


class RoleUpdate(BaseModel):
    """Change a member's role."""

    role: MemberRole


class MembershipResponse(BaseModel):
    """Membership row as stored."""

    community_id: int
    user_id: int
    role: MemberRole
    notifications_enabled: bool

    model_config = ConfigDict(from_attributes=True)


class UserCommunity(CommunitySummary):
    """A community the caller belongs to, with the caller's role."""

    role: MemberRole
    notifications_enabled: bool
