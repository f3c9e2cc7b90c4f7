# src/pressroom/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .community import (
    CommunityCreate,
    CommunityDetail,
    CommunityResponse,
    CommunitySummary,
    MembershipResponse,
    NotificationsToggleResponse,
    RoleUpdate,
    SubscriptionResponse,
    UserCommunity,
)
from .complaint import ComplaintCreate, ComplaintResponse, ComplaintStatusUpdate
from .moderation import ApproveRequest, PendingPost, RejectRequest
from .notification import MarkReadRequest, MarkReadResponse, NotificationResponse
from .post import (
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
    PostVersionOut,
    SaveToggleResponse,
)
from .user import FollowToggleResponse, TagResponse, UserProfile

__all__ = [
    "CommunityCreate", "CommunityDetail", "CommunityResponse", "CommunitySummary",
    "MembershipResponse", "NotificationsToggleResponse", "RoleUpdate", "SubscriptionResponse",
    "UserCommunity",
    "ComplaintCreate", "ComplaintResponse", "ComplaintStatusUpdate",
    "ApproveRequest", "PendingPost", "RejectRequest",
    "MarkReadRequest", "MarkReadResponse", "NotificationResponse",
    "AuthorSummary", "CommentCreate", "CommentOut", "DraftPatch", "LikeToggleResponse",
    "PostCreate", "PostDetail", "PostOut", "PostShare", "PostSummary", "PostVersionOut",
    "SaveToggleResponse",
    "FollowToggleResponse", "TagResponse", "UserProfile",
]
