# src/pressroom/models/__init__.py
"""SQLAlchemy models for the Pressroom application."""

from .community import Community, CommunityMember, MemberRole
from .complaint import Complaint, ComplaintStatus
from .engagement import Comment, Follow, Like, SavedPost
from .notification import Notification, NotificationType
from .post import Post, PostStatus, PostTag, PostVersion, PublicationMode, Tag
from .user import User

__all__ = [
    "Community", "CommunityMember", "MemberRole",
    "Complaint", "ComplaintStatus",
    "Comment", "Follow", "Like", "SavedPost",
    "Notification", "NotificationType",
    "Post", "PostStatus", "PostTag", "PostVersion", "PublicationMode", "Tag",
    "User",
]
