"""Domain services for Pressroom."""

from .complaints import ComplaintService
from .engagement import EngagementService
from .feed import FeedAssembler, FeedFilter, SortMode
from .identity import IdentityGate, UserIdentity
from .membership import CommunitySort, MembershipAuthority
from .notifications import NotificationFanout
from .post_lifecycle import (
    Approve,
    CommunityTarget,
    PersonalTarget,
    PostLifecycleService,
    Reject,
)

__all__ = [
    "Approve",
    "CommunitySort",
    "CommunityTarget",
    "ComplaintService",
    "EngagementService",
    "FeedAssembler",
    "FeedFilter",
    "IdentityGate",
    "MembershipAuthority",
    "NotificationFanout",
    "PersonalTarget",
    "PostLifecycleService",
    "Reject",
    "SortMode",
    "UserIdentity",
]
