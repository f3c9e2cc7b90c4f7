"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pressroom.core.errors import Unauthenticated
from pressroom.core.settings import settings
from pressroom.db.session import get_db
from pressroom.services import (
    ComplaintService,
    EngagementService,
    FeedAssembler,
    IdentityGate,
    MembershipAuthority,
    NotificationFanout,
    PostLifecycleService,
    UserIdentity,
)

# Anonymous callers are allowed through; endpoints decide whether they need a user.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

# Page sizes above the configured maximum are rejected, not clamped.
LimitQuery = Annotated[int | None, Query(ge=1, le=settings.feed_max_limit)]
OffsetQuery = Annotated[int, Query(ge=0)]


def get_optional_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> UserIdentity | None:
    """Resolve the bearer credential, returning None for anonymous callers."""
    if credentials is None:
        return None
    return IdentityGate(db).resolve(credentials.credentials)


def get_current_identity(
    identity: Annotated[UserIdentity | None, Depends(get_optional_identity)],
) -> UserIdentity:
    """Require an authenticated caller.

    Raises:
        Unauthenticated: If the credential is missing, invalid, or names an
            unknown user.
    """
    if identity is None:
        raise Unauthenticated()
    return identity


OptionalIdentityDep = Annotated[UserIdentity | None, Depends(get_optional_identity)]
CurrentIdentityDep = Annotated[UserIdentity, Depends(get_current_identity)]


def get_fanout(db: SessionDep) -> NotificationFanout:
    return NotificationFanout(db)


def get_post_service(db: SessionDep) -> PostLifecycleService:
    return PostLifecycleService(db, NotificationFanout(db))


def get_engagement_service(db: SessionDep) -> EngagementService:
    return EngagementService(db, NotificationFanout(db))


def get_feed(db: SessionDep) -> FeedAssembler:
    return FeedAssembler(db)


def get_membership(db: SessionDep) -> MembershipAuthority:
    return MembershipAuthority(db)


def get_complaints(db: SessionDep) -> ComplaintService:
    return ComplaintService(db)


FanoutDep = Annotated[NotificationFanout, Depends(get_fanout)]
PostServiceDep = Annotated[PostLifecycleService, Depends(get_post_service)]
EngagementDep = Annotated[EngagementService, Depends(get_engagement_service)]
FeedDep = Annotated[FeedAssembler, Depends(get_feed)]
MembershipDep = Annotated[MembershipAuthority, Depends(get_membership)]
ComplaintServiceDep = Annotated[ComplaintService, Depends(get_complaints)]
