"""User directory lookups used by the publishing core."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pressroom.core.errors import NotFound
from pressroom.models import Follow, User

__all__ = ["UserDirectory"]


class UserDirectory:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find(self, user_id: int) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def require(self, user_id: int) -> User:
        """Return a user or raise NotFound."""
        user = self.find(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def get_many(self, user_ids: set[int]) -> dict[int, User]:
        """Return users keyed by id for the given identifiers."""
        if not user_ids:
            return {}
        rows = self.session.scalars(select(User).where(User.id.in_(user_ids)))
        return {user.id: user for user in rows}

    def follower_ids(self, user_id: int) -> list[int]:
        """Return ids of every account following ``user_id``."""
        return list(
            self.session.scalars(
                select(Follow.follower_id)
                .where(Follow.following_id == user_id)
                .order_by(Follow.follower_id)
            )
        )

    def follower_count(self, user_id: int) -> int:
        """Return the number of followers of ``user_id``."""
        return self.session.scalar(
            select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
        ) or 0

    def following_count(self, user_id: int) -> int:
        """Return the number of accounts ``user_id`` follows."""
        return self.session.scalar(
            select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        ) or 0

    def is_following(self, follower_id: int, following_id: int) -> bool:
        """Return True when ``follower_id`` follows ``following_id``."""
        return self.session.get(Follow, (follower_id, following_id)) is not None
