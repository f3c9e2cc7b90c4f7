"""Identity gate: turn a bearer credential into a caller identity."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from pressroom.core.security import decode_access_token
from pressroom.services.users import UserDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserIdentity:
    """Authenticated caller as resolved from a credential."""

    user_id: int
    email: str
    name: str | None = None


class IdentityGate:
    """Resolve bearer credentials; authorization is left to the services."""

    def __init__(self, session: Session) -> None:
        self.users = UserDirectory(session)

    def resolve(self, credential: str | None) -> UserIdentity | None:
        """Return the caller's identity, or None for anonymous callers.

        Invalid signatures, expired tokens, malformed subjects and unknown
        users all resolve to None.
        """
        if not credential:
            return None
        claims = decode_access_token(credential)
        if claims is None:
            return None
        subject = claims.get("sub")
        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            logger.debug("Rejecting credential with subject %r", subject)
            return None

        user = self.users.find(user_id)
        if user is None:
            return None
        return UserIdentity(user_id=user.id, email=user.email, name=user.name)
