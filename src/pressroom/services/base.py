"""Transaction helpers shared by the services."""
from __future__ import annotations

import logging

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from pressroom.core.errors import InternalError

logger = logging.getLogger(__name__)


def commit_or_raise(session: Session) -> None:
    """Commit the unit of work; on store failure roll back and raise InternalError."""
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Commit failed; transaction rolled back")
        raise InternalError("Storage failure") from exc


def is_lock_timeout(exc: OperationalError) -> bool:
    """Return True when the driver gave up waiting for a write lock."""
    name = getattr(exc.orig, "sqlite_errorname", None)
    if name in {"SQLITE_BUSY", "SQLITE_LOCKED"}:
        return True
    return "database is locked" in str(exc.orig)
