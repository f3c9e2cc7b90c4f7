# src/pressroom/models/user.py
"""SQLAlchemy model for the user directory."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from pressroom.db.session import Base
from pressroom.db.time import utcnow


class User(Base):
    """Directory entry for an account.

    Credentials live with the identity provider; only the fields the
    publishing core needs are stored here.
    """

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @property
    def display_name(self) -> str:
        """Return the handle used when snapshotting a sender's name."""
        return self.username or self.name or self.email
