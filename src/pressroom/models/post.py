# src/pressroom/models/post.py
"""SQLAlchemy models for posts, their edit history, and tags."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pressroom.db.session import Base
from pressroom.db.time import utcnow


class PostStatus(enum.Enum):
    """Publication state machine.

    DRAFT -> PUBLISHED for personal posts; PENDING -> PUBLISHED | REJECTED
    for community submissions.
    """

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"


class PublicationMode(enum.Enum):
    """Where a post is published: the author's profile or a community."""

    USER = "USER"
    COMMUNITY = "COMMUNITY"


DEFAULT_PUBLICATION_TYPE = "ARTICLE"


class Post(Base):
    """Primary content entity produced by users."""

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_status_publish_at", "status", "publish_at"),
        Index("ix_post_community_id", "community_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    # Null for personal posts.
    community_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("community.id"),
        nullable=True,
    )
    status: Mapped[PostStatus] = mapped_column(
        Enum(PostStatus, name="post_status", native_enum=False, length=16),
        nullable=False,
        default=PostStatus.DRAFT,
    )
    publication_mode: Mapped[PublicationMode] = mapped_column(
        Enum(PublicationMode, name="publication_mode", native_enum=False, length=16),
        nullable=False,
        default=PublicationMode.USER,
    )
    publication_type: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_PUBLICATION_TYPE,
    )
    # Visible once status is PUBLISHED and publish_at <= now.
    publish_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    post_tags: Mapped[list[PostTag]] = relationship(
        "PostTag",
        order_by="PostTag.position",
        lazy="selectin",
        viewonly=True,
    )

    @property
    def tag_names(self) -> list[str]:
        """Return tag names in the order they were attached."""
        return [link.tag.name for link in self.post_tags]


class PostVersion(Base):
    """Immutable snapshot of a draft taken before each edit."""

    __tablename__ = "post_version"
    __table_args__ = (Index("ix_post_version_post_id", "post_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    editor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Tag(Base):
    """Lower-cased tag name shared across posts."""

    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)


class PostTag(Base):
    """Ordered association between a post and a tag."""

    __tablename__ = "post_tag"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id"),
        primary_key=True,
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tag.id"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tag: Mapped[Tag] = relationship("Tag", lazy="joined")
