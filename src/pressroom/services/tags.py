"""Tag normalization and get-or-insert."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pressroom.models import PostTag, Tag


def normalize_tags(names: Iterable[str]) -> list[str]:
    """Trim, lower-case and de-duplicate tag names, keeping first-seen order."""
    seen: dict[str, None] = {}
    for raw in names:
        name = raw.strip().lower()
        if name:
            seen.setdefault(name, None)
    return list(seen)


class TagRepository:
    """Shared tag vocabulary and its association with posts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_or_create(self, name: str) -> Tag:
        """Return the tag called ``name``, inserting it if missing.

        The insert runs in a savepoint so a concurrent writer winning the
        unique constraint only costs a re-read.
        """
        tag = self.session.scalar(select(Tag).where(Tag.name == name))
        if tag is not None:
            return tag
        try:
            with self.session.begin_nested():
                tag = Tag(name=name)
                self.session.add(tag)
        except IntegrityError:
            tag = self.session.scalar(select(Tag).where(Tag.name == name))
            if tag is None:
                raise
        return tag

    def attach(self, post_id: int, names: Iterable[str]) -> list[str]:
        """Replace the post's tags with ``names`` and return the stored list."""
        normalized = normalize_tags(names)
        self.session.execute(delete(PostTag).where(PostTag.post_id == post_id))
        for position, name in enumerate(normalized):
            tag = self.get_or_create(name)
            self.session.add(PostTag(post_id=post_id, tag_id=tag.id, position=position))
        self.session.flush()
        return normalized

    def names_for(self, post_ids: Iterable[int]) -> dict[int, list[str]]:
        """Return ordered tag names for each of ``post_ids``."""
        ids = list(post_ids)
        result: dict[int, list[str]] = {post_id: [] for post_id in ids}
        if not ids:
            return result
        rows = self.session.execute(
            select(PostTag.post_id, Tag.name)
            .join(Tag, Tag.id == PostTag.tag_id)
            .where(PostTag.post_id.in_(ids))
            .order_by(PostTag.post_id, PostTag.position)
        )
        for post_id, name in rows:
            result[post_id].append(name)
        return result

    def all_names(self) -> list[str]:
        """Return every known tag name alphabetically."""
        return list(self.session.scalars(select(Tag.name).order_by(Tag.name)))
