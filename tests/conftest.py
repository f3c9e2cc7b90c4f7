# tests/conftest.py
from __future__ import annotations

import os
import random
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pressroom")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from pressroom.core.security import create_access_token
from pressroom.db.session import Base, build_engine
from pressroom.db.session import get_db as app_get_session
from pressroom.db.time import utcnow
from pressroom.main import app as fastapi_app
from pressroom.models import (
    Community,
    CommunityMember,
    MemberRole,
    Post,
    PostStatus,
    PublicationMode,
    User,
)

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
_COMMUNITY_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit for real; wipe every table so each test starts clean.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with unique handles."""

    def _make(username: str | None = None, name: str | None = None) -> User:
        n = next(_USER_COUNTER)
        username = username or f"user{n}"
        user = User(email=f"{username}@example.com", username=username, name=name)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def author(make_user: Callable[..., User]) -> User:
    """Primary test user, who writes most posts."""
    return make_user("alice", name="Alice Author")


@pytest.fixture()
def reader(make_user: Callable[..., User]) -> User:
    """Second user, who reads, likes and follows."""
    return make_user("bob", name="Bob Reader")


@pytest.fixture()
def moderator(make_user: Callable[..., User]) -> User:
    return make_user("carol", name="Carol Moderator")


def auth_headers(user: User) -> dict[str, str]:
    """Return authorization headers for ``user``."""
    token = create_access_token(user.id, email=user.email, name=user.name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for any user."""
    return auth_headers


@pytest.fixture()
def author_headers(author: User) -> dict[str, str]:
    return auth_headers(author)


@pytest.fixture()
def reader_headers(reader: User) -> dict[str, str]:
    return auth_headers(reader)


@pytest.fixture()
def moderator_headers(moderator: User) -> dict[str, str]:
    return auth_headers(moderator)


@pytest.fixture()
def add_member(db_session: Session) -> Callable[..., CommunityMember]:
    """Return a factory that enrolls a user in a community with a role."""

    def _add(
        community: Community,
        user: User,
        role: MemberRole = MemberRole.MEMBER,
    ) -> CommunityMember:
        member = CommunityMember(
            community_id=community.id,
            user_id=user.id,
            role=role,
            notifications_enabled=True,
        )
        db_session.add(member)
        db_session.commit()
        return member

    return _add


@pytest.fixture()
def community(
    db_session: Session,
    moderator: User,
    add_member: Callable[..., CommunityMember],
) -> Community:
    """Community administered by ``moderator``."""
    community = Community(
        name=f"Test Community {next(_COMMUNITY_COUNTER)}",
        description="A place for testing the moderation workflow.",
        rules="Be kind.",
        owner_id=moderator.id,
    )
    db_session.add(community)
    db_session.commit()
    db_session.refresh(community)
    add_member(community, moderator, MemberRole.ADMIN)
    return community


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory that inserts posts directly, bypassing the services."""

    def _make(
        author: User,
        *,
        title: str = "A post",
        body: str = "Post body",
        status: PostStatus = PostStatus.PUBLISHED,
        community: Community | None = None,
        publish_at_offset: timedelta | None = timedelta(0),
    ) -> Post:
        now = utcnow()
        post = Post(
            title=title,
            body=body,
            author_id=author.id,
            community_id=community.id if community else None,
            status=status,
            publication_mode=PublicationMode.COMMUNITY if community else PublicationMode.USER,
            publication_type="ARTICLE",
            publish_at=None if publish_at_offset is None else now + publish_at_offset,
            created_at=now,
        )
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make


@pytest.fixture()
def seeded_rng() -> random.Random:
    """Deterministic RNG for shuffle assertions."""
    return random.Random(20240601)
