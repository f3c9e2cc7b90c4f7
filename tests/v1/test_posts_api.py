# tests/v1/test_posts_api.py
"""Tests for post endpoints."""

from __future__ import annotations

from fastapi import status

from pressroom.core.settings import settings
from pressroom.models import Follow, PostStatus


def _create(client, headers, **overrides) -> dict:
    payload = {"title": "Hello", "body": "World", "tags": ["Intro"]}
    payload.update(overrides)
    response = client.post("/api/v1/posts/", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def test_create_requires_authentication(client) -> None:
    response = client.post("/api/v1/posts/", json={"title": "t", "body": "b"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "unauthenticated"


def test_invalid_token_is_unauthenticated(client) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"title": "t", "body": "b"},
        headers={"Authorization": "Bearer nonsense"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_validation_errors_are_400(client, author_headers) -> None:
    response = client.post("/api/v1/posts/", json={"title": ""}, headers=author_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "bad_request"


def test_create_personal_post(client, author_headers, author) -> None:
    data = _create(client, author_headers, publication_type="essay")

    assert data["status"] == "PUBLISHED"
    assert data["publication_mode"] == "USER"
    assert data["publication_type"] == "ESSAY"
    assert data["author_id"] == author.id
    assert data["tags"] == ["intro"]
    assert data["publish_at"].endswith("Z")


def test_personal_post_with_pending_status_is_rejected(client, author_headers) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"title": "t", "body": "b", "status": "PENDING"},
        headers=author_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_anonymous_feed_omits_viewer_fields(client, author_headers) -> None:
    created = _create(client, author_headers)
    _create(client, author_headers, title="Draft", status="DRAFT")

    response = client.get("/api/v1/posts/", params={"sort": "newest"})

    assert response.status_code == status.HTTP_200_OK
    items = response.json()
    assert [item["id"] for item in items] == [created["id"]]
    assert "is_liked" not in items[0]
    assert "is_saved" not in items[0]
    assert items[0]["author"]["username"] == "alice"


def test_signed_in_feed_has_viewer_fields(client, author_headers, reader_headers) -> None:
    created = _create(client, author_headers)
    client.post(f"/api/v1/posts/{created['id']}/like", headers=reader_headers)

    items = client.get("/api/v1/posts/", headers=reader_headers).json()

    assert items[0]["is_liked"] is True
    assert items[0]["is_saved"] is False
    assert items[0]["like_count"] == 1


def test_unknown_sort_is_bad_request(client) -> None:
    response = client.get("/api/v1/posts/", params={"sort": "sideways"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_page_size_is_capped_by_settings(client) -> None:
    too_big = client.get("/api/v1/posts/", params={"limit": settings.feed_max_limit + 1})
    at_cap = client.get("/api/v1/posts/", params={"limit": settings.feed_max_limit})

    assert too_big.status_code == status.HTTP_400_BAD_REQUEST
    assert at_cap.status_code == status.HTTP_200_OK


def test_subscriptions_feed_requires_sign_in(client) -> None:
    response = client.get("/api/v1/posts/", params={"subscriptions": "true"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_search(client, author_headers) -> None:
    wanted = _create(client, author_headers, title="Sourdough starter")
    _create(client, author_headers, title="Cold brew")

    items = client.get("/api/v1/posts/search", params={"q": "SOURDOUGH"}).json()

    assert [item["id"] for item in items] == [wanted["id"]]


def test_draft_detail_hidden_from_others(client, author_headers, reader_headers) -> None:
    draft = _create(client, author_headers, status="DRAFT")

    assert client.get(f"/api/v1/posts/{draft['id']}", headers=reader_headers).status_code == 404
    assert client.get(f"/api/v1/posts/{draft['id']}").status_code == 404
    own = client.get(f"/api/v1/posts/{draft['id']}", headers=author_headers)
    assert own.status_code == status.HTTP_200_OK
    assert own.json()["status"] == "DRAFT"


def test_draft_to_published_flow(client, db_session, author, reader, author_headers, reader_headers) -> None:
    """Create a draft, edit it, publish it, and see it reach followers."""
    db_session.add(Follow(follower_id=reader.id, following_id=author.id))
    db_session.commit()
    draft = _create(client, author_headers, status="DRAFT")
    assert draft["publish_at"] is None

    edited = client.patch(
        f"/api/v1/posts/{draft['id']}",
        json={"body": "Better body"},
        headers=author_headers,
    )
    assert edited.status_code == status.HTTP_200_OK
    assert edited.json()["status"] == "DRAFT"

    published = client.patch(
        f"/api/v1/posts/{draft['id']}",
        json={"status": "PUBLISHED"},
        headers=author_headers,
    )
    assert published.status_code == status.HTTP_200_OK
    assert published.json()["status"] == "PUBLISHED"
    assert published.json()["publish_at"] is not None

    detail = client.get(f"/api/v1/posts/{draft['id']}", headers=author_headers).json()
    assert [version["body"] for version in detail["versions"]] == ["World", "Better body"]

    again = client.patch(
        f"/api/v1/posts/{draft['id']}", json={"title": "Too late"}, headers=author_headers
    )
    assert again.status_code == status.HTTP_409_CONFLICT
    assert again.json()["code"] == "conflict"

    inbox = client.get("/api/v1/notifications/", headers=reader_headers).json()
    assert [note["type"] for note in inbox] == ["new_post"]


def test_edit_by_other_user_is_forbidden(client, author_headers, reader_headers) -> None:
    draft = _create(client, author_headers, status="DRAFT")

    response = client.patch(
        f"/api/v1/posts/{draft['id']}", json={"title": "Mine now"}, headers=reader_headers
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_like_toggle(client, author_headers, reader_headers) -> None:
    post = _create(client, author_headers)

    first = client.post(f"/api/v1/posts/{post['id']}/like", headers=reader_headers)
    second = client.post(f"/api/v1/posts/{post['id']}/like", headers=reader_headers)

    assert first.json() == {"liked": True, "like_count": 1}
    assert second.json() == {"liked": False, "like_count": 0}


def test_save_toggle(client, author_headers, reader_headers) -> None:
    post = _create(client, author_headers)

    assert client.post(f"/api/v1/posts/{post['id']}/save", headers=reader_headers).json() == {
        "saved": True
    }


def test_comments(client, author_headers, reader_headers) -> None:
    post = _create(client, author_headers)

    created = client.post(
        f"/api/v1/posts/{post['id']}/comments",
        json={"content": "Nice one"},
        headers=reader_headers,
    )
    assert created.status_code == status.HTTP_201_CREATED
    comment = created.json()
    assert comment["author"]["username"] == "bob"

    detail = client.get(f"/api/v1/posts/{post['id']}").json()
    assert detail["comment_count"] == 1
    assert [item["content"] for item in detail["comments"]] == ["Nice one"]
    assert detail["versions"] == []

    deleted = client.delete(f"/api/v1/comments/{comment['id']}", headers=author_headers)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT


def test_delete_post(client, author_headers, reader_headers) -> None:
    post = _create(client, author_headers)

    assert client.delete(f"/api/v1/posts/{post['id']}", headers=reader_headers).status_code == 403
    assert client.delete(f"/api/v1/posts/{post['id']}", headers=author_headers).status_code == 204
    assert client.get(f"/api/v1/posts/{post['id']}").status_code == 404
    assert client.delete(f"/api/v1/posts/{post['id']}", headers=author_headers).status_code == 404


def test_share_to_communities(client, community, author, add_member, author_headers) -> None:
    add_member(community, author)

    response = client.post(
        "/api/v1/posts/share",
        json={"title": "Cross post", "body": "Body", "community_ids": [community.id]},
        headers=author_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    (post,) = response.json()
    assert post["status"] == PostStatus.PENDING.value
    assert post["community_id"] == community.id
