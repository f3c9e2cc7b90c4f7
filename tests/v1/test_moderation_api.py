# tests/v1/test_moderation_api.py
"""Tests for the moderation queue and decisions."""

from __future__ import annotations

from fastapi import status


def _submit(client, headers, community_id: int) -> dict:
    response = client.post(
        "/api/v1/posts/",
        json={
            "title": "Community post",
            "body": "For the group",
            "community_id": community_id,
            "status": "PUBLISHED",
        },
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def test_member_submission_is_pending_and_member_cannot_moderate(
    client, community, author, reader, add_member, author_headers, reader_headers
) -> None:
    add_member(community, author)
    add_member(community, reader)

    post = _submit(client, author_headers, community.id)
    assert post["status"] == "PENDING"
    assert post["publication_mode"] == "COMMUNITY"

    response = client.post(f"/api/v1/moderation/posts/{post['id']}/approve", headers=reader_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "forbidden"


def test_non_member_cannot_submit(client, community, author_headers) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"title": "t", "body": "b", "community_id": community.id},
        headers=author_headers,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_pending_queue(client, community, author, add_member, author_headers, moderator_headers) -> None:
    add_member(community, author)
    post = _submit(client, author_headers, community.id)

    queue = client.get(
        f"/api/v1/moderation/communities/{community.id}/pending", headers=moderator_headers
    )
    assert queue.status_code == status.HTTP_200_OK
    assert [item["id"] for item in queue.json()] == [post["id"]]

    denied = client.get(
        f"/api/v1/moderation/communities/{community.id}/pending", headers=author_headers
    )
    assert denied.status_code == status.HTTP_403_FORBIDDEN


def test_approve_then_reject_conflicts(
    client, community, author, add_member, author_headers, moderator_headers
) -> None:
    add_member(community, author)
    post = _submit(client, author_headers, community.id)
    assert client.get(f"/api/v1/posts/{post['id']}").status_code == 404

    approved = client.post(
        f"/api/v1/moderation/posts/{post['id']}/approve", headers=moderator_headers
    )
    assert approved.status_code == status.HTTP_200_OK
    assert approved.json()["status"] == "PUBLISHED"
    assert client.get(f"/api/v1/posts/{post['id']}").status_code == 200

    rejected = client.post(
        f"/api/v1/moderation/posts/{post['id']}/reject",
        json={"reason": "Changed my mind"},
        headers=moderator_headers,
    )
    assert rejected.status_code == status.HTTP_409_CONFLICT

    inbox = client.get("/api/v1/notifications/", headers=author_headers).json()
    assert [note["type"] for note in inbox] == ["postPublished"]


def test_approve_to_profile(client, community, author, add_member, author_headers, moderator_headers) -> None:
    add_member(community, author)
    post = _submit(client, author_headers, community.id)

    approved = client.post(
        f"/api/v1/moderation/posts/{post['id']}/approve",
        json={"publication_mode": "USER"},
        headers=moderator_headers,
    )

    assert approved.json()["publication_mode"] == "USER"
    profile = client.get(f"/api/v1/users/{author.id}/posts").json()
    assert [item["id"] for item in profile] == [post["id"]]


def test_reject_requires_reason(client, community, author, add_member, author_headers, moderator_headers) -> None:
    add_member(community, author)
    post = _submit(client, author_headers, community.id)

    missing = client.post(
        f"/api/v1/moderation/posts/{post['id']}/reject", json={}, headers=moderator_headers
    )
    assert missing.status_code == status.HTTP_400_BAD_REQUEST

    rejected = client.post(
        f"/api/v1/moderation/posts/{post['id']}/reject",
        json={"reason": "Off topic"},
        headers=moderator_headers,
    )
    assert rejected.status_code == status.HTTP_200_OK
    assert rejected.json()["status"] == "REJECTED"


def test_moderating_personal_post_is_forbidden(client, author_headers, moderator_headers) -> None:
    post = client.post(
        "/api/v1/posts/", json={"title": "Mine", "body": "Only mine"}, headers=author_headers
    ).json()

    response = client.post(f"/api/v1/moderation/posts/{post['id']}/approve", headers=moderator_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_moderating_missing_post(client, moderator_headers) -> None:
    response = client.post("/api/v1/moderation/posts/999/approve", headers=moderator_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"detail": "Post not found", "code": "not_found"}
