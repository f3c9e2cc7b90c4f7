# tests/v1/test_complaints_api.py
"""Tests for complaint endpoints."""

from __future__ import annotations

from fastapi import status


def test_report_then_review(
    client, author, community, add_member, make_post, reader_headers, moderator_headers, moderator
) -> None:
    add_member(community, author)
    post = make_post(author, community=community)

    created = client.post(
        "/api/v1/complaints/",
        json={"post_id": post.id, "reason": "Spam", "description": "Link farm"},
        headers=reader_headers,
    )
    assert created.status_code == status.HTTP_201_CREATED
    complaint = created.json()
    assert complaint["status"] == "PENDING"
    assert complaint["reviewed_at"] is None

    queue = client.get("/api/v1/complaints/", headers=moderator_headers).json()
    assert [item["id"] for item in queue] == [complaint["id"]]

    reviewed = client.patch(
        f"/api/v1/complaints/{complaint['id']}",
        json={"status": "RESOLVED"},
        headers=moderator_headers,
    )
    assert reviewed.status_code == status.HTTP_200_OK
    assert reviewed.json()["status"] == "RESOLVED"
    assert reviewed.json()["reviewed_by_id"] == moderator.id

    still_pending = client.get(
        "/api/v1/complaints/", params={"status": "PENDING"}, headers=moderator_headers
    )
    assert still_pending.json() == []


def test_reporting_needs_a_signed_in_user_and_a_target(client, author, make_post, reader_headers) -> None:
    post = make_post(author)

    anonymous = client.post("/api/v1/complaints/", json={"post_id": post.id, "reason": "Spam"})
    assert anonymous.status_code == status.HTTP_401_UNAUTHORIZED

    untargeted = client.post("/api/v1/complaints/", json={"reason": "Spam"}, headers=reader_headers)
    assert untargeted.status_code == status.HTTP_400_BAD_REQUEST
    assert untargeted.json()["code"] == "bad_request"

    blank = client.post(
        "/api/v1/complaints/", json={"post_id": post.id, "reason": ""}, headers=reader_headers
    )
    assert blank.status_code == status.HTTP_400_BAD_REQUEST


def test_readers_cannot_review(client, author, make_post, reader_headers) -> None:
    post = make_post(author)
    complaint = client.post(
        "/api/v1/complaints/", json={"post_id": post.id, "reason": "Spam"}, headers=reader_headers
    ).json()

    assert client.get("/api/v1/complaints/", headers=reader_headers).status_code == (
        status.HTTP_403_FORBIDDEN
    )
    response = client.patch(
        f"/api/v1/complaints/{complaint['id']}",
        json={"status": "REJECTED"},
        headers=reader_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
