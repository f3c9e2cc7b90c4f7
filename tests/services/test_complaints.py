# tests/services/test_complaints.py
"""Tests for filing and reviewing complaints."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from pressroom.core.errors import BadRequest, Forbidden, NotFound
from pressroom.models import Comment, Complaint, ComplaintStatus, MemberRole, PostStatus
from pressroom.services import (
    ComplaintService,
    EngagementService,
    MembershipAuthority,
    PostLifecycleService,
)


@pytest.fixture()
def complaints(db_session) -> ComplaintService:
    return ComplaintService(db_session)


def _comment(db_session, post, user, content="Rude remark") -> Comment:
    comment = Comment(post_id=post.id, user_id=user.id, content=content)
    db_session.add(comment)
    db_session.commit()
    return comment


def test_file_against_a_post(complaints, author, reader, make_post) -> None:
    post = make_post(author)

    complaint = complaints.file(reader.id, reason="  Spam  ", post_id=post.id, description="Ads")

    assert complaint.status is ComplaintStatus.PENDING
    assert complaint.reason == "Spam"
    assert complaint.post_id == post.id
    assert complaint.comment_id is None
    assert complaint.reporter_id == reader.id


def test_file_against_a_comment_records_its_post(
    complaints, db_session, author, reader, make_post
) -> None:
    post = make_post(author)
    comment = _comment(db_session, post, author)

    complaint = complaints.file(reader.id, reason="Insult", comment_id=comment.id)

    assert (complaint.post_id, complaint.comment_id) == (post.id, comment.id)


def test_file_validation(complaints, db_session, author, reader, make_post) -> None:
    post = make_post(author)
    other = make_post(author, title="other")
    comment = _comment(db_session, post, author)

    with pytest.raises(BadRequest):
        complaints.file(reader.id, reason="Spam")
    with pytest.raises(BadRequest):
        complaints.file(reader.id, reason="   ", post_id=post.id)
    with pytest.raises(BadRequest):
        complaints.file(reader.id, reason="Spam", post_id=other.id, comment_id=comment.id)
    with pytest.raises(NotFound):
        complaints.file(reader.id, reason="Spam", comment_id=4242)


def test_hidden_posts_cannot_be_reported(complaints, author, reader, make_post) -> None:
    draft = make_post(author, status=PostStatus.DRAFT, publish_at_offset=None)

    with pytest.raises(NotFound):
        complaints.file(reader.id, reason="Spam", post_id=draft.id)
    with pytest.raises(NotFound):
        complaints.file(reader.id, reason="Spam", post_id=4242)


def test_moderators_see_their_communities_and_personal_posts(
    complaints, author, reader, moderator, make_user, community, add_member, make_post
) -> None:
    elsewhere = make_user("erin")
    add_member(community, author)
    in_community = make_post(author, community=community)
    personal = make_post(author)
    first = complaints.file(reader.id, reason="Off topic", post_id=in_community.id)
    second = complaints.file(reader.id, reason="Spam", post_id=personal.id)

    listed = complaints.list_for(moderator.id)

    assert [complaint.id for complaint in listed] == [second.id, first.id]
    with pytest.raises(Forbidden):
        complaints.list_for(elsewhere.id)
    with pytest.raises(Forbidden):
        complaints.list_for(author.id)


def test_other_communities_complaints_are_not_listed(
    complaints, db_session, author, reader, moderator, make_user, add_member, make_post
) -> None:
    stranger = make_user("frank")
    foreign = MembershipAuthority(db_session).create_community(
        stranger.id, name="Foreign Affairs", description="Somebody else's queue."
    )
    own = MembershipAuthority(db_session).create_community(
        moderator.id, name="Home Turf", description="The moderator's own queue."
    )
    add_member(foreign, author)
    post = make_post(author, community=foreign)
    complaints.file(reader.id, reason="Spam", post_id=post.id)

    assert own.id in MembershipAuthority(db_session).moderated_community_ids(moderator.id)
    assert complaints.list_for(moderator.id) == []
    assert len(complaints.list_for(stranger.id)) == 1


def test_review_and_filter_by_status(
    complaints, author, reader, moderator, community, add_member, make_post
) -> None:
    add_member(community, author)
    post = make_post(author, community=community)
    open_one = complaints.file(reader.id, reason="Spam", post_id=post.id)
    closed = complaints.file(reader.id, reason="Duplicate", post_id=post.id)

    reviewed = complaints.review(closed.id, moderator.id, ComplaintStatus.REJECTED)

    assert reviewed.status is ComplaintStatus.REJECTED
    assert reviewed.reviewed_by_id == moderator.id
    assert reviewed.reviewed_at is not None
    pending = complaints.list_for(moderator.id, ComplaintStatus.PENDING)
    assert [complaint.id for complaint in pending] == [open_one.id]


def test_review_guards(
    complaints, author, reader, moderator, community, add_member, make_post
) -> None:
    add_member(community, author)
    add_member(community, reader)
    post = make_post(author, community=community)
    complaint = complaints.file(reader.id, reason="Spam", post_id=post.id)

    with pytest.raises(Forbidden):
        complaints.review(complaint.id, reader.id, ComplaintStatus.RESOLVED)
    with pytest.raises(BadRequest):
        complaints.review(complaint.id, moderator.id, ComplaintStatus.PENDING)
    with pytest.raises(NotFound):
        complaints.review(4242, moderator.id, ComplaintStatus.RESOLVED)


def test_community_moderator_reviews_personal_post_complaints(
    complaints, author, reader, moderator, community, make_post
) -> None:
    post = make_post(author)
    complaint = complaints.file(reader.id, reason="Spam", post_id=post.id)

    with pytest.raises(Forbidden):
        complaints.review(complaint.id, author.id, ComplaintStatus.RESOLVED)
    assert complaints.review(complaint.id, moderator.id, ComplaintStatus.RESOLVED).status is (
        ComplaintStatus.RESOLVED
    )


def test_deleting_content_removes_its_complaints(
    complaints, db_session, author, reader, make_post
) -> None:
    post = make_post(author)
    comment = _comment(db_session, post, author)
    complaints.file(reader.id, reason="Insult", comment_id=comment.id)
    complaints.file(reader.id, reason="Spam", post_id=post.id)

    EngagementService(db_session).delete_comment(comment.id, author.id)
    assert db_session.scalar(select(func.count()).select_from(Complaint)) == 1

    PostLifecycleService(db_session).delete(post.id, author.id)
    assert db_session.scalar(select(func.count()).select_from(Complaint)) == 0


def test_promoted_moderator_sees_queue(
    complaints, author, reader, community, add_member, make_post
) -> None:
    add_member(community, author)
    add_member(community, reader, MemberRole.MODERATOR)
    post = make_post(author, community=community)
    complaints.file(author.id, reason="Second thoughts", post_id=post.id)

    assert len(complaints.list_for(reader.id)) == 1
