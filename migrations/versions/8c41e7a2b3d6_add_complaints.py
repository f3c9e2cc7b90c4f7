"""add complaints

Revision ID: 8c41e7a2b3d6
Revises: 5b2f0c1d9e47
Create Date: 2026-10-19 14:37:05.118402

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8c41e7a2b3d6"
down_revision: Union[str, Sequence[str], None] = "5b2f0c1d9e47"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the complaint table."""
    op.create_table(
        "complaint",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reporter_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("comment_id", sa.Integer(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING", "RESOLVED", "REJECTED",
                name="complaint_status", native_enum=False, length=16,
            ),
            nullable=False,
        ),
        sa.Column("reviewed_by_id", sa.Integer(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["reporter_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"]),
        sa.ForeignKeyConstraint(["comment_id"], ["comment.id"]),
        sa.ForeignKeyConstraint(["reviewed_by_id"], ["user_account.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_complaint_post_id", "complaint", ["post_id"], unique=False)
    op.create_index("ix_complaint_status", "complaint", ["status"], unique=False)


def downgrade() -> None:
    """Drop the complaint table."""
    op.drop_index("ix_complaint_status", table_name="complaint")
    op.drop_index("ix_complaint_post_id", table_name="complaint")
    op.drop_table("complaint")
