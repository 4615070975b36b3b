"""Create users and swap_requests tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial schema: user profiles and the swap requests between them.
Notes: uq_swap_requests_pending_pair is a partial unique index; it allows
       any number of accepted/rejected rows per pair but only one pending.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PENDING_ONLY = sa.text("status = 'pending'")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("location", sa.String(120), nullable=True),
        sa.Column("skills_offered", sa.JSON(), nullable=False),
        sa.Column("skills_wanted", sa.JSON(), nullable=False),
        sa.Column(
            "availability",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'flexible'"),
        ),
        sa.Column(
            "is_public",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column("profile_photo_url", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("idx_users_public_created_at", "users", ["is_public", "created_at"])

    op.create_table(
        "swap_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("requester_id", sa.Uuid(), nullable=False),
        sa.Column("accepter_id", sa.Uuid(), nullable=False),
        sa.Column("requester_offered_skill", sa.Text(), nullable=False),
        sa.Column("accepter_wanted_skill", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column("feedback_rating", sa.Integer(), nullable=True),
        sa.Column("feedback_comment", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["requester_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["accepter_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected', 'cancelled', 'completed')",
            name="ck_swap_requests_status",
        ),
        sa.CheckConstraint("requester_id <> accepter_id", name="ck_swap_requests_distinct_users"),
        sa.CheckConstraint(
            "feedback_rating IS NULL OR (feedback_rating >= 1 AND feedback_rating <= 5)",
            name="ck_swap_requests_feedback_rating",
        ),
    )
    op.create_index(
        "uq_swap_requests_pending_pair",
        "swap_requests",
        ["requester_id", "accepter_id"],
        unique=True,
        postgresql_where=PENDING_ONLY,
        sqlite_where=PENDING_ONLY,
    )
    op.create_index("idx_swap_requests_requester", "swap_requests", ["requester_id", "created_at"])
    op.create_index("idx_swap_requests_accepter", "swap_requests", ["accepter_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_swap_requests_accepter", table_name="swap_requests")
    op.drop_index("idx_swap_requests_requester", table_name="swap_requests")
    op.drop_index("uq_swap_requests_pending_pair", table_name="swap_requests")
    op.drop_table("swap_requests")
    op.drop_index("idx_users_public_created_at", table_name="users")
    op.drop_table("users")
