"""Create users, activities and leaderboard_entries tables

Revision ID: 4c2d8e1f7a90
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c2d8e1f7a90"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the points, activity journal and leaderboard tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("username", sa.String(30), nullable=True, unique=True),
        sa.Column("name", sa.String(100), nullable=False, server_default=""),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("role", sa.String(20), nullable=True),
        sa.Column("profile_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
    )
    op.create_index("ix_users_points_desc", "users", ["points"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("activity_type", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("activity_day", sa.Date(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "email", "activity_type", "activity_day",
            name="uq_activities_email_type_day",
        ),
    )
    op.create_index("ix_activities_email_time", "activities", ["email", "created_at"])
    op.create_index("ix_activities_type_time", "activities", ["activity_type", "created_at"])

    op.create_table(
        "leaderboard_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("username", sa.String(30), nullable=True),
        sa.Column("name", sa.String(100), nullable=False, server_default=""),
        sa.Column("avatar", sa.String(500), nullable=False, server_default=""),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bounty_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("activity_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("donation_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_bounties", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rank", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_leaderboard_total_points", "leaderboard_entries", ["total_points"])


def downgrade() -> None:
    """Drop the points tables."""
    op.drop_index("ix_leaderboard_total_points", table_name="leaderboard_entries")
    op.drop_table("leaderboard_entries")
    op.drop_index("ix_activities_type_time", table_name="activities")
    op.drop_index("ix_activities_email_time", table_name="activities")
    op.drop_table("activities")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_points_desc", table_name="users")
    op.drop_table("users")
