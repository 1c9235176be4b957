"""
bountera.database.models — SQLAlchemy 2.0 Data Models
======================================================

Tables:
- users               — Marketplace members keyed by unique email
- activities          — Append-only activity journal (one daily login per day)
- leaderboard_entries — Denormalized per-creator points summary
"""

from __future__ import annotations

import enum
from datetime import UTC, date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Bountera ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Role(enum.StrEnum):
    """Marketplace role chosen once after first sign-in."""
    CREATOR = "creator"
    BOUNTY_POSTER = "bounty_poster"


class ActivityType(enum.StrEnum):
    """Everything that can appear in the activity journal."""
    PROFILE_UPDATE = "profile_update"
    BOUNTY_POSTED = "bounty_posted"
    BOUNTY_APPLICATION = "bounty_application"
    BOUNTY_COMPLETION = "bounty_completion"
    DAILY_LOGIN = "daily_login"
    DONATION_RECEIVED = "donation_received"
    PROFILE_COMPLETION = "profile_completion"


# ---------------------------------------------------------------------------
# Users — one row per marketplace member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    username: Mapped[str | None] = mapped_column(String(30), unique=True, default=None)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    avatar: Mapped[str | None] = mapped_column(String(500), default=None)
    bio: Mapped[str | None] = mapped_column(Text, default=None)
    role: Mapped[str | None] = mapped_column(String(20), default=None)
    profile_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    # Only ever changed with SQL-side ``points = points + n`` updates.
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    leaderboard_entry: Mapped[LeaderboardEntry | None] = relationship(
        back_populates="user", uselist=False
    )

    __table_args__ = (
        Index("ix_users_points_desc", "points"),
        Index("ix_users_role", "role"),
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
    )

    @property
    def is_creator(self) -> bool:
        return self.role == Role.CREATOR

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r} pts={self.points}>"


# ---------------------------------------------------------------------------
# Activity — append-only journal
# ---------------------------------------------------------------------------
class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)
    # Set only for daily_login rows; NULLs never collide in the unique key.
    activity_day: Mapped[date | None] = mapped_column(Date, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        UniqueConstraint(
            "email", "activity_type", "activity_day",
            name="uq_activities_email_type_day",
        ),
        Index("ix_activities_email_time", "email", "created_at"),
        Index("ix_activities_type_time", "activity_type", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Activity id={self.id} email={self.email!r} type={self.activity_type}>"


# ---------------------------------------------------------------------------
# LeaderboardEntry — derived per-creator projection
# ---------------------------------------------------------------------------
class LeaderboardEntry(Base):
    """Denormalized summary of a creator's points.

    ``users.points`` stays authoritative; this row is kept in step by
    incremental upserts and repaired by the reconciliation pass.
    """
    __tablename__ = "leaderboard_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    username: Mapped[str | None] = mapped_column(String(30), default=None)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    avatar: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bounty_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    activity_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    donation_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_bounties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # display cache
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    user: Mapped[User] = relationship(back_populates="leaderboard_entry")

    __table_args__ = (
        Index("ix_leaderboard_total_points", "total_points"),
    )

    def __repr__(self) -> str:
        return f"<LeaderboardEntry user={self.user_id} total={self.total_points}>"
