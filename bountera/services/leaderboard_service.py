"""
bountera.services.leaderboard_service — Leaderboard Projection
===============================================================

Keeps ``leaderboard_entries`` in step with point awards.  The projection is
advisory: every write here is best-effort, and a failure is logged and
swallowed so the triggering award or role change still succeeds.  Drift
left behind by a swallowed failure is repaired by
:func:`bountera.services.reconciliation_service.reconcile_leaderboard`.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bountera.constants import (
    DEFAULT_LEADERBOARD_LIMIT,
    MAX_LEADERBOARD_LIMIT,
    clamp_limit,
    normalize_email,
)
from bountera.database.engine import get_session
from bountera.database.models import ActivityType, LeaderboardEntry, Role, User
from bountera.engine.points import leaderboard_delta
from bountera.engine.ranking import competition_ranks
from bountera.errors import NotFoundError, require

logger = logging.getLogger(__name__)


def _new_entry(user: User) -> LeaderboardEntry:
    return LeaderboardEntry(
        user_id=user.id,
        username=user.username,
        name=user.name or "",
        avatar=user.avatar or "",
        email=user.email,
        total_points=0,
        bounty_points=0,
        activity_points=0,
        donation_points=0,
        completed_bounties=0,
        rank=0,
    )


def get_or_create_entry(session: Session, user: User) -> LeaderboardEntry:
    """Fetch the user's entry, inserting a zeroed one if it is missing.

    The insert runs in a SAVEPOINT; if a concurrent request created the
    entry first, the unique ``user_id`` constraint fires and we re-read.
    """
    entry = session.scalar(
        select(LeaderboardEntry).where(LeaderboardEntry.user_id == user.id)
    )
    if entry is not None:
        return entry

    entry = _new_entry(user)
    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(entry)
            session.flush()
    except IntegrityError:
        entry = session.scalar(
            select(LeaderboardEntry).where(LeaderboardEntry.user_id == user.id)
        )
    return entry


def upsert_leaderboard_entry(
    engine: Engine,
    user_id: int,
    points: int,
    activity_type: ActivityType,
    *,
    now: datetime | None = None,
) -> bool:
    """Apply one award to the user's leaderboard entry.

    No-op for anyone who is not a creator.  Counters are incremented
    SQL-side so concurrent awards never lose an update.

    Returns ``True`` if the entry was updated.
    """
    try:
        with get_session(engine) as session:
            user = session.get(User, user_id)
            if user is None or user.role != Role.CREATOR:
                return False

            get_or_create_entry(session, user)
            values = {
                column: getattr(LeaderboardEntry, column) + amount
                for column, amount in leaderboard_delta(activity_type, points).items()
            }
            values["last_updated"] = now or datetime.now(UTC)
            session.execute(
                update(LeaderboardEntry)
                .where(LeaderboardEntry.user_id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        return True
    except Exception:
        logger.exception(
            "Leaderboard update failed for user %s (%s, %d pts)",
            user_id, activity_type, points,
        )
        return False


def ensure_leaderboard_entry(engine: Engine, user_id: int) -> bool:
    """Create a zeroed entry for a creator who does not have one yet."""
    try:
        with get_session(engine) as session:
            user = session.get(User, user_id)
            if user is None or user.role != Role.CREATOR:
                return False
            get_or_create_entry(session, user)
        return True
    except Exception:
        logger.exception("Could not add user %s to the leaderboard", user_id)
        return False


def list_leaderboard(
    engine: Engine, limit: int | None = DEFAULT_LEADERBOARD_LIMIT
) -> list[tuple[User, int]]:
    """Top creators by points, paired with their competition rank.

    Reads ``users.points`` directly; only creators who have a username are
    listed.
    """
    limit = clamp_limit(limit, DEFAULT_LEADERBOARD_LIMIT, MAX_LEADERBOARD_LIMIT)
    with Session(engine) as session:
        users = session.scalars(
            select(User)
            .where(User.role == Role.CREATOR, User.username.is_not(None))
            .order_by(User.points.desc(), User.id)
            .limit(limit)
        ).all()
        session.expunge_all()

    ranks = competition_ranks([u.points for u in users])
    return list(zip(users, ranks))


def get_leaderboard_entry(engine: Engine, email: str) -> LeaderboardEntry:
    """Stored projection for *email*.  Raises :class:`NotFoundError`."""
    require(email, "email")
    with Session(engine) as session:
        entry = session.scalar(
            select(LeaderboardEntry).where(
                LeaderboardEntry.email == normalize_email(email)
            )
        )
        if entry is None:
            raise NotFoundError("Leaderboard entry not found", {"email": email})
        session.expunge(entry)
        return entry
