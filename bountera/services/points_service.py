"""
bountera.services.points_service — Points Engine
=================================================

Applies awards to the user store.  Every award follows the same steps:

  1. Validate the inputs (nothing is written on failure)
  2. Look up the user by email
  3. ``UPDATE users SET points = points + :n`` — never read-modify-write
  4. Append one activity row
  5. Commit
  6. Best-effort leaderboard upsert for creators (separate transaction)

Daily logins are made idempotent by the ``(email, activity_type,
activity_day)`` unique constraint rather than a read-then-write check.
"""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bountera.constants import local_today, normalize_email
from bountera.database.engine import get_session
from bountera.database.models import Activity, ActivityType, User
from bountera.engine.points import (
    DAILY_LOGIN_POINTS,
    RETROACTIVE_BONUS_POINTS,
    AwardResult,
    DailyLoginResult,
    daily_login_message,
    donation_points,
    is_retroactive_bonus_eligible,
    parse_activity_type,
    points_for,
    validate_award,
)
from bountera.errors import NotFoundError, ValidationError, require
from bountera.services.leaderboard_service import upsert_leaderboard_entry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def find_user(session: Session, email: str) -> User:
    """Fetch a user by email or raise :class:`NotFoundError`."""
    user = session.scalar(select(User).where(User.email == normalize_email(email)))
    if user is None:
        raise NotFoundError("User not found", {"email": email})
    return user


def _increment_points(
    session: Session, user_id: int, amount: int, *, only_if_zero: bool = False
) -> bool:
    """Atomically add *amount* to the user's points.

    With ``only_if_zero`` the update only matches while the stored total is
    still 0, so a one-off bonus cannot be collected twice.

    Returns ``True`` if a row was updated.
    """
    stmt = update(User).where(User.id == user_id)
    if only_if_zero:
        stmt = stmt.where(User.points == 0)
    result = session.execute(
        stmt.values(points=User.points + amount)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _current_points(session: Session, user_id: int) -> int:
    return session.scalar(select(User.points).where(User.id == user_id)) or 0


def get_user_points(engine: Engine, email: str) -> int:
    """Current points for *email*; 0 for unknown users."""
    require(email, "email")
    with Session(engine) as session:
        points = session.scalar(
            select(User.points).where(User.email == normalize_email(email))
        )
    return points or 0


# ---------------------------------------------------------------------------
# Generic award
# ---------------------------------------------------------------------------
def award_points(
    engine: Engine,
    email: str,
    activity_type: ActivityType | str,
    points: int,
    description: str,
    context_id: str | None = None,
    *,
    metadata: dict[str, Any] | None = None,
) -> AwardResult:
    """Award *points* to *email* for one activity.

    Raises :class:`ValidationError` for bad input and
    :class:`NotFoundError` for unknown users.
    """
    kind = validate_award(email, activity_type, points, description)
    email = normalize_email(email)

    meta = dict(metadata or {})
    if context_id:
        meta["context_id"] = str(context_id)

    with get_session(engine) as session:
        user = find_user(session, email)
        user_id, is_creator = user.id, user.is_creator

        _increment_points(session, user_id, points)
        session.add(Activity(
            email=email,
            activity_type=kind.value,
            description=description.strip(),
            points=points,
            metadata_=meta,
        ))
        total = _current_points(session, user_id)

    logger.info("Awarded %d pts to %s for %s (total %d)", points, email, kind, total)

    if is_creator:
        upsert_leaderboard_entry(engine, user_id, points, kind)

    return AwardResult(points=points, total_points=total)


# ---------------------------------------------------------------------------
# Daily login
# ---------------------------------------------------------------------------
def _claim_daily_login(session: Session, email: str, now: datetime) -> bool:
    """Insert today's daily_login row.  ``False`` if one already exists."""
    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(Activity(
                email=email,
                activity_type=ActivityType.DAILY_LOGIN.value,
                description="Daily login bonus",
                points=DAILY_LOGIN_POINTS,
                metadata_={},
                activity_day=local_today(now),
                created_at=now,
            ))
            session.flush()
    except IntegrityError:
        # Unique (email, type, day) caught it; the outer txn is still alive.
        return False
    return True


def award_daily_login(
    engine: Engine,
    email: str,
    *,
    now: datetime | None = None,
    bonus_enabled: bool = True,
) -> DailyLoginResult:
    """Claim the once-per-day login point, plus the retroactive profile
    bonus for creators still sitting at 0 points.

    The bonus check runs even when today's point was already claimed.  The
    bonus itself has no activity row.
    """
    require(email, "email")
    email = normalize_email(email)
    now = now or datetime.now(UTC)

    with get_session(engine) as session:
        user = find_user(session, email)
        user_id, is_creator = user.id, user.is_creator

        bonus = 0
        if bonus_enabled and is_retroactive_bonus_eligible(
            user.role, user.username, user.points
        ):
            bonus = RETROACTIVE_BONUS_POINTS

        daily = DAILY_LOGIN_POINTS if _claim_daily_login(session, email, now) else 0

        bonus_applied = False
        if bonus:
            bonus_applied = _increment_points(
                session, user_id, daily + bonus, only_if_zero=True
            )
            if not bonus_applied:
                logger.info("Retroactive bonus for %s already applied elsewhere", email)
                bonus = 0
        if daily and not bonus_applied:
            _increment_points(session, user_id, daily)

        total = _current_points(session, user_id)

    awarded = daily + bonus
    if awarded == 0:
        logger.debug("Daily login already claimed today for %s", email)
    else:
        logger.info(
            "Daily login for %s: %d daily + %d retroactive (total %d)",
            email, daily, bonus, total,
        )
        if is_creator:
            upsert_leaderboard_entry(
                engine, user_id, awarded, ActivityType.DAILY_LOGIN, now=now
            )

    return DailyLoginResult(
        claimed=awarded > 0,
        daily_points=daily,
        bonus_points=bonus,
        total_points=total,
        message=daily_login_message(daily, bonus),
    )


# ---------------------------------------------------------------------------
# Named awards
# ---------------------------------------------------------------------------
def award_bounty_completion(
    engine: Engine, email: str, bounty_title: str = "", bounty_id: str | None = None
) -> AwardResult:
    return award_points(
        engine,
        email,
        ActivityType.BOUNTY_COMPLETION,
        points_for(ActivityType.BOUNTY_COMPLETION),
        f"Completed bounty: {bounty_title or 'Bounty'}",
        bounty_id,
        metadata={"bounty_title": bounty_title} if bounty_title else None,
    )


def award_bounty_application(
    engine: Engine, email: str, bounty_title: str = "", bounty_id: str | None = None
) -> AwardResult:
    return award_points(
        engine,
        email,
        ActivityType.BOUNTY_APPLICATION,
        points_for(ActivityType.BOUNTY_APPLICATION),
        f"Applied to bounty: {bounty_title or 'Bounty'}",
        bounty_id,
        metadata={"bounty_title": bounty_title} if bounty_title else None,
    )


def award_profile_completion(engine: Engine, email: str) -> AwardResult:
    return award_points(
        engine,
        email,
        ActivityType.PROFILE_COMPLETION,
        points_for(ActivityType.PROFILE_COMPLETION),
        "Profile completion bonus",
    )


def award_donation_received(
    engine: Engine, email: str, amount: float, donation_id: str | None = None
) -> AwardResult:
    """Points for a completed donation: 10% of the amount, capped at 50."""
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise ValidationError("amount must be a positive number", {"field": "amount"})
    return award_points(
        engine,
        email,
        ActivityType.DONATION_RECEIVED,
        donation_points(amount),
        f"Received donation of {amount:g}",
        donation_id,
        metadata={"amount": amount},
    )


def award_action(
    engine: Engine,
    email: str,
    action: str,
    *,
    title: str = "",
    context_id: str | None = None,
    amount: float | None = None,
) -> AwardResult:
    """Dispatch a named action to the award that prices it."""
    require(email, "email")
    kind = parse_activity_type(action)
    if kind == ActivityType.BOUNTY_COMPLETION:
        return award_bounty_completion(engine, email, title, context_id)
    if kind == ActivityType.BOUNTY_APPLICATION:
        return award_bounty_application(engine, email, title, context_id)
    if kind == ActivityType.PROFILE_COMPLETION:
        return award_profile_completion(engine, email)
    if kind == ActivityType.DONATION_RECEIVED:
        return award_donation_received(engine, email, amount, context_id)
    raise ValidationError(f"No standard award for {kind.value}", {"action": action})
