"""
bountera.services.reconciliation_service — Leaderboard Reconciliation
======================================================================

Rebuilds ``leaderboard_entries`` from the authoritative sources and fixes
drift left by swallowed incremental updates.

How it works:
    1. ``users.points`` is the truth for ``total_points``.
    2. ``bounty_completion`` activities give ``bounty_points`` and
       ``completed_bounties``; ``donation_received`` gives
       ``donation_points``.
    3. Whatever is left of the total is ``activity_points``.
    4. Display fields and the ``rank`` cache are refreshed.
    5. Creators without an entry get one.

Running it twice in a row changes nothing the second time.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine, case, func, select

from bountera.database.engine import get_session
from bountera.database.models import Activity, ActivityType, Role, User
from bountera.engine.ranking import competition_ranks
from bountera.services.leaderboard_service import get_or_create_entry

logger = logging.getLogger(__name__)


def _activity_totals(session) -> dict[str, dict[str, int]]:
    """``email → {bounty_points, completed_bounties, donation_points}``."""
    is_bounty = Activity.activity_type == ActivityType.BOUNTY_COMPLETION.value
    is_donation = Activity.activity_type == ActivityType.DONATION_RECEIVED.value
    rows = session.execute(
        select(
            Activity.email,
            func.coalesce(func.sum(case((is_bounty, Activity.points), else_=0)), 0)
            .label("bounty_points"),
            func.coalesce(func.sum(case((is_bounty, 1), else_=0)), 0)
            .label("completed_bounties"),
            func.coalesce(func.sum(case((is_donation, Activity.points), else_=0)), 0)
            .label("donation_points"),
        )
        .where(Activity.activity_type.in_([
            ActivityType.BOUNTY_COMPLETION.value,
            ActivityType.DONATION_RECEIVED.value,
        ]))
        .group_by(Activity.email)
    ).all()
    return {
        row.email: {
            "bounty_points": int(row.bounty_points),
            "completed_bounties": int(row.completed_bounties),
            "donation_points": int(row.donation_points),
        }
        for row in rows
    }


def reconcile_leaderboard(engine: Engine, *, now: datetime | None = None) -> dict:
    """Recompute every creator's entry and correct any drift.

    Returns ``{"checked": N, "corrected": M, "corrections": [...]}``.
    """
    now = now or datetime.now(UTC)
    corrections: list[dict] = []

    with get_session(engine) as session:
        creators = session.scalars(
            select(User)
            .where(User.role == Role.CREATOR, User.username.is_not(None))
            .order_by(User.points.desc(), User.id)
        ).all()
        totals = _activity_totals(session)
        ranks = competition_ranks([u.points for u in creators])

        for user, rank in zip(creators, ranks):
            derived = totals.get(user.email, {})
            bounty = derived.get("bounty_points", 0)
            donation = derived.get("donation_points", 0)
            expected = {
                "total_points": user.points,
                "bounty_points": bounty,
                "activity_points": max(user.points - bounty - donation, 0),
                "donation_points": donation,
                "completed_bounties": derived.get("completed_bounties", 0),
                "rank": rank,
                "username": user.username,
                "name": user.name or "",
                "avatar": user.avatar or "",
                "email": user.email,
            }

            entry = get_or_create_entry(session, user)
            drift = {
                field: {"stored": getattr(entry, field), "actual": value}
                for field, value in expected.items()
                if getattr(entry, field) != value
            }
            if not drift:
                continue

            for field, value in expected.items():
                setattr(entry, field, value)
            entry.last_updated = now
            # rank-only moves are routine; only report counter/display drift
            reported = {k: v for k, v in drift.items() if k != "rank"}
            if reported:
                corrections.append({"user_id": user.id, "email": user.email, "drift": reported})

    checked = len(creators)
    if corrections:
        logger.warning(
            "Leaderboard reconciliation: corrected %d/%d entries: %s",
            len(corrections), checked, corrections,
        )
    else:
        logger.info("Leaderboard reconciliation: all %d entries match", checked)

    return {
        "checked": checked,
        "corrected": len(corrections),
        "corrections": corrections,
        "timestamp": now.isoformat(),
    }
