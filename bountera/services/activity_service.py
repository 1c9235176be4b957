"""
bountera.services.activity_service — Activity Journal
======================================================

Append-only.  There is no update or delete path for activity rows.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bountera.constants import (
    DEFAULT_ACTIVITY_LIMIT,
    MAX_ACTIVITY_LIMIT,
    clamp_limit,
    local_today,
    normalize_email,
)
from bountera.database.engine import get_session
from bountera.database.models import Activity, ActivityType
from bountera.engine.points import parse_activity_type
from bountera.errors import ConflictError, ValidationError, require

logger = logging.getLogger(__name__)


def record_activity(
    engine: Engine,
    email: str,
    activity_type: ActivityType | str,
    description: str | None = "",
    metadata: dict[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> Activity:
    """Insert one activity row and return it.

    A ``daily_login`` recorded here is subject to the same once-per-day
    constraint as the points engine; a second one raises
    :class:`ConflictError`.
    """
    require(email, "email")
    kind = parse_activity_type(activity_type)
    if metadata is not None and not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object", {"field": "metadata"})

    now = now or datetime.now(UTC)
    activity = Activity(
        email=normalize_email(email),
        activity_type=kind.value,
        description=(description or "").strip(),
        points=0,
        metadata_=metadata or {},
        activity_day=local_today(now) if kind == ActivityType.DAILY_LOGIN else None,
        created_at=now,
    )
    try:
        with get_session(engine) as session:
            session.add(activity)
    except IntegrityError:
        if kind != ActivityType.DAILY_LOGIN:
            raise
        raise ConflictError(
            "Daily login already recorded today", {"email": email}
        ) from None

    logger.debug("Activity logged for %s: %s", activity.email, kind)
    return activity


def list_activities(
    engine: Engine,
    email: str | None = None,
    limit: int | None = DEFAULT_ACTIVITY_LIMIT,
    offset: int = 0,
) -> list[Activity]:
    """Most recent activities first, optionally for a single user."""
    limit = clamp_limit(limit, DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_LIMIT)
    query = select(Activity).order_by(Activity.created_at.desc(), Activity.id.desc())
    if email:
        query = query.where(Activity.email == normalize_email(email))
    query = query.offset(max(offset, 0)).limit(limit)

    with Session(engine) as session:
        rows = session.scalars(query).all()
        session.expunge_all()
    return list(rows)


def activity_stats(engine: Engine, email: str, recent: int = 5) -> dict[str, Any]:
    """Per-type counts, points earned and the latest few activities."""
    require(email, "email")
    email = normalize_email(email)
    with Session(engine) as session:
        rows = session.execute(
            select(
                Activity.activity_type,
                func.count().label("cnt"),
                func.coalesce(func.sum(Activity.points), 0).label("pts"),
            )
            .where(Activity.email == email)
            .group_by(Activity.activity_type)
        ).all()

    by_type = {row.activity_type: row.cnt for row in rows}
    return {
        "total_activities": sum(by_type.values()),
        "activities_by_type": by_type,
        "total_points": sum(row.pts for row in rows),
        "recent_activities": list_activities(engine, email, limit=recent),
    }
