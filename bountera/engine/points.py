"""
bountera.engine.points — Point Values & Award Rules
====================================================

Pure rules for the points pipeline.  No DB I/O happens here; the services
in :mod:`bountera.services.points_service` feed these functions the user's
current state and apply the outcome with atomic SQL updates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from bountera.database.models import ActivityType, Role
from bountera.errors import ValidationError, require

__all__ = [
    "AwardResult",
    "DailyLoginResult",
    "DAILY_LOGIN_POINTS",
    "POINT_VALUES",
    "RETROACTIVE_BONUS_POINTS",
    "daily_login_message",
    "donation_points",
    "is_retroactive_bonus_eligible",
    "leaderboard_delta",
    "parse_activity_type",
    "points_for",
    "validate_award",
]

# ---------------------------------------------------------------------------
# Point values per activity type
# ---------------------------------------------------------------------------
POINT_VALUES: dict[ActivityType, int] = {
    ActivityType.DAILY_LOGIN: 1,
    ActivityType.PROFILE_COMPLETION: 10,
    ActivityType.BOUNTY_APPLICATION: 5,
    ActivityType.BOUNTY_COMPLETION: 100,
    ActivityType.DONATION_RECEIVED: 0,  # varies, see donation_points()
    ActivityType.PROFILE_UPDATE: 0,
    ActivityType.BOUNTY_POSTED: 0,
}

DAILY_LOGIN_POINTS = POINT_VALUES[ActivityType.DAILY_LOGIN]
RETROACTIVE_BONUS_POINTS = POINT_VALUES[ActivityType.PROFILE_COMPLETION]

DONATION_POINT_RATE = 0.1
DONATION_POINT_CAP = 50


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AwardResult:
    """Outcome of a single award."""

    points: int
    total_points: int

    def to_dict(self) -> dict[str, int]:
        return {"points": self.points, "totalPoints": self.total_points}


@dataclass(frozen=True, slots=True)
class DailyLoginResult:
    """Outcome of a daily-login claim.

    ``claimed`` is False when neither the daily point nor the retroactive
    bonus applied, i.e. nothing was written.
    """

    claimed: bool
    daily_points: int
    bonus_points: int
    total_points: int
    message: str

    @property
    def awarded(self) -> int:
        return self.daily_points + self.bonus_points

    def to_dict(self) -> dict[str, int]:
        return {
            "dailyPoints": self.daily_points,
            "bonusPoints": self.bonus_points,
            "points": self.awarded,
            "totalPoints": self.total_points,
        }


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def parse_activity_type(value: Any) -> ActivityType:
    """Return the :class:`ActivityType` named by *value* or raise 400."""
    require(value, "activity type")
    try:
        return ActivityType(str(value).strip())
    except ValueError:
        raise ValidationError(
            f"Invalid activity type: {value}",
            {"allowed": [t.value for t in ActivityType]},
        ) from None


def points_for(activity_type: ActivityType) -> int:
    """Standard award for *activity_type* (0 when it carries no points)."""
    return POINT_VALUES.get(activity_type, 0)


def donation_points(amount: float) -> int:
    """10% of the donated amount, capped at 50, at least 1 for any gift."""
    if amount is None or not math.isfinite(amount) or amount <= 0:
        return 0
    return max(1, math.floor(min(amount * DONATION_POINT_RATE, DONATION_POINT_CAP)))


def validate_award(
    email: str | None,
    activity_type: Any,
    points: Any,
    description: str | None,
) -> ActivityType:
    """Check the inputs of a normal award before anything is written."""
    require(email, "email")
    kind = parse_activity_type(activity_type)
    require(description, "description")
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError("points must be an integer", {"field": "points"})
    if points <= 0:
        raise ValidationError("points must be positive", {"field": "points"})
    return kind


# ---------------------------------------------------------------------------
# Daily login
# ---------------------------------------------------------------------------
def is_retroactive_bonus_eligible(
    role: str | None, username: str | None, points: int
) -> bool:
    """Creators with a username who still sit at 0 points missed the
    profile-completion award; they get it on their next daily login."""
    return role == Role.CREATOR and bool(username) and points == 0


def daily_login_message(daily_points: int, bonus_points: int) -> str:
    if bonus_points and daily_points:
        return (
            f"Daily login bonus claimed! + {bonus_points} "
            "retroactive profile points awarded!"
        )
    if bonus_points:
        return f"{bonus_points} retroactive profile points awarded!"
    if daily_points:
        return "Daily login bonus claimed!"
    return "Daily login already claimed today"


# ---------------------------------------------------------------------------
# Leaderboard projection
# ---------------------------------------------------------------------------
def leaderboard_delta(activity_type: ActivityType, points: int) -> dict[str, int]:
    """Counter increments a single award applies to a leaderboard entry."""
    delta = {"total_points": points}
    if activity_type == ActivityType.BOUNTY_COMPLETION:
        delta["bounty_points"] = points
        delta["completed_bounties"] = 1
    elif activity_type == ActivityType.DONATION_RECEIVED:
        delta["donation_points"] = points
    else:
        delta["activity_points"] = points
    return delta
