"""
bountera.constants — Shared Constants & Helpers
================================================

Single source of truth for roles, page limits, the server-local day
boundary and username derivation.  Import from here instead of duplicating
in services and routes.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from bountera.database.models import Role

VALID_ROLES: frozenset[str] = frozenset(r.value for r in Role)

# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------
DEFAULT_ACTIVITY_LIMIT = 10
MAX_ACTIVITY_LIMIT = 100
DEFAULT_LEADERBOARD_LIMIT = 50
MAX_LEADERBOARD_LIMIT = 200


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    """Coerce a caller-supplied page size into ``1..maximum``."""
    if not limit or limit < 1:
        return default
    return min(limit, maximum)


# ---------------------------------------------------------------------------
# Day boundary — server-local midnight
# ---------------------------------------------------------------------------
def local_today(now: datetime | None = None) -> date:
    """Calendar day of *now* on the server clock.

    Aware datetimes are converted to local time first so a UTC timestamp
    just after midnight UTC still lands on the server's own calendar day.
    """
    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.astimezone()
    return now.date()


# ---------------------------------------------------------------------------
# Username derivation
# ---------------------------------------------------------------------------
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30


def normalize_email(email: str) -> str:
    return email.strip().lower()


def username_base(email: str) -> str:
    """Derive a username stem from the local part of *email*.

    ``"Jane.Doe+x@mail.com"`` → ``"janedoex"``.  Stems shorter than three
    characters are prefixed with ``user`` so the result is always valid.
    """
    local = email.split("@", 1)[0]
    base = _NON_ALNUM.sub("", local).lower()
    if len(base) < USERNAME_MIN_LENGTH:
        base = f"user{base}"
    return base[:USERNAME_MAX_LENGTH - 4]
