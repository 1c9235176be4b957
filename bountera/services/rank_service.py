"""
bountera.services.rank_service — Live Rank Calculation
=======================================================

Rank is recomputed on every call from ``users.points``; the ``rank`` column
on leaderboard entries is a display cache and is never trusted here.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from bountera.constants import normalize_email
from bountera.database.models import User
from bountera.engine.ranking import rank_from_count
from bountera.errors import require


@dataclass(frozen=True, slots=True)
class RankResult:
    email: str
    points: int
    rank: int

    def to_dict(self) -> dict:
        return {"points": self.points, "rank": self.rank, "email": self.email}


def get_rank(engine: Engine, email: str) -> RankResult:
    """Points and competition rank for *email*.

    Unknown users get ``points=0, rank=0``.
    """
    require(email, "email")
    email = normalize_email(email)
    with Session(engine) as session:
        points = session.scalar(select(User.points).where(User.email == email))
        if points is None:
            return RankResult(email=email, points=0, rank=0)

        higher = session.scalar(
            select(func.count()).select_from(User).where(User.points > points)
        ) or 0

    return RankResult(email=email, points=points, rank=rank_from_count(higher))
