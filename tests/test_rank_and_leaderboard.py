"""
tests/test_rank_and_leaderboard.py — Live Rank & Leaderboard Listing
=====================================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from conftest import make_user
from bountera.database.models import LeaderboardEntry
from bountera.errors import NotFoundError, ValidationError
from bountera.services import leaderboard_service, points_service, rank_service


@pytest.fixture
def engine(db_engine):
    return db_engine


# ===========================================================================
# get_rank
# ===========================================================================
class TestGetRank:
    def test_ties_share_rank(self, engine):
        make_user(engine, "a@x.com", points=100)
        make_user(engine, "b@x.com", points=100)
        make_user(engine, "c@x.com", points=50)

        assert rank_service.get_rank(engine, "a@x.com").rank == 1
        assert rank_service.get_rank(engine, "b@x.com").rank == 1
        assert rank_service.get_rank(engine, "c@x.com").rank == 3

    def test_unknown_user_is_zero_zero(self, engine):
        result = rank_service.get_rank(engine, "ghost@x.com")
        assert result.points == 0
        assert result.rank == 0
        assert result.to_dict() == {"points": 0, "rank": 0, "email": "ghost@x.com"}

    def test_rank_follows_awards(self, engine):
        make_user(engine, "lead@x.com", points=20)
        make_user(engine, "chase@x.com", points=15)
        assert rank_service.get_rank(engine, "chase@x.com").rank == 2

        points_service.award_bounty_application(engine, "chase@x.com")
        assert rank_service.get_rank(engine, "chase@x.com").rank == 1

    def test_stored_rank_is_ignored(self, engine):
        uid = make_user(engine, "cr@x.com", username="cr", role="creator", points=5)
        leaderboard_service.ensure_leaderboard_entry(engine, uid)
        with Session(engine) as session:
            entry = session.scalar(select(LeaderboardEntry).where(LeaderboardEntry.user_id == uid))
            entry.rank = 99
            session.commit()
        assert rank_service.get_rank(engine, "cr@x.com").rank == 1

    def test_requires_email(self, engine):
        with pytest.raises(ValidationError):
            rank_service.get_rank(engine, " ")


# ===========================================================================
# list_leaderboard
# ===========================================================================
class TestListLeaderboard:
    def test_only_creators_with_usernames(self, engine):
        make_user(engine, "c1@x.com", username="one", role="creator", points=30)
        make_user(engine, "c2@x.com", username="two", role="creator", points=30)
        make_user(engine, "c3@x.com", username="three", role="creator", points=10)
        make_user(engine, "p@x.com", username="poster", role="bounty_poster", points=500)
        make_user(engine, "anon@x.com", role="creator", points=400)

        rows = leaderboard_service.list_leaderboard(engine)

        assert [(u.username, rank) for u, rank in rows] == [
            ("one", 1), ("two", 1), ("three", 3),
        ]

    def test_limit(self, engine):
        for i in range(5):
            make_user(engine, f"c{i}@x.com", username=f"c{i}", role="creator", points=i)
        rows = leaderboard_service.list_leaderboard(engine, limit=2)
        assert [u.points for u, _ in rows] == [4, 3]


# ===========================================================================
# Entries
# ===========================================================================
class TestLeaderboardEntries:
    def test_ensure_creates_zeroed_entry_once(self, engine):
        uid = make_user(engine, "e@x.com", username="ee", role="creator")
        assert leaderboard_service.ensure_leaderboard_entry(engine, uid) is True
        assert leaderboard_service.ensure_leaderboard_entry(engine, uid) is True

        with Session(engine) as session:
            entries = session.scalars(
                select(LeaderboardEntry).where(LeaderboardEntry.user_id == uid)
            ).all()
        assert len(entries) == 1
        assert entries[0].total_points == 0
        assert entries[0].username == "ee"

    def test_ensure_skips_bounty_posters(self, engine):
        uid = make_user(engine, "bp@x.com", username="bp", role="bounty_poster")
        assert leaderboard_service.ensure_leaderboard_entry(engine, uid) is False

    def test_upsert_is_noop_for_non_creators(self, engine):
        uid = make_user(engine, "bp2@x.com", username="bp2", role="bounty_poster")
        assert leaderboard_service.upsert_leaderboard_entry(
            engine, uid, 100, "bounty_completion"
        ) is False

    def test_get_entry(self, engine):
        make_user(engine, "g@x.com", username="gg", role="creator")
        points_service.award_bounty_completion(engine, "g@x.com", "Logo")
        entry = leaderboard_service.get_leaderboard_entry(engine, "g@x.com")
        assert entry.total_points == 100
        assert entry.completed_bounties == 1

    def test_get_entry_missing(self, engine):
        with pytest.raises(NotFoundError, match="Leaderboard entry not found"):
            leaderboard_service.get_leaderboard_entry(engine, "nobody@x.com")
