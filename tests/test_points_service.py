"""
tests/test_points_service.py — Points Engine Integration Tests
===============================================================
Service-level tests for points_service award functions: atomic increments,
activity journaling, validation-before-write and the best-effort
leaderboard projection.

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from conftest import make_user
from bountera.database.models import Activity, LeaderboardEntry, User
from bountera.errors import NotFoundError, ValidationError
from bountera.services import leaderboard_service, points_service


@pytest.fixture
def engine(db_engine):
    """Re-use the shared conftest db_engine (SQLite, StaticPool)."""
    return db_engine


def _activities(engine, email: str) -> list[Activity]:
    with Session(engine) as session:
        return list(session.scalars(
            select(Activity).where(Activity.email == email).order_by(Activity.id)
        ).all())


def _entry(engine, user_id: int) -> LeaderboardEntry | None:
    with Session(engine) as session:
        return session.scalar(
            select(LeaderboardEntry).where(LeaderboardEntry.user_id == user_id)
        )


# ===========================================================================
# award_points
# ===========================================================================
class TestAwardPoints:
    def test_increments_points_and_journals_activity(self, engine):
        make_user(engine, "dev@x.com", username="dev", role="bounty_poster", points=7)

        result = points_service.award_points(
            engine, "dev@x.com", "bounty_application", 5, "Applied to bounty: Logo",
            context_id="b-42",
        )

        assert result.points == 5
        assert result.total_points == 12
        assert points_service.get_user_points(engine, "dev@x.com") == 12

        [activity] = _activities(engine, "dev@x.com")
        assert activity.activity_type == "bounty_application"
        assert activity.points == 5
        assert activity.description == "Applied to bounty: Logo"
        assert activity.metadata_ == {"context_id": "b-42"}

    def test_email_is_normalized(self, engine):
        make_user(engine, "mixed@x.com", points=0)
        result = points_service.award_points(
            engine, "  Mixed@X.com ", "bounty_application", 5, "Applied",
        )
        assert result.total_points == 5

    def test_unknown_user_is_not_found(self, engine):
        with pytest.raises(NotFoundError, match="User not found"):
            points_service.award_points(engine, "ghost@x.com", "bounty_application", 5, "x")
        assert _activities(engine, "ghost@x.com") == []

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"email": ""}, "email is required"),
            ({"activity_type": "nope"}, "Invalid activity type"),
            ({"points": 0}, "positive"),
            ({"points": -3}, "positive"),
            ({"description": ""}, "description is required"),
        ],
    )
    def test_invalid_input_writes_nothing(self, engine, kwargs, message):
        make_user(engine, "v@x.com", points=4)
        args = {
            "email": "v@x.com",
            "activity_type": "bounty_application",
            "points": 5,
            "description": "Applied",
        }
        args.update(kwargs)

        with pytest.raises(ValidationError, match=message):
            points_service.award_points(engine, **args)

        assert points_service.get_user_points(engine, "v@x.com") == 4
        assert _activities(engine, "v@x.com") == []

    def test_repeated_awards_accumulate(self, engine):
        make_user(engine, "r@x.com")
        for _ in range(4):
            points_service.award_points(engine, "r@x.com", "bounty_application", 5, "Applied")
        assert points_service.get_user_points(engine, "r@x.com") == 20
        assert len(_activities(engine, "r@x.com")) == 4


class TestGetUserPoints:
    def test_unknown_user_has_zero(self, engine):
        assert points_service.get_user_points(engine, "nobody@x.com") == 0

    def test_requires_email(self, engine):
        with pytest.raises(ValidationError):
            points_service.get_user_points(engine, "")


# ===========================================================================
# Leaderboard side effects
# ===========================================================================
class TestLeaderboardProjection:
    def test_bounty_completion_updates_creator_entry(self, engine):
        uid = make_user(engine, "c@x.com", username="cre", role="creator", points=10)

        result = points_service.award_bounty_completion(engine, "c@x.com", "Logo design", "b-1")

        assert result.points == 100
        assert result.total_points == 110
        entry = _entry(engine, uid)
        assert entry is not None
        assert entry.total_points == 100
        assert entry.bounty_points == 100
        assert entry.completed_bounties == 1
        assert entry.activity_points == 0

    def test_bounty_poster_never_gets_an_entry(self, engine):
        uid = make_user(engine, "p@x.com", username="poster", role="bounty_poster")
        points_service.award_bounty_completion(engine, "p@x.com", "Logo design")
        assert _entry(engine, uid) is None
        assert points_service.get_user_points(engine, "p@x.com") == 100

    def test_non_bounty_award_goes_to_activity_points(self, engine):
        uid = make_user(engine, "c2@x.com", username="cre2", role="creator")
        points_service.award_bounty_application(engine, "c2@x.com", "Logo")
        entry = _entry(engine, uid)
        assert entry.activity_points == 5
        assert entry.total_points == 5
        assert entry.completed_bounties == 0

    def test_leaderboard_failure_does_not_fail_award(self, engine, caplog):
        make_user(engine, "c3@x.com", username="cre3", role="creator")
        LeaderboardEntry.__table__.drop(engine)

        result = points_service.award_bounty_completion(engine, "c3@x.com", "Logo")

        assert result.total_points == 100
        assert points_service.get_user_points(engine, "c3@x.com") == 100
        assert len(_activities(engine, "c3@x.com")) == 1
        assert "Leaderboard update failed" in caplog.text

    def test_unexpected_leaderboard_error_does_not_fail_award(self, engine, monkeypatch):
        make_user(engine, "c4@x.com", username="cre4", role="creator")

        def _boom(*args, **kwargs):
            raise RuntimeError("projection bug")

        monkeypatch.setattr(leaderboard_service, "leaderboard_delta", _boom)

        result = points_service.award_bounty_completion(engine, "c4@x.com", "Logo")

        assert result.total_points == 100
        assert points_service.get_user_points(engine, "c4@x.com") == 100


# ===========================================================================
# Named awards
# ===========================================================================
class TestNamedAwards:
    def test_bounty_completion_description_and_metadata(self, engine):
        make_user(engine, "n@x.com")
        points_service.award_bounty_completion(engine, "n@x.com", "Landing page", "b-9")
        [activity] = _activities(engine, "n@x.com")
        assert activity.description == "Completed bounty: Landing page"
        assert activity.metadata_ == {"bounty_title": "Landing page", "context_id": "b-9"}

    def test_bounty_completion_without_title(self, engine):
        make_user(engine, "n2@x.com")
        points_service.award_bounty_completion(engine, "n2@x.com")
        [activity] = _activities(engine, "n2@x.com")
        assert activity.description == "Completed bounty: Bounty"

    def test_profile_completion(self, engine):
        make_user(engine, "pc@x.com")
        result = points_service.award_profile_completion(engine, "pc@x.com")
        assert result.points == 10
        [activity] = _activities(engine, "pc@x.com")
        assert activity.description == "Profile completion bonus"

    def test_donation_received(self, engine):
        uid = make_user(engine, "d@x.com", username="donee", role="creator")
        result = points_service.award_donation_received(engine, "d@x.com", 250, "don-1")
        assert result.points == 25
        entry = _entry(engine, uid)
        assert entry.donation_points == 25
        assert entry.total_points == 25

    def test_donation_must_be_positive(self, engine):
        make_user(engine, "d2@x.com")
        with pytest.raises(ValidationError, match="amount"):
            points_service.award_donation_received(engine, "d2@x.com", 0)

    @pytest.mark.parametrize("amount", [float("nan"), float("inf")])
    def test_donation_must_be_finite(self, engine, amount):
        make_user(engine, "d3@x.com")
        with pytest.raises(ValidationError, match="amount must be a positive number"):
            points_service.award_donation_received(engine, "d3@x.com", amount)
        assert points_service.get_user_points(engine, "d3@x.com") == 0
        assert _activities(engine, "d3@x.com") == []

    def test_award_action_dispatch(self, engine):
        make_user(engine, "act@x.com")
        result = points_service.award_action(
            engine, "act@x.com", "bounty_application", title="Logo", context_id="b-3"
        )
        assert result.points == 5

    def test_award_action_rejects_unpriced_types(self, engine):
        make_user(engine, "act2@x.com")
        with pytest.raises(ValidationError, match="No standard award"):
            points_service.award_action(engine, "act2@x.com", "profile_update")

    def test_points_never_negative(self, engine):
        make_user(engine, "nn@x.com")
        points_service.award_bounty_application(engine, "nn@x.com")
        with Session(engine) as session:
            lowest = session.scalar(select(func.min(User.points)))
        assert lowest >= 0
