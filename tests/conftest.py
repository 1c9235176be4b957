"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of bountera.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine, update  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from bountera.config import BounteraConfig  # noqa: E402
from bountera.database.models import Base, User  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


TEST_CONFIG = BounteraConfig(
    app_name="Bountera",
    tagline="Where Talent Meets Opportunity",
    api_port=8000,
)


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Bountera tables.

    JSONB columns are transparently mapped to TEXT for SQLite compatibility.
    Uses StaticPool so the TestClient's worker threads share the same
    in-memory database.
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


def make_user(
    engine: Engine,
    email: str,
    *,
    username: str | None = None,
    role: str | None = None,
    points: int = 0,
    profile_completed: bool = False,
) -> int:
    """Insert a user row directly and return its id."""
    with Session(engine) as session:
        user = User(
            email=email,
            username=username,
            name=username or "",
            role=role,
            points=points,
            profile_completed=profile_completed,
        )
        session.add(user)
        session.commit()
        return user.id


def set_points(engine: Engine, email: str, points: int) -> None:
    with Session(engine) as session:
        session.execute(update(User).where(User.email == email).values(points=points))
        session.commit()


@pytest.fixture
def admin_token():
    """Generate a valid admin JWT for use in API integration tests."""
    return make_admin_token()


def make_admin_token(sub: str = "99999", username: str = "FixtureAdmin") -> str:
    """Create an admin JWT.  Usable as both a fixture and a factory function."""
    import jwt

    from bountera.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode(
        {"sub": sub, "username": username, "is_admin": True},
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


@pytest.fixture
def client(db_engine: Engine):
    """FastAPI TestClient wired to the in-memory engine and a fixed config."""
    from fastapi.testclient import TestClient

    from bountera.api.deps import get_config, get_engine
    from bountera.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: TEST_CONFIG
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
