"""
Bountera — Points, Leaderboard & Activity Backend
==================================================
Rewards marketplace participation (bounty work, daily logins, profile
completion, donations) with points, keeps an append-only activity journal
and a denormalized creator leaderboard, and exposes it all over a JSON API.

Package layout::

    bountera/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Limits, day boundaries, email/username helpers
    ├── errors.py          # Domain exceptions with HTTP status codes
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   └── models.py      # users, activities, leaderboard_entries
    ├── engine/
    │   ├── points.py      # Point values, award validation, bonus rules
    │   └── ranking.py     # Competition ranking
    ├── services/
    │   ├── points_service.py          # Atomic awards + daily login
    │   ├── leaderboard_service.py     # Best-effort projection upserts
    │   ├── rank_service.py            # Live rank lookup
    │   ├── activity_service.py        # Activity journal queries
    │   ├── user_service.py            # Sign-in, role, profile
    │   └── reconciliation_service.py  # Leaderboard drift repair
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine/config/session + admin JWT guard
        ├── errors.py      # Envelope + exception handlers
        └── routes/        # points, activities, users, leaderboard, admin
"""

__version__ = "0.1.0"
