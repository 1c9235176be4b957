"""
bountera.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for non-secret settings (branding, port, page sizes,
the retroactive-bonus switch).  Secrets and connection strings stay in the
environment (``.env``): ``DATABASE_URL``, ``JWT_SECRET``,
``CORS_ALLOW_ORIGINS``.

Usage::

    from bountera.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.app_name)          # "Bountera"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class BounteraConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str
    tagline: str

    # API
    api_port: int

    # Points
    # Grants the one-off 10-point profile bonus to creators still at 0 points
    # on their next daily login.  Switch off once every account is repaired.
    retroactive_bonus_enabled: bool = True

    # Display
    activity_page_size: int = 10
    leaderboard_page_size: int = 50


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> BounteraConfig:
    """Read *path* and return a :class:`BounteraConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return BounteraConfig(
        app_name=raw["app_name"],
        tagline=raw["tagline"],
        api_port=int(raw["api_port"]),
        retroactive_bonus_enabled=bool(raw.get("retroactive_bonus_enabled", True)),
        activity_page_size=int(raw.get("activity_page_size", 10)),
        leaderboard_page_size=int(raw.get("leaderboard_page_size", 50)),
    )
