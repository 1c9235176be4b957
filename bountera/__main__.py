"""
bountera.__main__ — Entry point for ``python -m bountera``
===========================================================

Wiring:
1. Load .env (secrets, DATABASE_URL).
2. Load config.yaml (port, page sizes).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Serve the API with uvicorn (blocking).
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from bountera.config import load_config
from bountera.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("bountera")


def main() -> None:
    """Bootstrap and run the Bountera API."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Soft configuration.
    cfg = load_config()
    logger.info("Config loaded — %s: %s", cfg.app_name, cfg.tagline)

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)
    engine.dispose()

    # 4. Serve.
    logger.info("Starting Bountera API on port %d…", cfg.api_port)
    uvicorn.run("bountera.api.main:app", host="0.0.0.0", port=cfg.api_port, log_config=None)


if __name__ == "__main__":
    main()
