"""
bountera.api.routes.admin — Admin maintenance endpoints (JWT‑protected)
========================================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from bountera.api.deps import get_current_admin, get_engine
from bountera.api.errors import ok
from bountera.services.reconciliation_service import reconcile_leaderboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/leaderboard/reconcile")
def reconcile(admin: dict = Depends(get_current_admin), engine=Depends(get_engine)):
    """Rebuild leaderboard entries from users and activities."""
    logger.info("Leaderboard reconciliation requested by %s", admin.get("sub"))
    return ok(reconcile_leaderboard(engine))
