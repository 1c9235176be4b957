"""
bountera.api.routes.leaderboard — Public leaderboard
=====================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from bountera.api.deps import get_config, get_engine
from bountera.api.errors import ok
from bountera.api.serializers import entry_dict, ranked_user_dict
from bountera.config import BounteraConfig
from bountera.services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("")
def get_leaderboard(
    limit: int | None = Query(None),
    engine=Depends(get_engine),
    cfg: BounteraConfig = Depends(get_config),
):
    """Top creators by points with competition ranks."""
    rows = leaderboard_service.list_leaderboard(
        engine, limit or cfg.leaderboard_page_size
    )
    return ok([ranked_user_dict(user, rank) for user, rank in rows])


@router.get("/entry")
def get_entry(email: str | None = Query(None), engine=Depends(get_engine)):
    """The stored leaderboard projection for one creator."""
    return ok(entry_dict(leaderboard_service.get_leaderboard_entry(engine, email)))
