"""
bountera.api.routes.points — Point awards, daily login and rank
================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from bountera.api.deps import get_config, get_engine
from bountera.api.errors import ok
from bountera.config import BounteraConfig
from bountera.services import points_service, rank_service

router = APIRouter(prefix="/points", tags=["points"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
# Fields are optional here so missing values reach the services, which
# answer with a specific "<field> is required" message.
class PointsAward(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    type: str | None = None
    activity_type: str | None = Field(None, alias="activityType")
    points: int | None = None
    description: str | None = None
    context_id: str | None = Field(None, alias="contextId")
    bounty_id: str | None = Field(None, alias="bountyId")


class ActionAward(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    action: str | None = None
    title: str = ""
    context_id: str | None = Field(None, alias="contextId")
    amount: float | None = None


class DailyLogin(BaseModel):
    email: str | None = None


# ---------------------------------------------------------------------------
# POST /points
# ---------------------------------------------------------------------------
@router.post("")
def award_points(body: PointsAward, engine=Depends(get_engine)):
    """Award an arbitrary positive amount for one activity."""
    result = points_service.award_points(
        engine,
        body.email,
        body.type or body.activity_type,
        body.points,
        body.description,
        body.context_id or body.bounty_id,
    )
    return ok(result.to_dict())


# ---------------------------------------------------------------------------
# POST /points/award
# ---------------------------------------------------------------------------
@router.post("/award")
def award_action(body: ActionAward, engine=Depends(get_engine)):
    """Award the standard amount for a named action."""
    result = points_service.award_action(
        engine,
        body.email,
        body.action,
        title=body.title,
        context_id=body.context_id,
        amount=body.amount,
    )
    return ok(result.to_dict())


# ---------------------------------------------------------------------------
# POST /points/daily-login
# ---------------------------------------------------------------------------
@router.post("/daily-login")
def daily_login(
    body: DailyLogin,
    engine=Depends(get_engine),
    cfg: BounteraConfig = Depends(get_config),
):
    """Claim today's login point.  A repeat claim is a normal 200 answer."""
    result = points_service.award_daily_login(
        engine, body.email, bonus_enabled=cfg.retroactive_bonus_enabled
    )
    if not result.claimed:
        return {"success": False, "message": result.message}
    return ok(result.to_dict(), message=result.message)


# ---------------------------------------------------------------------------
# GET /points?email=
# ---------------------------------------------------------------------------
@router.get("")
def get_points(email: str | None = Query(None), engine=Depends(get_engine)):
    """Current points and live competition rank."""
    return ok(rank_service.get_rank(engine, email).to_dict())
