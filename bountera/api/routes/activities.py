"""
bountera.api.routes.activities — Activity journal endpoints
============================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from bountera.api.deps import get_config, get_engine
from bountera.api.errors import ok
from bountera.api.serializers import activity_dict
from bountera.config import BounteraConfig
from bountera.services import activity_service

router = APIRouter(prefix="/activities", tags=["activities"])


class ActivityCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    activity_type: str | None = Field(None, alias="activityType")
    description: str | None = ""
    metadata: Any = None


@router.get("")
def list_activities(
    email: str | None = Query(None),
    limit: int | None = Query(None),
    offset: int = Query(0, ge=0),
    engine=Depends(get_engine),
    cfg: BounteraConfig = Depends(get_config),
):
    """Newest first; filtered to one user when ``email`` is given."""
    rows = activity_service.list_activities(
        engine, email, limit=limit or cfg.activity_page_size, offset=offset
    )
    return ok([activity_dict(a) for a in rows])


@router.post("", status_code=201)
def create_activity(body: ActivityCreate, engine=Depends(get_engine)):
    activity = activity_service.record_activity(
        engine, body.email, body.activity_type, body.description, body.metadata
    )
    return ok(activity_dict(activity))


@router.get("/stats")
def activity_stats(email: str | None = Query(None), engine=Depends(get_engine)):
    stats = activity_service.activity_stats(engine, email)
    return ok({
        "totalActivities": stats["total_activities"],
        "activitiesByType": stats["activities_by_type"],
        "totalPoints": stats["total_points"],
        "recentActivities": [activity_dict(a) for a in stats["recent_activities"]],
    })
