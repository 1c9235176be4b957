"""
bountera.api.routes.users — Sign-in, role selection & profile
==============================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from bountera.api.deps import get_engine
from bountera.api.errors import ok
from bountera.api.serializers import user_dict, user_summary
from bountera.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class UserSignIn(BaseModel):
    email: str | None = None
    name: str | None = None
    avatar: str | None = None


class RoleUpdate(BaseModel):
    email: str | None = None
    role: str | None = None


class ProfileUpdate(BaseModel):
    email: str | None = None
    name: str | None = None
    bio: str | None = None
    avatar: str | None = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@router.post("")
def sign_in(body: UserSignIn, response: Response, engine=Depends(get_engine)):
    """Return the account for ``email``, creating it on first sign-in."""
    user, created = user_service.get_or_create_user(
        engine, body.email, name=body.name, avatar=body.avatar
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ok(user_dict(user), created=created)


@router.get("")
def get_user(email: str | None = Query(None), engine=Depends(get_engine)):
    return ok(user_dict(user_service.get_user(engine, email)))


@router.get("/check")
def check_user(email: str | None = Query(None), engine=Depends(get_engine)):
    """Whether the account exists, without creating it."""
    user = user_service.check_user(engine, email)
    return ok({
        "exists": user is not None,
        "user": user_summary(user) if user is not None else None,
    })


@router.put("/role")
def update_role(body: RoleUpdate, engine=Depends(get_engine)):
    user = user_service.update_role(engine, body.email, body.role)
    return ok(user_summary(user))


@router.put("/profile")
def update_profile(body: ProfileUpdate, engine=Depends(get_engine)):
    """Save profile fields; the first completion earns points."""
    user, award = user_service.complete_profile(
        engine, body.email, name=body.name, bio=body.bio, avatar=body.avatar
    )
    return ok(user_dict(user), pointsAwarded=award.points if award else 0)
