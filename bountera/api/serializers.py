"""
bountera.api.serializers — ORM rows → camelCase JSON
=====================================================
"""

from __future__ import annotations

from datetime import datetime

from bountera.database.models import Activity, LeaderboardEntry, User


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def user_dict(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "username": u.username,
        "name": u.name,
        "avatar": u.avatar,
        "bio": u.bio,
        "role": u.role,
        "profileCompleted": bool(u.profile_completed),
        "points": u.points,
        "createdAt": _iso(u.created_at),
    }


def user_summary(u: User) -> dict:
    """The short form returned after a role change or a user check."""
    return {
        "email": u.email,
        "name": u.name,
        "role": u.role,
        "profileCompleted": bool(u.profile_completed),
    }


def activity_dict(a: Activity) -> dict:
    return {
        "id": a.id,
        "email": a.email,
        "activityType": a.activity_type,
        "description": a.description,
        "points": a.points,
        "metadata": a.metadata_ or {},
        "createdAt": _iso(a.created_at),
    }


def ranked_user_dict(u: User, rank: int) -> dict:
    return {
        "rank": rank,
        "userId": u.id,
        "username": u.username,
        "name": u.name,
        "avatar": u.avatar or "",
        "points": u.points,
    }


def entry_dict(e: LeaderboardEntry) -> dict:
    return {
        "userId": e.user_id,
        "username": e.username,
        "name": e.name,
        "avatar": e.avatar,
        "email": e.email,
        "totalPoints": e.total_points,
        "bountyPoints": e.bounty_points,
        "activityPoints": e.activity_points,
        "donationPoints": e.donation_points,
        "completedBounties": e.completed_bounties,
        "rank": e.rank,
        "lastUpdated": _iso(e.last_updated),
    }
