"""
bountera.services.user_service — Account Lifecycle
===================================================

The slice of account management the points system relies on: first
sign-in, role selection and profile completion.  Identity-provider
integration lives outside this package; callers hand us an already
verified email.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bountera.constants import VALID_ROLES, normalize_email, username_base
from bountera.database.engine import get_session
from bountera.database.models import Activity, ActivityType, Role, User
from bountera.engine.points import AwardResult
from bountera.errors import ConflictError, ValidationError, require
from bountera.services.leaderboard_service import ensure_leaderboard_entry
from bountera.services.points_service import award_profile_completion, find_user

logger = logging.getLogger(__name__)

_CREATE_ATTEMPTS = 3


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def get_user(engine: Engine, email: str) -> User:
    """Fetch a user by email.  Raises :class:`NotFoundError`."""
    require(email, "email")
    with Session(engine) as session:
        user = find_user(session, email)
        session.expunge(user)
        return user


def check_user(engine: Engine, email: str) -> User | None:
    """Return the user for *email*, or ``None`` if they never signed in."""
    require(email, "email")
    with Session(engine) as session:
        user = session.scalar(select(User).where(User.email == normalize_email(email)))
        if user is not None:
            session.expunge(user)
        return user


# ---------------------------------------------------------------------------
# First sign-in
# ---------------------------------------------------------------------------
def _unique_username(session: Session, email: str) -> str:
    """``base``, then ``base1``, ``base2``, … until one is free."""
    base = username_base(email)
    taken = set(session.scalars(
        select(User.username).where(User.username.like(f"{base}%"))
    ).all())
    candidate, counter = base, 1
    while candidate in taken:
        candidate = f"{base}{counter}"
        counter += 1
    return candidate


def get_or_create_user(
    engine: Engine,
    email: str,
    name: str | None = None,
    avatar: str | None = None,
) -> tuple[User, bool]:
    """Fetch the user for *email*, creating them on first sign-in.

    Returns ``(user, created)``.
    """
    require(email, "email")
    email = normalize_email(email)
    if "@" not in email:
        raise ValidationError("email is invalid", {"field": "email"})

    for attempt in range(1, _CREATE_ATTEMPTS + 1):
        try:
            with get_session(engine) as session:
                user = session.scalar(select(User).where(User.email == email))
                if user is not None:
                    return user, False

                username = _unique_username(session, email)
                user = User(
                    email=email,
                    username=username,
                    name=(name or "").strip() or username,
                    avatar=avatar,
                    points=0,
                )
                session.add(user)
                session.flush()
        except IntegrityError:
            # Either the same email signed in concurrently, or another
            # account grabbed the username we picked.
            existing = check_user(engine, email)
            if existing is not None:
                logger.info("Concurrent sign-in for %s; using the existing account", email)
                return existing, False
            logger.info(
                "Username collision creating %s (attempt %d/%d)",
                email, attempt, _CREATE_ATTEMPTS,
            )
            continue

        logger.info("Created user %s (%s)", email, user.username)
        return user, True

    raise ConflictError("Could not allocate a username", {"email": email})


# ---------------------------------------------------------------------------
# Role selection
# ---------------------------------------------------------------------------
def update_role(engine: Engine, email: str, role: str) -> User:
    """Set the user's role.  Creators get a leaderboard entry (best-effort)."""
    require(email, "email")
    require(role, "role")
    if role not in VALID_ROLES:
        raise ValidationError("Invalid role", {"allowed": sorted(VALID_ROLES)})

    with get_session(engine) as session:
        user = find_user(session, email)
        user.role = role

    logger.info("User %s is now %s", user.email, role)

    if role == Role.CREATOR:
        ensure_leaderboard_entry(engine, user.id)
    return user


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------
def complete_profile(
    engine: Engine,
    email: str,
    *,
    name: str | None = None,
    bio: str | None = None,
    avatar: str | None = None,
) -> tuple[User, AwardResult | None]:
    """Save profile fields and mark the profile complete.

    The first completion earns the profile-completion award; later saves
    are journaled as ``profile_update`` with no points.
    """
    require(email, "email")
    email = normalize_email(email)

    with get_session(engine) as session:
        user = find_user(session, email)
        if name is not None and name.strip():
            user.name = name.strip()
        if bio is not None:
            user.bio = bio
        if avatar is not None:
            user.avatar = avatar
        session.flush()

        first_completion = session.execute(
            update(User)
            .where(User.id == user.id, User.profile_completed.is_(False))
            .values(profile_completed=True)
            .execution_options(synchronize_session=False)
        ).rowcount == 1

        if not first_completion:
            session.add(Activity(
                email=email,
                activity_type=ActivityType.PROFILE_UPDATE.value,
                description="Updated profile information",
                metadata_={},
            ))

    award = award_profile_completion(engine, email) if first_completion else None
    return get_user(engine, email), award
