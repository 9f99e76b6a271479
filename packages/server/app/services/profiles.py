"""
Profile service — self-service name edits and the superadmin profile table.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

import structlog
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import EmptyNameError, ProfileNotFound
from app.models.organization import Organization
from app.models.user import Profile
from app.models.user_org import Membership
from keeper_shared.schemas.common import access_level_name

log = structlog.get_logger()


async def get_profile(user_id: uuid.UUID, session: AsyncSession) -> Profile:
    profile = await session.get(Profile, user_id)
    if not profile:
        raise ProfileNotFound()
    return profile


async def get_profiles(
    user_ids: Iterable[uuid.UUID], session: AsyncSession
) -> list[Profile]:
    """Fetch several profiles at once; all of them must exist."""
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return []
    result = await session.execute(select(Profile).where(Profile.id.in_(ids)))
    profiles = result.scalars().all()
    if len(profiles) != len(ids):
        raise ProfileNotFound("Some profiles could not be found")
    return list(profiles)


async def update_profile(
    user_id: uuid.UUID,
    first_name: str,
    last_name: str,
    session: AsyncSession,
) -> Profile:
    """Update the caller's names and recompute ``full_name``."""
    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    if not first_name or not last_name:
        raise EmptyNameError("First and last name cannot be empty")

    profile = await get_profile(user_id, session)
    profile.first_name = first_name
    profile.last_name = last_name
    profile.full_name = f"{first_name} {last_name}"
    session.add(profile)
    await session.flush()

    log.info("profile.updated", user_id=str(user_id))
    return profile


async def list_all_profiles(
    session: AsyncSession, search: Optional[str] = None
) -> list[dict]:
    """Every profile with its memberships, for the superadmin table.

    ``search`` matches full name, email or the name of any org the profile
    belongs to, case-insensitively.
    """
    query = select(Profile).order_by(Profile.full_name, Profile.email)
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        in_matching_org = (
            select(Membership.user_id)
            .join(Organization, Organization.org_id == Membership.org_id)
            .where(func.lower(Organization.name).like(pattern))
        )
        query = query.where(
            or_(
                func.lower(Profile.full_name).like(pattern),
                func.lower(Profile.email).like(pattern),
                Profile.id.in_(in_matching_org),
            )
        )
    profiles = (await session.execute(query)).scalars().all()
    if not profiles:
        return []

    result = await session.execute(
        select(Membership, Organization.name)
        .join(Organization, Organization.org_id == Membership.org_id)
        .where(Membership.user_id.in_([p.id for p in profiles]))
        .order_by(Organization.name)
    )
    memberships: dict[uuid.UUID, list[dict]] = {}
    for membership, org_name in result.all():
        memberships.setdefault(membership.user_id, []).append(
            {
                "org_id": membership.org_id,
                "org_name": org_name,
                "access_lvl": membership.access_lvl,
                "access_lvl_name": access_level_name(membership.access_lvl),
                "joined_at": membership.created_at,
            }
        )

    return [
        {
            "id": p.id,
            "first_name": p.first_name,
            "last_name": p.last_name,
            "email": p.email,
            "full_name": p.full_name,
            "is_superadmin": p.is_superadmin,
            "memberships": memberships.get(p.id, []),
        }
        for p in profiles
    ]
