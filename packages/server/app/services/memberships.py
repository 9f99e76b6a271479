"""
Membership store — the (user, org, access level) rows that decide who can do
what in which org.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import DuplicateMembership
from app.models.base import utcnow
from app.models.organization import Organization
from app.models.user import Profile
from app.models.user_org import Membership
from keeper_shared.schemas.common import NO_ACCESS, access_level_name

log = structlog.get_logger()


async def add_member(
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    access_lvl: int,
    session: AsyncSession,
) -> Membership:
    """Insert a membership row; DuplicateMembership if the pair already exists.

    The insert runs in a savepoint so a key violation leaves the caller's
    transaction usable.
    """
    try:
        async with session.begin_nested():
            await session.execute(
                insert(Membership).values(
                    user_id=user_id,
                    org_id=org_id,
                    access_lvl=access_lvl,
                    created_at=utcnow(),
                )
            )
    except IntegrityError as exc:
        if await is_member(user_id, org_id, session):
            raise DuplicateMembership() from exc
        raise

    log.info(
        "member.added",
        org_id=str(org_id),
        user_id=str(user_id),
        access_lvl=access_lvl,
    )
    return await session.get(Membership, {"user_id": user_id, "org_id": org_id})


async def remove_member(
    org_id: uuid.UUID, user_id: uuid.UUID, session: AsyncSession
) -> bool:
    """Delete a membership. Removing a non-member is not an error.

    Returns whether a row was deleted.
    """
    result = await session.execute(
        delete(Membership).where(
            Membership.org_id == org_id, Membership.user_id == user_id
        )
    )
    removed = result.rowcount > 0
    log.info(
        "member.removed" if removed else "member.remove_noop",
        org_id=str(org_id),
        user_id=str(user_id),
    )
    return removed


async def get_access_level(
    user_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> int:
    """The user's numeric level in the org, 0 for non-members."""
    result = await session.execute(
        select(Membership.access_lvl).where(
            Membership.user_id == user_id, Membership.org_id == org_id
        )
    )
    level = result.scalar_one_or_none()
    return NO_ACCESS if level is None else level


async def is_member(
    user_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> bool:
    return await get_access_level(user_id, org_id, session) != NO_ACCESS


async def list_members(
    org_id: uuid.UUID, session: AsyncSession
) -> list[dict]:
    """List an org's members with profile details, oldest membership first."""
    result = await session.execute(
        select(Membership, Profile)
        .join(Profile, Profile.id == Membership.user_id, isouter=True)
        .where(Membership.org_id == org_id)
        .order_by(Membership.created_at)
    )
    return [
        {
            "user_id": membership.user_id,
            "access_lvl": membership.access_lvl,
            "access_lvl_name": access_level_name(membership.access_lvl),
            "created_at": membership.created_at,
            "first_name": profile.first_name if profile else None,
            "last_name": profile.last_name if profile else None,
            "full_name": profile.full_name if profile else None,
            "email": profile.email if profile else None,
        }
        for membership, profile in result.all()
    ]


async def list_user_orgs(
    user_id: uuid.UUID, session: AsyncSession
) -> list[tuple[Organization, int]]:
    """All orgs a user belongs to, paired with their access level."""
    result = await session.execute(
        select(Organization, Membership.access_lvl)
        .join(Membership, Membership.org_id == Organization.org_id)
        .where(Membership.user_id == user_id)
        .order_by(Organization.created_at)
    )
    return [(org, access_lvl) for org, access_lvl in result.all()]
