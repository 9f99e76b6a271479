"""
Organization service — creation, deletion and membership exits.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    DuplicateMembership,
    EmptyNameError,
    OrgNotFound,
    PermissionDenied,
)
from app.models.invite import Invite
from app.models.notification import Notification
from app.models.organization import Organization
from app.models.user_org import Membership
from app.services import memberships
from keeper_shared.schemas.common import AccessLevel, can_kick

log = structlog.get_logger()


async def get_org(org_id: uuid.UUID, session: AsyncSession) -> Organization:
    """Get an org by id; raises OrgNotFound if it does not exist."""
    org = await session.get(Organization, org_id)
    if not org:
        raise OrgNotFound()
    return org


async def create_org(
    name: str,
    creator_id: uuid.UUID,
    session: AsyncSession,
) -> Organization:
    """Create an org and make the creator a level-3 member.

    If the membership insert fails the org row is deleted again before the
    error propagates.
    """
    name = (name or "").strip()
    if not name:
        raise EmptyNameError("Organization name cannot be empty")

    org = Organization(name=name)
    session.add(org)
    await session.flush()

    try:
        await memberships.add_member(
            org.org_id, creator_id, AccessLevel.SUPERADMIN, session
        )
    except (DuplicateMembership, IntegrityError):
        await session.delete(org)
        await session.flush()
        log.warning(
            "org.create_rolled_back", org_id=str(org.org_id), creator=str(creator_id)
        )
        raise

    log.info("org.created", org_id=str(org.org_id), name=name, creator=str(creator_id))
    return org


async def delete_org(org_id: uuid.UUID, session: AsyncSession) -> None:
    """Delete an org together with its invites and membership rows."""
    await get_org(org_id, session)

    await session.execute(delete(Invite).where(Invite.org_id == org_id))
    await session.execute(
        update(Notification)
        .where(Notification.org_id == org_id)
        .values(org_id=None)
    )
    result = await session.execute(
        delete(Membership).where(Membership.org_id == org_id)
    )
    await session.execute(delete(Organization).where(Organization.org_id == org_id))

    log.info("org.deleted", org_id=str(org_id), memberships_removed=result.rowcount)


async def leave_org(
    org_id: uuid.UUID, user_id: uuid.UUID, session: AsyncSession
) -> bool:
    """Remove the caller from an org."""
    removed = await memberships.remove_member(org_id, user_id, session)
    log.info("member.left", org_id=str(org_id), user_id=str(user_id), removed=removed)
    return removed


# Same effect as leave_org; kept apart because kicking is actor-initiated.
async def kick_member(
    org_id: uuid.UUID,
    actor_id: uuid.UUID,
    target_id: uuid.UUID,
    session: AsyncSession,
) -> bool:
    """Remove another member. Only level-3 members may kick, never themselves."""
    actor_level = await memberships.get_access_level(actor_id, org_id, session)
    if not can_kick(actor_level, actor_id, target_id):
        raise PermissionDenied("Only superadmin members can remove other members")

    removed = await memberships.remove_member(org_id, target_id, session)
    log.info(
        "member.kicked",
        org_id=str(org_id),
        actor=str(actor_id),
        user_id=str(target_id),
        removed=removed,
    )
    return removed
