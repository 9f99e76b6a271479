"""
Invite service — the pending → accepted | rejected | cancelled lifecycle.

Every transition is a conditional ``UPDATE … WHERE status = 'pending'``; the
rowcount decides the outcome, so two racing callers cannot both succeed.
Expiry is evaluated against ``expires_at`` at the moment of each transition.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.errors import (
    AlreadyMemberError,
    DuplicateMembership,
    DuplicatePendingInviteError,
    InvalidTransitionError,
    InviteExpiredError,
    InviteNotFound,
    PermissionDenied,
    ProfileNotFound,
    SelfInviteError,
)
from app.models.base import as_utc, utcnow
from app.models.invite import Invite
from app.models.organization import Organization
from app.models.user import Profile
from app.models.user_org import Membership
from app.services import memberships
from app.services.organizations import get_org
from keeper_shared.schemas.common import can_manage_org
from keeper_shared.schemas.invites import INVITE_TRANSITIONS, InviteStatus

log = structlog.get_logger()


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_expired(invite: Invite, now: Optional[datetime] = None) -> bool:
    return (now or utcnow()) > as_utc(invite.expires_at)


async def _transition(
    invite_id: uuid.UUID,
    status: InviteStatus,
    session: AsyncSession,
    *conditions,
    synchronize_session="auto",
) -> bool:
    """Move a pending invite to ``status``. Returns False if it was not pending."""
    allowed = INVITE_TRANSITIONS[InviteStatus.PENDING]
    if status not in allowed:
        raise InvalidTransitionError(
            f"Cannot transition invite from 'pending' to '{status.value}'. "
            f"Allowed: {[s.value for s in allowed]}"
        )
    result = await session.execute(
        update(Invite)
        .where(
            Invite.invite_id == invite_id,
            Invite.status == InviteStatus.PENDING.value,
            *conditions,
        )
        .values(status=status.value)
        .execution_options(synchronize_session=synchronize_session)
    )
    return result.rowcount > 0


async def create_invite(
    org_id: uuid.UUID,
    inviter_id: uuid.UUID,
    invitee_email: str,
    access_lvl: int,
    session: AsyncSession,
    *,
    expiry_days: Optional[int] = None,
) -> Invite:
    """Invite an email address to an org."""
    await get_org(org_id, session)
    email = normalize_email(invitee_email)

    inviter = await session.get(Profile, inviter_id)
    if not inviter or not inviter.email:
        raise ProfileNotFound("Inviter email not found")
    if normalize_email(inviter.email) == email:
        raise SelfInviteError()

    # Check if the email already has an account that is a member
    result = await session.execute(
        select(Membership.user_id)
        .join(Profile, Profile.id == Membership.user_id)
        .where(Membership.org_id == org_id, func.lower(Profile.email) == email)
    )
    if result.first():
        raise AlreadyMemberError()

    now = utcnow()
    result = await session.execute(
        select(Invite).where(
            Invite.org_id == org_id,
            Invite.invitee_email == email,
            Invite.status == InviteStatus.PENDING.value,
        )
    )
    current = result.scalar_one_or_none()
    if current is not None:
        if not is_expired(current, now):
            raise DuplicatePendingInviteError()
        # An expired pending row would still hold the unique index.
        if await _transition(current.invite_id, InviteStatus.CANCELLED, session):
            log.info("invite.superseded", invite_id=str(current.invite_id), org_id=str(org_id))

    if expiry_days is None:
        expiry_days = get_settings().invite_expiry_days

    invite = Invite(
        org_id=org_id,
        inviter_id=inviter_id,
        invitee_email=email,
        access_lvl=access_lvl,
        status=InviteStatus.PENDING.value,
        created_at=now,
        expires_at=now + timedelta(days=expiry_days),
    )
    try:
        async with session.begin_nested():
            session.add(invite)
            await session.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent invite for the same address.
        raise DuplicatePendingInviteError() from exc

    log.info(
        "invite.created",
        invite_id=str(invite.invite_id),
        org_id=str(org_id),
        inviter=str(inviter_id),
        access_lvl=access_lvl,
    )
    return invite


async def _get_pending(invite_id: uuid.UUID, session: AsyncSession) -> Invite:
    result = await session.execute(
        select(Invite).where(
            Invite.invite_id == invite_id,
            Invite.status == InviteStatus.PENDING.value,
        )
    )
    invite = result.scalar_one_or_none()
    if not invite:
        raise InviteNotFound()
    return invite


async def accept_invite(
    invite_id: uuid.UUID, user_id: uuid.UUID, session: AsyncSession
) -> Invite:
    """Accept an invite on behalf of ``user_id`` and create the membership.

    The accepting user's email is not compared with ``invitee_email``.
    """
    invite = await _get_pending(invite_id, session)
    if is_expired(invite):
        raise InviteExpiredError()

    # Status row before membership row; both in one savepoint.
    async with session.begin_nested():
        now = utcnow()
        if not await _transition(
            invite_id,
            InviteStatus.ACCEPTED,
            session,
            Invite.expires_at >= now,
            synchronize_session=False,
        ):
            if is_expired(invite, now):
                raise InviteExpiredError()
            raise InviteNotFound()
        await session.refresh(invite)

        try:
            await memberships.add_member(
                invite.org_id, user_id, invite.access_lvl, session
            )
        except DuplicateMembership as exc:
            raise AlreadyMemberError() from exc

    log.info(
        "invite.accepted",
        invite_id=str(invite_id),
        org_id=str(invite.org_id),
        user_id=str(user_id),
    )
    return invite


async def reject_invite(
    invite_id: uuid.UUID, actor_id: uuid.UUID, session: AsyncSession
) -> bool:
    """Reject an invite. Allowed for the invitee and for the org's managers."""
    invite = await session.get(Invite, invite_id)
    if not invite:
        raise InviteNotFound()

    actor = await session.get(Profile, actor_id)
    if actor is None:
        raise PermissionDenied()
    if normalize_email(actor.email) != invite.invitee_email:
        level = await memberships.get_access_level(actor_id, invite.org_id, session)
        if not can_manage_org(level, actor.is_superadmin):
            raise PermissionDenied("Only the invitee or an org owner can reject this invite")

    changed = await _transition(invite_id, InviteStatus.REJECTED, session)
    log.info(
        "invite.rejected" if changed else "invite.reject_noop",
        invite_id=str(invite_id),
        actor=str(actor_id),
    )
    return changed


async def retract_invite(
    invite_id: uuid.UUID,
    session: AsyncSession,
    *,
    org_id: Optional[uuid.UUID] = None,
) -> bool:
    """Cancel a pending invite; a no-op once it is no longer pending."""
    conditions = [Invite.org_id == org_id] if org_id is not None else []
    changed = await _transition(invite_id, InviteStatus.CANCELLED, session, *conditions)
    log.info(
        "invite.retracted" if changed else "invite.retract_noop",
        invite_id=str(invite_id),
    )
    return changed


def _invite_dict(invite: Invite, org_name: Optional[str] = None) -> dict:
    return {
        "invite_id": invite.invite_id,
        "org_id": invite.org_id,
        "inviter_id": invite.inviter_id,
        "invitee_email": invite.invitee_email,
        "access_lvl": invite.access_lvl,
        "status": invite.status,
        "created_at": invite.created_at,
        "expires_at": invite.expires_at,
        "org_name": org_name,
    }


async def list_pending_invites(
    email: str, session: AsyncSession, *, now: Optional[datetime] = None
) -> list[dict]:
    """Actionable invites for an email: pending and not yet expired."""
    result = await session.execute(
        select(Invite, Organization.name)
        .join(Organization, Organization.org_id == Invite.org_id)
        .where(
            Invite.invitee_email == normalize_email(email),
            Invite.status == InviteStatus.PENDING.value,
            Invite.expires_at > (now or utcnow()),
        )
        .order_by(Invite.created_at.desc())
    )
    return [_invite_dict(invite, org_name) for invite, org_name in result.all()]


async def list_sent_invites(
    org_id: uuid.UUID, session: AsyncSession
) -> list[dict]:
    """Every invite of an org regardless of status, newest first."""
    result = await session.execute(
        select(Invite, Organization.name)
        .join(Organization, Organization.org_id == Invite.org_id)
        .where(Invite.org_id == org_id)
        .order_by(Invite.created_at.desc())
    )
    return [_invite_dict(invite, org_name) for invite, org_name in result.all()]
