"""
Invite API endpoints.

Org-scoped (owner or superadmin):
GET    /api/v1/orgs/{org_id}/invites                      — Invites sent by the org
POST   /api/v1/orgs/{org_id}/invites                      — Invite an email address
POST   /api/v1/orgs/{org_id}/invites/{invite_id}/retract  — Cancel a pending invite

Caller-scoped:
GET    /api/v1/invites                       — Pending invites for the caller's email
POST   /api/v1/invites/{invite_id}/accept    — Accept and join the org
POST   /api/v1/invites/{invite_id}/reject    — Decline
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    AuthenticatedUser,
    OrgMember,
    get_current_user,
    require_org_manager,
)
from app.core.database import get_session
from app.services import invitations as invite_service
from keeper_shared.schemas.common import ActionResult
from keeper_shared.schemas.invites import (
    InviteCreateRequest,
    InviteListResponse,
    InviteResponse,
)

# ---------------------------------------------------------------------------
# Org-scoped routes (mounted under /orgs/{org_id}/invites)
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("", response_model=InviteListResponse)
async def list_sent_invites(
    member: OrgMember = Depends(require_org_manager),
    session: AsyncSession = Depends(get_session),
):
    items = await invite_service.list_sent_invites(member.org_id, session)
    return InviteListResponse(data=[InviteResponse(**item) for item in items])


@router_scoped.post("", response_model=InviteResponse, status_code=201)
async def create_invite(
    body: InviteCreateRequest,
    member: OrgMember = Depends(require_org_manager),
    session: AsyncSession = Depends(get_session),
):
    """Invite an email address to the org at level 1 or 2."""
    invite = await invite_service.create_invite(
        member.org_id, member.user_id, body.invitee_email, body.access_lvl, session
    )
    return InviteResponse.model_validate(invite)


@router_scoped.post("/{invite_id}/retract", response_model=ActionResult)
async def retract_invite(
    invite_id: uuid.UUID,
    member: OrgMember = Depends(require_org_manager),
    session: AsyncSession = Depends(get_session),
):
    changed = await invite_service.retract_invite(
        invite_id, session, org_id=member.org_id
    )
    return ActionResult(changed=changed, id=invite_id)


# ---------------------------------------------------------------------------
# Caller-scoped routes (mounted under /invites)
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.get("", response_model=InviteListResponse)
async def list_my_invites(
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Pending, unexpired invites addressed to the caller's email."""
    if not auth.email:
        return InviteListResponse(data=[])
    items = await invite_service.list_pending_invites(auth.email, session)
    return InviteListResponse(data=[InviteResponse(**item) for item in items])


@router_global.post("/{invite_id}/accept", response_model=ActionResult)
async def accept_invite(
    invite_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    invite = await invite_service.accept_invite(invite_id, auth.user_id, session)
    return ActionResult(changed=True, id=invite.org_id)


@router_global.post("/{invite_id}/reject", response_model=ActionResult)
async def reject_invite(
    invite_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    changed = await invite_service.reject_invite(invite_id, auth.user_id, session)
    return ActionResult(changed=changed, id=invite_id)
