"""
Membership API endpoints.

GET    /api/v1/orgs/{org_id}/members            — List members
DELETE /api/v1/orgs/{org_id}/members/me         — Leave the org
DELETE /api/v1/orgs/{org_id}/members/{user_id}  — Remove another member (level 3)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import OrgMember, get_org_member
from app.core.database import get_session
from app.services import memberships as membership_service
from app.services import organizations as org_service
from keeper_shared.schemas.common import ActionResult
from keeper_shared.schemas.organizations import MemberListResponse, MemberResponse

router = APIRouter()


@router.get("", response_model=MemberListResponse)
async def list_members(
    member: OrgMember = Depends(get_org_member),
    session: AsyncSession = Depends(get_session),
):
    """List all members of the org, oldest first."""
    items = await membership_service.list_members(member.org_id, session)
    return MemberListResponse(data=[MemberResponse(**item) for item in items])


# Declared before /{user_id} so "me" is not parsed as a UUID.
@router.delete("/me", response_model=ActionResult)
async def leave_org(
    member: OrgMember = Depends(get_org_member),
    session: AsyncSession = Depends(get_session),
):
    changed = await org_service.leave_org(member.org_id, member.user_id, session)
    return ActionResult(changed=changed, id=member.user_id)


@router.delete("/{user_id}", response_model=ActionResult)
async def kick_member(
    user_id: uuid.UUID,
    member: OrgMember = Depends(get_org_member),
    session: AsyncSession = Depends(get_session),
):
    """Remove another member. Only level-3 members may do this."""
    changed = await org_service.kick_member(
        member.org_id, member.user_id, user_id, session
    )
    return ActionResult(changed=changed, id=user_id)
