"""
Organization API endpoints.

GET    /api/v1/orgs              — List orgs for the authenticated user
POST   /api/v1/orgs              — Create a new org (superadmin only)
GET    /api/v1/orgs/{org_id}     — Get org details
DELETE /api/v1/orgs/{org_id}     — Delete the org, its invites and memberships
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    AuthenticatedUser,
    OrgMember,
    get_current_user,
    get_org_member,
    require_org_manager,
    require_superadmin,
)
from app.core.database import get_session
from app.services import memberships as membership_service
from app.services import organizations as org_service
from keeper_shared.schemas.common import ActionResult
from keeper_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListItem,
    OrgListResponse,
    OrgResponse,
)

# ---------------------------------------------------------------------------
# Non-org-scoped routes (no org_id in path)
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.get("/orgs", response_model=OrgListResponse, tags=["Organizations"])
async def list_orgs(
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the authenticated user belongs to, with their access level."""
    rows = await membership_service.list_user_orgs(auth.user_id, session)
    return OrgListResponse(data=[OrgListItem.build(org, lvl) for org, lvl in rows])


@router_global.post("/orgs", response_model=OrgResponse, status_code=201, tags=["Organizations"])
async def create_org(
    body: OrgCreateRequest,
    auth: AuthenticatedUser = Depends(require_superadmin),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization. The creator becomes a level-3 member.

    Other users go through an org request instead.
    """
    org = await org_service.create_org(body.name, auth.user_id, session)
    return OrgResponse.model_validate(org)


# ---------------------------------------------------------------------------
# Org-scoped routes (mounted under /orgs/{org_id})
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("", response_model=OrgResponse)
async def get_org(member: OrgMember = Depends(get_org_member)):
    return OrgResponse.model_validate(member.org)


@router_scoped.delete("", response_model=ActionResult)
async def delete_org(
    member: OrgMember = Depends(require_org_manager),
    session: AsyncSession = Depends(get_session),
):
    """Delete the org (owner or superadmin)."""
    await org_service.delete_org(member.org_id, session)
    return ActionResult(changed=True, id=member.org_id)
