"""
Organization request API endpoints.

GET    /api/v1/org-requests                          — Caller's recent requests
POST   /api/v1/org-requests                          — Request a new org
POST   /api/v1/org-requests/{request_id}/retract     — Cancel own pending request

GET    /api/v1/admin/org-requests                    — All requests (superadmin)
POST   /api/v1/admin/org-requests/{request_id}/approve
POST   /api/v1/admin/org-requests/{request_id}/reject
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, get_current_user, require_superadmin
from app.core.database import get_session
from app.services import org_requests as request_service
from keeper_shared.schemas.common import ActionResult
from keeper_shared.schemas.org_requests import (
    OrgRequestApproveResponse,
    OrgRequestCreate,
    OrgRequestListResponse,
    OrgRequestResponse,
)

router = APIRouter()


@router.get("", response_model=OrgRequestListResponse)
async def list_my_requests(
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Pending requests plus those reviewed within the recent window."""
    items = await request_service.list_my_requests(auth.user_id, session)
    return OrgRequestListResponse(
        data=[OrgRequestResponse.model_validate(item) for item in items]
    )


@router.post("", response_model=OrgRequestResponse, status_code=201)
async def create_request(
    body: OrgRequestCreate,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    request = await request_service.create_request(auth.user_id, body.org_name, session)
    return OrgRequestResponse.model_validate(request)


@router.post("/{request_id}/retract", response_model=ActionResult)
async def retract_request(
    request_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    changed = await request_service.retract_request(request_id, auth.user_id, session)
    return ActionResult(changed=changed, id=request_id)


# ---------------------------------------------------------------------------
# Superadmin review (mounted under /admin/org-requests)
# ---------------------------------------------------------------------------
admin_router = APIRouter()


@admin_router.get("", response_model=OrgRequestListResponse)
async def list_all_requests(
    auth: AuthenticatedUser = Depends(require_superadmin),
    session: AsyncSession = Depends(get_session),
):
    items = await request_service.list_all_requests(session)
    return OrgRequestListResponse(data=[OrgRequestResponse(**item) for item in items])


@admin_router.post("/{request_id}/approve", response_model=OrgRequestApproveResponse)
async def approve_request(
    request_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_superadmin),
    session: AsyncSession = Depends(get_session),
):
    """Approve: creates the org and makes the requester a level-3 member."""
    org = await request_service.approve_request(request_id, auth.user_id, session)
    return OrgRequestApproveResponse(
        changed=org is not None,
        request_id=request_id,
        org_id=org.org_id if org else None,
    )


@admin_router.post("/{request_id}/reject", response_model=ActionResult)
async def reject_request(
    request_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_superadmin),
    session: AsyncSession = Depends(get_session),
):
    changed = await request_service.reject_request(request_id, auth.user_id, session)
    return ActionResult(changed=changed, id=request_id)
