"""
Profile API endpoints.

GET    /api/v1/profile           — The caller's profile and memberships
PATCH  /api/v1/profile           — Edit first/last name
GET    /api/v1/admin/profiles    — Every profile with memberships (superadmin)
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, get_current_user, require_superadmin
from app.core.database import get_session
from app.services import memberships as membership_service
from app.services import profiles as profile_service
from keeper_shared.schemas.common import access_level_name
from keeper_shared.schemas.users import (
    ProfileListResponse,
    ProfileMembership,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileWithOrgs,
)

router = APIRouter()


@router.get("", response_model=ProfileWithOrgs)
async def get_profile(
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    rows = await membership_service.list_user_orgs(auth.user_id, session)
    return ProfileWithOrgs(
        **ProfileResponse.model_validate(auth.profile).model_dump(),
        memberships=[
            ProfileMembership(
                org_id=org.org_id,
                org_name=org.name,
                access_lvl=lvl,
                access_lvl_name=access_level_name(lvl),
            )
            for org, lvl in rows
        ],
    )


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    profile = await profile_service.update_profile(
        auth.user_id, body.first_name, body.last_name, session
    )
    return ProfileResponse.model_validate(profile)


# ---------------------------------------------------------------------------
# Superadmin (mounted under /admin/profiles)
# ---------------------------------------------------------------------------
admin_router = APIRouter()


@admin_router.get("", response_model=ProfileListResponse)
async def list_profiles(
    search: Optional[str] = Query(default=None, max_length=100),
    auth: AuthenticatedUser = Depends(require_superadmin),
    session: AsyncSession = Depends(get_session),
):
    """All profiles; ``search`` matches name, email or org name."""
    items = await profile_service.list_all_profiles(session, search=search)
    return ProfileListResponse(data=[ProfileWithOrgs(**item) for item in items])
