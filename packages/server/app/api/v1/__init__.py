"""
API v1 Router

Org-scoped endpoints are prefixed with /orgs/{org_id}; superadmin review
endpoints live under /admin.
"""

from fastapi import APIRouter
from . import members, notifications, org_requests, profiles
from .invites import router_global as invites_global_router
from .invites import router_scoped as invites_scoped_router
from .organizations import router_global as orgs_global_router
from .organizations import router_scoped as orgs_scoped_router

router = APIRouter()

# Organization routes (non-org-scoped: list, create)
router.include_router(orgs_global_router)

# Organization routes (org-scoped: get, delete)
router.include_router(orgs_scoped_router, prefix="/orgs/{org_id}", tags=["Organizations"])

router.include_router(members.router, prefix="/orgs/{org_id}/members", tags=["Members"])
router.include_router(invites_scoped_router, prefix="/orgs/{org_id}/invites", tags=["Invites"])
router.include_router(invites_global_router, prefix="/invites", tags=["Invites"])
router.include_router(org_requests.router, prefix="/org-requests", tags=["Org Requests"])
router.include_router(profiles.router, prefix="/profile", tags=["Profiles"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Superadmin
router.include_router(org_requests.admin_router, prefix="/admin/org-requests", tags=["Admin"])
router.include_router(profiles.admin_router, prefix="/admin/profiles", tags=["Admin"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/orgs",
            "/orgs/{org_id}/members",
            "/orgs/{org_id}/invites",
            "/invites",
            "/org-requests",
            "/profile",
            "/notifications",
            "/admin/org-requests",
            "/admin/profiles",
        ],
    }
