"""
Authentication and Authorization for Keeper.

Supports:
- Bearer JWTs issued by the hosted auth service (``sub`` = user id,
  ``email`` claim), verified with the shared secret
- Profile lookup for the authenticated user
- Org-scoped membership resolution and access-level dependencies
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import AuthenticationError, OrgNotFound, PermissionDenied
from app.models.organization import Organization
from app.models.user import Profile
from app.models.user_org import Membership
from keeper_shared.schemas.common import NO_ACCESS, can_manage_org

log = structlog.get_logger()
settings = get_settings()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)

# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    email: str | None = None,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token shaped like the auth service's tokens.

    Used by local scripts and tests; production tokens come from the auth
    service.
    """
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "email": email,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
    )


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class AuthenticatedUser:
    """Container for an authenticated user's profile."""

    def __init__(self, profile: Profile, token_email: str | None = None):
        self.profile = profile
        self.user_id = profile.id
        self.email = profile.email or token_email
        self.is_superadmin = bool(profile.is_superadmin)


class OrgMember:
    """An authenticated user in the context of one org."""

    def __init__(self, auth: AuthenticatedUser, org: Organization, access_lvl: int):
        self.auth = auth
        self.org = org
        self.org_id = org.org_id
        self.user_id = auth.user_id
        self.access_lvl = access_lvl
        self.is_superadmin = auth.is_superadmin


async def get_current_user(
    authorization: Optional[str] = Depends(api_key_header),
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedUser:
    """Main authentication dependency: Bearer JWT -> profile."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError()

    token = authorization[7:].strip()
    try:
        payload = decode_jwt(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise AuthenticationError("Invalid or expired session")

    profile = await session.get(Profile, user_id)
    if not profile:
        raise AuthenticationError("User not found")

    return AuthenticatedUser(profile, token_email=payload.get("email"))


# ---------------------------------------------------------------------------
# Authorization dependencies
# ---------------------------------------------------------------------------

async def require_superadmin(
    auth: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Requires a superadmin profile."""
    if not auth.is_superadmin:
        raise PermissionDenied("Superadmin access required")
    return auth


async def get_org_member(
    org_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OrgMember:
    """Resolve the org in the path and the caller's level in it.

    Non-members get the same 404 as a missing org; superadmins pass with
    their real level (0 when not a member).
    """
    org = await session.get(Organization, org_id)
    if not org:
        raise OrgNotFound()

    result = await session.execute(
        select(Membership.access_lvl).where(
            Membership.user_id == auth.user_id, Membership.org_id == org_id
        )
    )
    access_lvl = result.scalar_one_or_none()
    if access_lvl is None:
        if not auth.is_superadmin:
            raise OrgNotFound()
        access_lvl = NO_ACCESS

    return OrgMember(auth, org, access_lvl)


async def require_org_manager(
    member: OrgMember = Depends(get_org_member),
) -> OrgMember:
    """Requires owner level or a superadmin profile."""
    if not can_manage_org(member.access_lvl, member.is_superadmin):
        raise PermissionDenied("Owner access required")
    return member
