"""Profile schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, UUID4


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ProfileUpdateRequest(BaseModel):
    """Self-service name edit. Blank names are rejected after trimming."""
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ProfileResponse(BaseModel):
    id: UUID4
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_superadmin: bool = False

    model_config = {"from_attributes": True}


class ProfileMembership(BaseModel):
    org_id: UUID4
    org_name: str
    access_lvl: int
    access_lvl_name: str
    joined_at: Optional[datetime] = None


class ProfileWithOrgs(ProfileResponse):
    memberships: List[ProfileMembership] = []


class ProfileListResponse(BaseModel):
    data: List[ProfileWithOrgs]
