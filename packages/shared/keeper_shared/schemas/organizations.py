"""
Organization and membership schemas.

Covers: org create request/response, the caller's org list and the member
list of a single org.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import access_level_name


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    # Emptiness is checked after trimming by the service (EmptyNameError).
    name: str = Field(..., max_length=100, description="Organization display name")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    org_id: uuid.UUID
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrgListItem(BaseModel):
    org_id: uuid.UUID
    name: str
    created_at: datetime
    access_lvl: int  # the requesting user's level in this org
    access_lvl_name: str

    @classmethod
    def build(cls, org, access_lvl: int) -> "OrgListItem":
        return cls(
            org_id=org.org_id,
            name=org.name,
            created_at=org.created_at,
            access_lvl=access_lvl,
            access_lvl_name=access_level_name(access_lvl),
        )


class OrgListResponse(BaseModel):
    data: list[OrgListItem]


class MemberResponse(BaseModel):
    user_id: uuid.UUID
    access_lvl: int
    access_lvl_name: str
    created_at: datetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None


class MemberListResponse(BaseModel):
    data: list[MemberResponse]
