"""Invite schemas and the invite lifecycle."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Every non-pending status is terminal.
INVITE_TRANSITIONS: dict[InviteStatus, list[InviteStatus]] = {
    InviteStatus.PENDING: [
        InviteStatus.ACCEPTED,
        InviteStatus.REJECTED,
        InviteStatus.CANCELLED,
    ],
    InviteStatus.ACCEPTED: [],
    InviteStatus.REJECTED: [],
    InviteStatus.CANCELLED: [],
}


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class InviteCreateRequest(BaseModel):
    invitee_email: EmailStr
    access_lvl: int = Field(
        default=1,
        ge=1,
        le=2,
        description="1 = Caretaker, 2 = Owner",
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class InviteResponse(BaseModel):
    invite_id: uuid.UUID
    org_id: uuid.UUID
    inviter_id: uuid.UUID
    invitee_email: str
    access_lvl: int
    status: InviteStatus
    created_at: datetime
    expires_at: datetime
    org_name: Optional[str] = None

    model_config = {"from_attributes": True}


class InviteListResponse(BaseModel):
    data: list[InviteResponse]
