"""Organization-request schemas and lifecycle."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class OrgRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


ORG_REQUEST_TRANSITIONS: dict[OrgRequestStatus, list[OrgRequestStatus]] = {
    OrgRequestStatus.PENDING: [
        OrgRequestStatus.APPROVED,
        OrgRequestStatus.REJECTED,
        OrgRequestStatus.CANCELLED,
    ],
    OrgRequestStatus.APPROVED: [],
    OrgRequestStatus.REJECTED: [],
    OrgRequestStatus.CANCELLED: [],
}


class OrgRequestCreate(BaseModel):
    org_name: str = Field(..., max_length=100)


class OrgRequestResponse(BaseModel):
    request_id: uuid.UUID
    requester_id: uuid.UUID
    org_name: str
    status: OrgRequestStatus
    created_at: datetime
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    requester_name: Optional[str] = None
    requester_email: Optional[str] = None

    model_config = {"from_attributes": True}


class OrgRequestListResponse(BaseModel):
    data: list[OrgRequestResponse]


class OrgRequestApproveResponse(BaseModel):
    changed: bool
    request_id: uuid.UUID
    org_id: Optional[uuid.UUID] = None
