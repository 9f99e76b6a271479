"""Organization creation request model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin

_PENDING = sa.text("status = 'pending'")


class OrgRequest(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "org_requests"
    __table_args__ = (
        sa.Index(
            "uq_org_requests_pending_requester_name",
            "requester_id",
            "org_name",
            unique=True,
            postgresql_where=_PENDING,
            sqlite_where=_PENDING,
        ),
    )

    request_id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    requester_id: uuid.UUID = Field(foreign_key="profiles.id", nullable=False, index=True)
    org_name: str = Field(nullable=False)
    status: str = Field(default="pending", nullable=False)  # pending | approved | rejected | cancelled
    reviewed_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id")
    reviewed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
