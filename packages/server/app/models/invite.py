"""Invite model."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin

_PENDING = sa.text("status = 'pending'")


class Invite(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "invites"
    __table_args__ = (
        # One pending invite per (org, email), enforced by the database.
        sa.Index(
            "uq_invites_pending_org_email",
            "org_id",
            "invitee_email",
            unique=True,
            postgresql_where=_PENDING,
            sqlite_where=_PENDING,
        ),
    )

    invite_id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    org_id: uuid.UUID = Field(foreign_key="orgs.org_id", nullable=False, index=True)
    inviter_id: uuid.UUID = Field(foreign_key="profiles.id", nullable=False)
    invitee_email: str = Field(nullable=False, index=True)
    access_lvl: int = Field(nullable=False, default=1)
    status: str = Field(default="pending", nullable=False)  # pending | accepted | rejected | cancelled
    expires_at: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
