"""Inbox notification model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin


class Notification(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "notifications"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    recipient_id: uuid.UUID = Field(foreign_key="profiles.id", nullable=False, index=True)
    sender_id: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id")
    org_id: Optional[uuid.UUID] = Field(default=None, foreign_key="orgs.org_id")
    type: str = Field(nullable=False)  # mention | invite | update | alert
    title: str = Field(nullable=False)
    description: str = Field(default="", nullable=False)
    href: Optional[str] = None
    viewed: bool = Field(default=False, nullable=False)
    viewed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
