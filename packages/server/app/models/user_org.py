"""User-Organization membership. The only source of truth for authorization."""

import uuid

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin


class Membership(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "user_org_role"

    # Composite key: at most one row per (user, org).
    user_id: uuid.UUID = Field(foreign_key="profiles.id", primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="orgs.org_id", primary_key=True, index=True)
    access_lvl: int = Field(nullable=False, default=1)  # 1 caretaker | 2 owner | 3 superadmin
