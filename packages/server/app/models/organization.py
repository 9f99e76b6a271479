"""Organization model."""

import uuid

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin


class Organization(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "orgs"

    org_id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        nullable=False,
    )
    name: str = Field(nullable=False, index=True)
