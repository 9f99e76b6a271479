"""Profile model. Rows are provisioned by the hosted auth service."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = Field(default=None, unique=True, index=True)
    full_name: Optional[str] = None
    is_superadmin: bool = Field(default=False, nullable=False)
