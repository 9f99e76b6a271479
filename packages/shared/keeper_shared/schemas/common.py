"""
Access-level policy and small response envelopes shared by every module.

Access levels are plain integers stored on membership rows. Display names are
derived here; authorization always compares the numeric level.
"""

from __future__ import annotations

import uuid
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel


class AccessLevel(IntEnum):
    CARETAKER = 1
    OWNER = 2
    SUPERADMIN = 3


# Level 0 means "not a member" wherever an access level is looked up.
NO_ACCESS = 0

ACCESS_LEVEL_NAMES: dict[int, str] = {
    AccessLevel.CARETAKER: "Caretaker",
    AccessLevel.OWNER: "Owner",
    AccessLevel.SUPERADMIN: "Superadmin",
}


def access_level_name(level) -> str:
    """Display name for an access level. Unknown levels read as 'Caretaker'."""
    try:
        return ACCESS_LEVEL_NAMES.get(level, ACCESS_LEVEL_NAMES[AccessLevel.CARETAKER])
    except TypeError:
        # unhashable input
        return ACCESS_LEVEL_NAMES[AccessLevel.CARETAKER]


def has_access(level: int, threshold: int) -> bool:
    return level >= threshold


def can_manage_org(level: int, is_superadmin: bool = False) -> bool:
    """Owners and superadmins may delete the org and manage its invites."""
    return is_superadmin or has_access(level, AccessLevel.OWNER)


def can_kick(
    actor_level: int, actor_id: uuid.UUID, target_id: uuid.UUID
) -> bool:
    """Only level-3 members may remove someone else."""
    return actor_level == AccessLevel.SUPERADMIN and actor_id != target_id


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

class ActionResult(BaseModel):
    """Outcome of a conditional transition.

    ``changed`` is False when the target row was no longer in the expected
    state; that only means the entity is no longer actionable.
    """
    changed: bool
    id: Optional[uuid.UUID] = None


class ErrorBody(BaseModel):
    code: str
    message: str
    status: int


class ErrorResponse(BaseModel):
    error: ErrorBody
