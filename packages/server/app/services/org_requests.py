"""
Org request service — users ask a superadmin to create an organization.

Lifecycle: pending → approved | rejected | cancelled. Approval creates the org
and the requester's level-3 membership in the same savepoint as the status
change.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.errors import (
    DuplicatePendingRequestError,
    EmptyNameError,
    InvalidTransitionError,
)
from app.models.base import as_utc, utcnow
from app.models.org_request import OrgRequest
from app.models.organization import Organization
from app.models.user import Profile
from app.services import organizations
from keeper_shared.schemas.org_requests import ORG_REQUEST_TRANSITIONS, OrgRequestStatus

log = structlog.get_logger()

_PENDING = OrgRequestStatus.PENDING.value


async def create_request(
    requester_id: uuid.UUID, org_name: str, session: AsyncSession
) -> OrgRequest:
    """File a request for a new org."""
    org_name = (org_name or "").strip()
    if not org_name:
        raise EmptyNameError("Organization name cannot be empty")

    result = await session.execute(
        select(OrgRequest.request_id).where(
            OrgRequest.requester_id == requester_id,
            OrgRequest.org_name == org_name,
            OrgRequest.status == _PENDING,
        )
    )
    if result.first():
        raise DuplicatePendingRequestError()

    request = OrgRequest(
        requester_id=requester_id,
        org_name=org_name,
        status=_PENDING,
        created_at=utcnow(),
    )
    try:
        async with session.begin_nested():
            session.add(request)
            await session.flush()
    except IntegrityError as exc:
        raise DuplicatePendingRequestError() from exc

    log.info(
        "org_request.created",
        request_id=str(request.request_id),
        requester=str(requester_id),
        org_name=org_name,
    )
    return request


async def _review(
    request_id: uuid.UUID,
    status: OrgRequestStatus,
    session: AsyncSession,
    *conditions,
    reviewer_id: Optional[uuid.UUID] = None,
) -> bool:
    allowed = ORG_REQUEST_TRANSITIONS[OrgRequestStatus.PENDING]
    if status not in allowed:
        raise InvalidTransitionError(
            f"Cannot transition request from 'pending' to '{status.value}'. "
            f"Allowed: {[s.value for s in allowed]}"
        )
    values = {"status": status.value}
    if reviewer_id is not None:
        values.update(reviewed_by=reviewer_id, reviewed_at=utcnow())
    result = await session.execute(
        update(OrgRequest)
        .where(
            OrgRequest.request_id == request_id,
            OrgRequest.status == _PENDING,
            *conditions,
        )
        .values(**values)
    )
    return result.rowcount > 0


async def approve_request(
    request_id: uuid.UUID, reviewer_id: uuid.UUID, session: AsyncSession
) -> Optional[Organization]:
    """Approve a pending request: create the org and make the requester its owner.

    Returns the new org, or None when the request was not pending (nothing is
    written in that case).
    """
    request = await session.get(OrgRequest, request_id)
    if request is None or request.status != _PENDING:
        log.info("org_request.approve_noop", request_id=str(request_id))
        return None

    async with session.begin_nested():
        if not await _review(
            request_id, OrgRequestStatus.APPROVED, session, reviewer_id=reviewer_id
        ):
            log.info("org_request.approve_noop", request_id=str(request_id))
            return None
        org = await organizations.create_org(
            request.org_name, request.requester_id, session
        )

    log.info(
        "org_request.approved",
        request_id=str(request_id),
        reviewer=str(reviewer_id),
        org_id=str(org.org_id),
    )
    return org


async def reject_request(
    request_id: uuid.UUID, reviewer_id: uuid.UUID, session: AsyncSession
) -> bool:
    changed = await _review(
        request_id, OrgRequestStatus.REJECTED, session, reviewer_id=reviewer_id
    )
    log.info(
        "org_request.rejected" if changed else "org_request.reject_noop",
        request_id=str(request_id),
        reviewer=str(reviewer_id),
    )
    return changed


async def retract_request(
    request_id: uuid.UUID, requester_id: uuid.UUID, session: AsyncSession
) -> bool:
    """Cancel the requester's own pending request."""
    changed = await _review(
        request_id,
        OrgRequestStatus.CANCELLED,
        session,
        OrgRequest.requester_id == requester_id,
    )
    log.info(
        "org_request.retracted" if changed else "org_request.retract_noop",
        request_id=str(request_id),
    )
    return changed


def is_recent(
    request: OrgRequest, now: datetime, window_days: int
) -> bool:
    """Pending requests always show; settled ones for ``window_days`` after review."""
    if request.status == _PENDING:
        return True
    settled_at = as_utc(request.reviewed_at or request.created_at)
    return settled_at >= now - timedelta(days=window_days)


async def list_my_requests(
    requester_id: uuid.UUID,
    session: AsyncSession,
    *,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> list[OrgRequest]:
    """The requester's recent requests, newest first."""
    now = now or utcnow()
    if window_days is None:
        window_days = get_settings().request_recent_window_days

    result = await session.execute(
        select(OrgRequest)
        .where(OrgRequest.requester_id == requester_id)
        .order_by(OrgRequest.created_at.desc())
    )
    return [r for r in result.scalars().all() if is_recent(r, now, window_days)]


async def list_all_requests(session: AsyncSession) -> list[dict]:
    """Superadmin view: pending first, then reviewed, each newest first."""
    result = await session.execute(
        select(OrgRequest, Profile)
        .join(Profile, Profile.id == OrgRequest.requester_id, isouter=True)
        .order_by(
            case((OrgRequest.status == _PENDING, 0), else_=1),
            OrgRequest.created_at.desc(),
        )
    )
    return [
        {
            "request_id": req.request_id,
            "requester_id": req.requester_id,
            "org_name": req.org_name,
            "status": req.status,
            "created_at": req.created_at,
            "reviewed_by": req.reviewed_by,
            "reviewed_at": req.reviewed_at,
            "requester_name": profile.full_name if profile else None,
            "requester_email": profile.email if profile else None,
        }
        for req, profile in result.all()
    ]
