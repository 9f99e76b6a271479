"""
Notification inbox API endpoints.

GET    /api/v1/notifications                   — Filtered, sorted inbox
POST   /api/v1/notifications/{id}/viewed       — Mark as read
POST   /api/v1/notifications/bulk-delete       — Delete several
DELETE /api/v1/notifications/{id}              — Delete one
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, get_current_user
from app.core.database import get_session
from app.services import notifications as notification_service
from keeper_shared.schemas.common import ActionResult
from keeper_shared.schemas.notifications import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    NotificationFilters,
    NotificationListResponse,
    NotificationResponse,
    NotificationType,
    SortDirection,
    SortField,
    ViewedFilter,
)

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    search: Optional[str] = Query(default=None, max_length=200),
    type: Optional[NotificationType] = None,
    sender_id: Optional[uuid.UUID] = None,
    viewed: ViewedFilter = ViewedFilter.ALL,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    sort_field: SortField = SortField.CREATED_AT,
    sort_direction: SortDirection = SortDirection.DESC,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    filters = NotificationFilters(
        search=search,
        type=type,
        sender_id=sender_id,
        viewed=viewed,
        date_from=date_from,
        date_to=date_to,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )
    items = await notification_service.list_notifications(auth.user_id, session, filters)
    return NotificationListResponse(
        data=[NotificationResponse(**item) for item in items],
        total=len(items),
    )


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete(
    body: BulkDeleteRequest,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    deleted = await notification_service.delete_notifications(
        body.ids, auth.user_id, session
    )
    return BulkDeleteResponse(deleted=deleted)


@router.post("/{notification_id}/viewed", response_model=ActionResult)
async def mark_viewed(
    notification_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    changed = await notification_service.mark_viewed(
        notification_id, auth.user_id, session
    )
    return ActionResult(changed=changed, id=notification_id)


@router.delete("/{notification_id}", response_model=ActionResult)
async def delete_notification(
    notification_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await notification_service.delete_notification(
        notification_id, auth.user_id, session
    )
    return ActionResult(changed=True, id=notification_id)
