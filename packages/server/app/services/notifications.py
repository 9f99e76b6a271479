"""
Notification service — the per-user inbox.

Every read and write is scoped to the recipient; another user's notification
behaves as if it did not exist.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import select

from app.core.errors import NotificationNotFound
from app.models.base import utcnow
from app.models.notification import Notification
from app.models.user import Profile
from keeper_shared.schemas.notifications import (
    NotificationFilters,
    NotificationType,
    SortDirection,
    SortField,
    ViewedFilter,
)

log = structlog.get_logger()

Sender = aliased(Profile)

_SORT_COLUMNS = {
    SortField.CREATED_AT: Notification.created_at,
    SortField.TITLE: Notification.title,
    SortField.TYPE: Notification.type,
    SortField.SENDER: Sender.full_name,
}


async def create_notification(
    recipient_id: uuid.UUID,
    type: NotificationType,
    title: str,
    session: AsyncSession,
    *,
    description: str = "",
    sender_id: Optional[uuid.UUID] = None,
    org_id: Optional[uuid.UUID] = None,
    href: Optional[str] = None,
) -> Notification:
    notification = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        org_id=org_id,
        type=NotificationType(type).value,
        title=title,
        description=description,
        href=href,
        created_at=utcnow(),
    )
    session.add(notification)
    await session.flush()
    log.info(
        "notification.created",
        notification_id=str(notification.id),
        recipient=str(recipient_id),
        type=notification.type,
    )
    return notification


async def list_notifications(
    recipient_id: uuid.UUID,
    session: AsyncSession,
    filters: Optional[NotificationFilters] = None,
) -> list[dict]:
    """The recipient's inbox, filtered and sorted."""
    filters = filters or NotificationFilters()

    query = (
        select(Notification, Sender.full_name)
        .join(Sender, Sender.id == Notification.sender_id, isouter=True)
        .where(Notification.recipient_id == recipient_id)
    )

    if filters.search and filters.search.strip():
        pattern = f"%{filters.search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Notification.title).like(pattern),
                func.lower(Notification.description).like(pattern),
                func.lower(Sender.full_name).like(pattern),
            )
        )
    if filters.type is not None:
        query = query.where(Notification.type == filters.type.value)
    if filters.sender_id is not None:
        query = query.where(Notification.sender_id == filters.sender_id)
    if filters.viewed == ViewedFilter.UNREAD:
        query = query.where(Notification.viewed.is_(False))
    elif filters.viewed == ViewedFilter.READ:
        query = query.where(Notification.viewed.is_(True))
    if filters.date_from is not None:
        query = query.where(Notification.created_at >= filters.date_from)
    if filters.date_to is not None:
        query = query.where(Notification.created_at <= filters.date_to)

    column = _SORT_COLUMNS[filters.sort_field]
    if filters.sort_direction == SortDirection.ASC:
        query = query.order_by(column.asc(), Notification.id)
    else:
        query = query.order_by(column.desc(), Notification.id)

    result = await session.execute(query)
    return [
        {
            "id": n.id,
            "created_at": n.created_at,
            "recipient_id": n.recipient_id,
            "sender_id": n.sender_id,
            "sender_name": sender_name,
            "org_id": n.org_id,
            "type": n.type,
            "title": n.title,
            "description": n.description,
            "href": n.href,
            "viewed": n.viewed,
            "viewed_at": n.viewed_at,
        }
        for n, sender_name in result.all()
    ]


async def mark_viewed(
    notification_id: uuid.UUID, recipient_id: uuid.UUID, session: AsyncSession
) -> bool:
    """Mark one notification read. Returns False if it was already read."""
    notification = await session.get(Notification, notification_id)
    if not notification or notification.recipient_id != recipient_id:
        raise NotificationNotFound()

    result = await session.execute(
        update(Notification)
        .where(
            Notification.id == notification_id,
            Notification.viewed.is_(False),
        )
        .values(viewed=True, viewed_at=utcnow())
    )
    changed = result.rowcount > 0
    if changed:
        log.info("notification.viewed", notification_id=str(notification_id))
    return changed


async def delete_notification(
    notification_id: uuid.UUID, recipient_id: uuid.UUID, session: AsyncSession
) -> None:
    result = await session.execute(
        delete(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id,
        )
    )
    if result.rowcount == 0:
        raise NotificationNotFound()
    log.info("notification.deleted", notification_id=str(notification_id))


async def delete_notifications(
    ids: list[uuid.UUID], recipient_id: uuid.UUID, session: AsyncSession
) -> int:
    """Bulk delete; ids that are unknown or belong to someone else are skipped."""
    if not ids:
        return 0
    result = await session.execute(
        delete(Notification).where(
            Notification.id.in_(ids),
            Notification.recipient_id == recipient_id,
        )
    )
    log.info("notification.deleted", count=result.rowcount, recipient=str(recipient_id))
    return result.rowcount
