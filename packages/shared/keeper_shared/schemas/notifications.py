"""Notification inbox schemas: filters, sorting and responses."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    MENTION = "mention"
    INVITE = "invite"
    UPDATE = "update"
    ALERT = "alert"


NOTIFICATION_TYPE_LABELS: dict[NotificationType, str] = {
    NotificationType.MENTION: "Mention",
    NotificationType.INVITE: "Invite",
    NotificationType.UPDATE: "Update",
    NotificationType.ALERT: "Alert",
}


class ViewedFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    READ = "read"


class SortField(str, Enum):
    CREATED_AT = "created_at"
    TITLE = "title"
    TYPE = "type"
    SENDER = "sender"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class NotificationFilters(BaseModel):
    search: Optional[str] = None
    type: Optional[NotificationType] = None
    sender_id: Optional[uuid.UUID] = None
    viewed: ViewedFilter = ViewedFilter.ALL
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    sort_field: SortField = SortField.CREATED_AT
    sort_direction: SortDirection = SortDirection.DESC


class NotificationResponse(BaseModel):
    id: uuid.UUID
    created_at: datetime
    recipient_id: uuid.UUID
    sender_id: Optional[uuid.UUID] = None
    sender_name: Optional[str] = None
    org_id: Optional[uuid.UUID] = None
    type: NotificationType
    title: str
    description: str = ""
    href: Optional[str] = None
    viewed: bool = False
    viewed_at: Optional[datetime] = None


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    total: int


class BulkDeleteRequest(BaseModel):
    ids: list[uuid.UUID] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int
