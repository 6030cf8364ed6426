"""Pydantic schemas for dx_notify API."""

import uuid

from pydantic import BaseModel, Field

from src.dx_notify.domain.models import Notification


class NotificationItem(BaseModel):
    id: str
    type: str
    title: str
    message: str
    related_item_id: str | None
    related_transaction_id: str | None
    is_read: bool
    created_at: str

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationItem":
        return cls(
            id=n.id,
            type=n.type,
            title=n.title,
            message=n.message,
            related_item_id=n.related_item_id,
            related_transaction_id=n.related_transaction_id,
            is_read=n.is_read,
            created_at=n.created_at.isoformat(),
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationItem]


class MarkReadRequest(BaseModel):
    notification_ids: list[uuid.UUID] = Field(..., max_length=200)


class MarkReadResponse(BaseModel):
    updated: int
