"""Notifier (fire-and-forget writer) and the inbox read service.

The Notifier writes through its own short-lived session so that a failed
insert can neither poison nor roll back the caller's transaction. Engine
services call it only after their own commit.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.dx_common.database import async_session_factory
from src.dx_notify.application.schemas import (
    MarkReadResponse,
    NotificationItem,
    NotificationListResponse,
)
from src.dx_notify.domain.repository import NotificationRepositoryProtocol
from src.dx_notify.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)

INBOX_LIMIT = 50


class Notifier:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        repo: NotificationRepositoryProtocol | None = None,
    ) -> None:
        self._session_factory = session_factory or async_session_factory
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()

    async def notify(
        self,
        user_id: str,
        type_: str,
        title: str,
        message: str,
        related_item_id: str | None = None,
        related_transaction_id: str | None = None,
    ) -> None:
        try:
            async with self._session_factory() as session:
                await self._repo.insert(
                    session,
                    user_id,
                    type_,
                    title,
                    message,
                    related_item_id,
                    related_transaction_id,
                )
                await session.commit()
        except Exception:
            # Notifications are non-critical; the triggering change already committed.
            logger.warning(
                "Failed to create %s notification for user %s", type_, user_id,
                exc_info=True,
            )


class NotificationApplicationService:
    def __init__(self, repo: NotificationRepositoryProtocol | None = None) -> None:
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()

    async def list_notifications(
        self, db: AsyncSession, user_id: str, unread_only: bool
    ) -> NotificationListResponse:
        rows = await self._repo.list_for_user(db, user_id, unread_only, INBOX_LIMIT)
        return NotificationListResponse(
            items=[NotificationItem.from_domain(n) for n in rows]
        )

    async def mark_read(
        self, db: AsyncSession, user_id: str, notification_ids: list[str]
    ) -> MarkReadResponse:
        try:
            updated = await self._repo.mark_read(db, user_id, notification_ids)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarkReadResponse(updated=updated)
