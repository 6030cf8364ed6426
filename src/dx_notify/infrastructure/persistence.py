"""NotificationRepository — raw SQL over the notifications table."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_notify.domain.models import Notification

_COLUMNS = """
    id, user_id, type, title, message,
    related_item_id, related_transaction_id, is_read, created_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO notifications
        (user_id, type, title, message, related_item_id, related_transaction_id)
    VALUES
        (CAST(:user_id AS UUID), :type, :title, :message,
         CAST(:related_item_id AS UUID), CAST(:related_transaction_id AS UUID))
    RETURNING {_COLUMNS}
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notifications
    WHERE user_id = CAST(:user_id AS UUID)
      AND (:unread_only = FALSE OR is_read = FALSE)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_MARK_READ_SQL = text("""
    UPDATE notifications
    SET is_read = TRUE
    WHERE user_id = CAST(:user_id AS UUID)
      AND id = ANY(CAST(:ids AS UUID[]))
      AND is_read = FALSE
""")


def _row_to_notification(row: Any) -> Notification:
    return Notification(
        id=str(row.id),
        user_id=str(row.user_id),
        type=row.type,
        title=row.title,
        message=row.message,
        related_item_id=str(row.related_item_id) if row.related_item_id else None,
        related_transaction_id=(
            str(row.related_transaction_id) if row.related_transaction_id else None
        ),
        is_read=row.is_read,
        created_at=row.created_at,
    )


class NotificationRepository:
    async def insert(
        self,
        db: AsyncSession,
        user_id: str,
        type_: str,
        title: str,
        message: str,
        related_item_id: str | None,
        related_transaction_id: str | None,
    ) -> Notification:
        result = await db.execute(
            _INSERT_SQL,
            {
                "user_id": user_id,
                "type": type_,
                "title": title,
                "message": message,
                "related_item_id": related_item_id,
                "related_transaction_id": related_transaction_id,
            },
        )
        return _row_to_notification(result.fetchone())

    async def list_for_user(
        self, db: AsyncSession, user_id: str, unread_only: bool, limit: int
    ) -> list[Notification]:
        result = await db.execute(
            _LIST_SQL, {"user_id": user_id, "unread_only": unread_only, "limit": limit}
        )
        return [_row_to_notification(row) for row in result.fetchall()]

    async def mark_read(
        self, db: AsyncSession, user_id: str, notification_ids: list[str]
    ) -> int:
        if not notification_ids:
            return 0
        result = await db.execute(
            _MARK_READ_SQL, {"user_id": user_id, "ids": notification_ids}
        )
        return int(result.rowcount)  # type: ignore[attr-defined]
