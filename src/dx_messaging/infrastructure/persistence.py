"""MessageRepository — raw SQL over the messages table.

The sweep writes the winner's starter message through its own repository in
the settlement transaction; this one serves the chat endpoints.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_messaging.domain.models import Conversation, Message

_GET_USER_NAME_SQL = text("""
    SELECT name
    FROM users
    WHERE id = CAST(:user_id AS UUID) AND is_active = TRUE
""")

_INSERT_MESSAGE_SQL = text("""
    INSERT INTO messages (sender_id, receiver_id, content, item_id)
    VALUES (CAST(:sender_id AS UUID), CAST(:receiver_id AS UUID), :content,
            CAST(:item_id AS UUID))
    RETURNING id, sender_id, receiver_id, content, item_id, is_read, created_at
""")

# Latest N, returned oldest first for display
_LIST_THREAD_SQL = text("""
    SELECT * FROM (
        SELECT m.id, m.sender_id, m.receiver_id, m.content, m.item_id,
               m.is_read, m.created_at, u.name AS sender_name
        FROM messages m
        JOIN users u ON u.id = m.sender_id
        WHERE (m.sender_id = CAST(:user_id AS UUID) AND m.receiver_id = CAST(:partner_id AS UUID))
           OR (m.sender_id = CAST(:partner_id AS UUID) AND m.receiver_id = CAST(:user_id AS UUID))
        ORDER BY m.created_at DESC, m.id DESC
        LIMIT :limit
    ) latest
    ORDER BY created_at ASC, id ASC
""")

_MARK_THREAD_READ_SQL = text("""
    UPDATE messages
    SET is_read = TRUE
    WHERE receiver_id = CAST(:user_id AS UUID)
      AND sender_id = CAST(:partner_id AS UUID)
      AND is_read = FALSE
""")

_LIST_CONVERSATIONS_SQL = text("""
    WITH mine AS (
        SELECT m.*,
               CASE WHEN m.sender_id = CAST(:user_id AS UUID)
                    THEN m.receiver_id ELSE m.sender_id END AS partner_id
        FROM messages m
        WHERE m.sender_id = CAST(:user_id AS UUID)
           OR m.receiver_id = CAST(:user_id AS UUID)
    ),
    latest AS (
        SELECT DISTINCT ON (partner_id) *
        FROM mine
        ORDER BY partner_id, created_at DESC, id DESC
    ),
    unread AS (
        SELECT partner_id, COUNT(*) AS unread_count
        FROM mine
        WHERE receiver_id = CAST(:user_id AS UUID) AND is_read = FALSE
        GROUP BY partner_id
    )
    SELECT l.id, l.sender_id, l.receiver_id, l.content, l.item_id, l.is_read,
           l.created_at, l.partner_id,
           u.name AS partner_name, u.room_number AS partner_room,
           COALESCE(r.unread_count, 0) AS unread_count
    FROM latest l
    JOIN users u ON u.id = l.partner_id
    LEFT JOIN unread r ON r.partner_id = l.partner_id
    ORDER BY l.created_at DESC
    LIMIT :limit
""")


def _row_to_message(row: Any) -> Message:
    return Message(
        id=str(row.id),
        sender_id=str(row.sender_id),
        receiver_id=str(row.receiver_id),
        content=row.content,
        item_id=str(row.item_id) if row.item_id else None,
        is_read=row.is_read,
        created_at=row.created_at,
        sender_name=getattr(row, "sender_name", None),
    )


class MessageRepository:
    async def get_user_name(self, db: AsyncSession, user_id: str) -> str | None:
        result = await db.execute(_GET_USER_NAME_SQL, {"user_id": user_id})
        row = result.fetchone()
        return row.name if row else None

    async def insert_message(
        self,
        db: AsyncSession,
        sender_id: str,
        receiver_id: str,
        content: str,
        item_id: str | None,
    ) -> Message:
        result = await db.execute(
            _INSERT_MESSAGE_SQL,
            {
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content": content,
                "item_id": item_id,
            },
        )
        return _row_to_message(result.fetchone())

    async def list_thread(
        self, db: AsyncSession, user_id: str, partner_id: str, limit: int
    ) -> list[Message]:
        result = await db.execute(
            _LIST_THREAD_SQL, {"user_id": user_id, "partner_id": partner_id, "limit": limit}
        )
        return [_row_to_message(row) for row in result.fetchall()]

    async def mark_thread_read(self, db: AsyncSession, user_id: str, partner_id: str) -> int:
        result = await db.execute(
            _MARK_THREAD_READ_SQL, {"user_id": user_id, "partner_id": partner_id}
        )
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def list_conversations(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[Conversation]:
        result = await db.execute(_LIST_CONVERSATIONS_SQL, {"user_id": user_id, "limit": limit})
        return [
            Conversation(
                partner_id=str(row.partner_id),
                partner_name=row.partner_name,
                partner_room=row.partner_room,
                last_message=_row_to_message(row),
                unread_count=int(row.unread_count),
            )
            for row in result.fetchall()
        ]
