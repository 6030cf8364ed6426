# tests/unit/test_message_persistence.py
"""Unit tests for MessageRepository using a MagicMock AsyncSession."""
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from src.dx_messaging.infrastructure.persistence import MessageRepository


def _session(rows=None, row=None, rowcount: int = 0) -> MagicMock:
    result = MagicMock()
    result.fetchall.return_value = rows or []
    result.fetchone.return_value = row
    result.rowcount = rowcount
    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    return db


class TestConversations:
    async def test_maps_partner_and_unread(self):
        row = SimpleNamespace(
            id="m-9", sender_id="seller-1", receiver_id="buyer-1", content="Tomorrow 6pm?",
            item_id=None, is_read=False, created_at=datetime.now(UTC),
            partner_id="seller-1", partner_name="Sam", partner_room="B-214", unread_count=3,
        )
        db = _session(rows=[row])

        conversations = await MessageRepository().list_conversations(db, "buyer-1", 100)

        assert conversations[0].partner_id == "seller-1"
        assert conversations[0].unread_count == 3
        assert conversations[0].last_message.item_id is None
        assert "DISTINCT ON (partner_id)" in str(db.execute.call_args.args[0])


class TestMarkThreadRead:
    async def test_only_partner_to_reader_direction(self):
        db = _session(rowcount=2)

        assert await MessageRepository().mark_thread_read(db, "buyer-1", "seller-1") == 2
        sql = str(db.execute.call_args.args[0])
        assert "receiver_id = CAST(:user_id AS UUID)" in sql
        assert "sender_id = CAST(:partner_id AS UUID)" in sql


class TestGetUserName:
    async def test_missing_user(self):
        assert await MessageRepository().get_user_name(_session(row=None), "ghost") is None

    async def test_active_user(self):
        db = _session(row=SimpleNamespace(name="Sam"))
        assert await MessageRepository().get_user_name(db, "seller-1") == "Sam"
        assert "is_active = TRUE" in str(db.execute.call_args.args[0])
