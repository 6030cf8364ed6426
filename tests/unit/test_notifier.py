# tests/unit/test_notifier.py
"""Unit tests for the fire-and-forget Notifier and the inbox service."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dx_notify.application.service import NotificationApplicationService, Notifier
from src.dx_notify.domain.models import Notification


def _session_factory(session: MagicMock) -> MagicMock:
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=session)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=ctx)


@pytest.fixture
def session():
    s = MagicMock()
    s.commit = AsyncMock()
    s.rollback = AsyncMock()
    return s


class TestNotifier:
    async def test_writes_in_own_session(self, session):
        repo = MagicMock()
        repo.insert = AsyncMock()
        notifier = Notifier(session_factory=_session_factory(session), repo=repo)

        await notifier.notify("user-1", "ITEM_SOLD", "Sold", "Your lamp sold", "item-1")

        repo.insert.assert_awaited_once()
        assert repo.insert.call_args.args[0] is session
        session.commit.assert_awaited_once()

    async def test_failure_is_swallowed_and_logged(self, session, caplog):
        repo = MagicMock()
        repo.insert = AsyncMock(side_effect=RuntimeError("db down"))
        notifier = Notifier(session_factory=_session_factory(session), repo=repo)

        await notifier.notify("user-1", "ITEM_SOLD", "Sold", "Your lamp sold")

        assert "Failed to create ITEM_SOLD notification" in caplog.text
        session.commit.assert_not_awaited()


class TestInbox:
    async def test_list(self, session):
        repo = MagicMock()
        repo.list_for_user = AsyncMock(return_value=[Notification(
            id="n-1", user_id="user-1", type="MESSAGE", title="Hi", message="Hello",
            related_item_id=None, related_transaction_id=None, is_read=False,
            created_at=datetime.now(UTC),
        )])
        svc = NotificationApplicationService(repo=repo)

        resp = await svc.list_notifications(session, "user-1", unread_only=True)

        assert len(resp.items) == 1
        assert repo.list_for_user.call_args.args[2] is True
        assert repo.list_for_user.call_args.args[3] == 50

    async def test_mark_read_commits(self, session):
        repo = MagicMock()
        repo.mark_read = AsyncMock(return_value=2)
        svc = NotificationApplicationService(repo=repo)

        resp = await svc.mark_read(session, "user-1", ["n-1", "n-2"])

        assert resp.updated == 2
        session.commit.assert_awaited_once()
