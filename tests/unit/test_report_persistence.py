# tests/unit/test_report_persistence.py
"""Unit tests for ReportRepository error mapping."""
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.dx_common.errors import DuplicateReportError, ItemNotFoundError
from src.dx_moderation.infrastructure.persistence import ReportRepository


def _failing_session(message: str) -> MagicMock:
    db = MagicMock()
    db.execute = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception(message)))
    return db


class TestInsertReport:
    async def test_unique_violation_is_duplicate(self):
        db = _failing_session(
            'duplicate key value violates unique constraint "uq_reports_item_reporter"'
        )
        with pytest.raises(DuplicateReportError):
            await ReportRepository().insert_report(db, "item-1", "user-2", "SCAM", None)

    async def test_fk_violation_is_not_found(self):
        db = _failing_session('insert violates foreign key constraint "reports_item_id_fkey"')
        with pytest.raises(ItemNotFoundError):
            await ReportRepository().insert_report(db, "item-1", "user-2", "SCAM", None)

    async def test_maps_row(self):
        row = SimpleNamespace(
            id="r-1", item_id="item-1", reporter_id="user-2", reason="SPAM",
            description=None, status="PENDING", created_at=datetime.now(UTC), updated_at=None,
        )
        result = MagicMock()
        result.fetchone.return_value = row
        db = MagicMock()
        db.execute = AsyncMock(return_value=result)

        report = await ReportRepository().insert_report(db, "item-1", "user-2", "SPAM", None)

        assert report.reason == "SPAM"
        assert report.item_title is None
