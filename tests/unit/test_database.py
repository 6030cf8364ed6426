"""Tests for dx_common.database — connection check used at startup."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dx_common import database


def _fake_engine(conn: MagicMock) -> MagicMock:
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=conn)
    ctx.__aexit__ = AsyncMock(return_value=False)
    engine = MagicMock()
    engine.connect.return_value = ctx
    return engine


class TestCheckConnection:
    async def test_queries_a_migrated_table(self, monkeypatch) -> None:
        conn = MagicMock()
        conn.execute = AsyncMock()
        monkeypatch.setattr(database, "engine", _fake_engine(conn))

        await database.check_connection()

        assert "FROM auctions" in str(conn.execute.call_args.args[0])

    async def test_driver_error_propagates(self, monkeypatch) -> None:
        conn = MagicMock()
        conn.execute = AsyncMock(side_effect=OSError("connection refused"))
        monkeypatch.setattr(database, "engine", _fake_engine(conn))

        with pytest.raises(OSError, match="refused"):
            await database.check_connection()
