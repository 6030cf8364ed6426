"""Tests for dx_common.datetime_utils."""

from datetime import UTC, datetime

from src.dx_common.datetime_utils import add_months, utc_now


def test_utc_now_is_aware() -> None:
    assert utc_now().tzinfo is not None


class TestAddMonths:
    def test_plain(self) -> None:
        assert add_months(datetime(2026, 3, 15, tzinfo=UTC), 1) == (
            datetime(2026, 4, 15, tzinfo=UTC)
        )

    def test_clamps_to_month_end(self) -> None:
        assert add_months(datetime(2026, 1, 31, tzinfo=UTC), 1) == (
            datetime(2026, 2, 28, tzinfo=UTC)
        )

    def test_leap_year(self) -> None:
        assert add_months(datetime(2028, 1, 31, tzinfo=UTC), 1) == (
            datetime(2028, 2, 29, tzinfo=UTC)
        )

    def test_crosses_year_forward(self) -> None:
        assert add_months(datetime(2026, 12, 10, tzinfo=UTC), 1) == (
            datetime(2027, 1, 10, tzinfo=UTC)
        )

    def test_negative_crosses_year(self) -> None:
        assert add_months(datetime(2026, 1, 10, tzinfo=UTC), -1) == (
            datetime(2025, 12, 10, tzinfo=UTC)
        )

    def test_keeps_time_of_day(self) -> None:
        moment = datetime(2026, 5, 5, 13, 45, 7, tzinfo=UTC)
        assert add_months(moment, 2).time() == moment.time()
