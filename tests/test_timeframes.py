"""
Tests for chart timeframe routing and lookback filtering.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from market_vault.exceptions import InvalidTimeframeError
from market_vault.schemas.stock import Granularity
from market_vault.services.timeframes import (
    TIMEFRAMES,
    apply_lookback,
    fetch_window,
    interval_minutes,
    parse_timeframe,
    resolve_granularity,
    shift_months,
    window_start,
)
from tests.conftest import FIXED_NOW


def _candle(close: float) -> dict:
    return {
        "1. open": str(close - 1),
        "2. high": str(close + 1),
        "3. low": str(close - 2),
        "4. close": str(close),
        "5. volume": "100",
    }


# ---------------------------------------------------------------------------
# Routing table
# ---------------------------------------------------------------------------


class TestRouting:
    @pytest.mark.parametrize("timeframe, granularity, interval", [
        ("1D", Granularity.INTRADAY, "5min"),
        ("1W", Granularity.INTRADAY, "60min"),
        ("1M", Granularity.DAILY, "daily"),
        ("3M", Granularity.DAILY, "daily"),
        ("1Y", Granularity.WEEKLY, "weekly"),
        ("5Y", Granularity.WEEKLY, "weekly"),
        ("Max", Granularity.MONTHLY, "monthly"),
    ])
    def test_table(self, timeframe, granularity, interval):
        route = resolve_granularity(timeframe)
        assert route.timeframe == timeframe
        assert route.granularity == granularity
        assert route.interval == interval

    @pytest.mark.parametrize("timeframe", ["", "2D", "max", "1d", "10Y"])
    def test_unknown_falls_back_to_1d(self, timeframe):
        assert resolve_granularity(timeframe) is TIMEFRAMES["1D"]

    def test_parse_rejects_unknown(self):
        with pytest.raises(InvalidTimeframeError) as exc_info:
            parse_timeframe("6M")
        assert exc_info.value.timeframe == "6M"

    def test_only_max_is_unbounded(self):
        unbounded = [name for name, route in TIMEFRAMES.items() if route.lookback.unbounded]
        assert unbounded == ["Max"]

    def test_interval_minutes(self):
        assert interval_minutes("5min") == 5
        assert interval_minutes("60min") == 60
        with pytest.raises(ValueError):
            interval_minutes("15min")

    @pytest.mark.parametrize("timeframe", ["1D", "1W", "1M", "3M", "1Y", "5Y"])
    def test_fetch_window_covers_lookback(self, timeframe):
        route = TIMEFRAMES[timeframe]
        window = fetch_window(route.granularity, route.interval)
        start = window_start(route.lookback, FIXED_NOW)
        assert FIXED_NOW - window <= start

    def test_monthly_fetches_full_history(self):
        assert fetch_window(Granularity.MONTHLY) is None


# ---------------------------------------------------------------------------
# Date arithmetic
# ---------------------------------------------------------------------------


class TestShiftMonths:
    @pytest.mark.parametrize("start, months, expected", [
        (date(2026, 10, 14), 1, date(2026, 9, 14)),
        (date(2026, 10, 14), 12, date(2025, 10, 14)),
        (date(2026, 3, 31), 1, date(2026, 2, 28)),
        (date(2024, 3, 31), 1, date(2024, 2, 29)),
        (date(2026, 1, 15), 1, date(2025, 12, 15)),
        (date(2026, 5, 31), 60, date(2021, 5, 31)),
        (date(2026, 5, 10), 0, date(2026, 5, 10)),
    ])
    def test_shift(self, start, months, expected):
        assert shift_months(start, months) == expected

    def test_window_start(self):
        assert window_start(TIMEFRAMES["1D"].lookback, FIXED_NOW) == datetime(2026, 10, 14, tzinfo=timezone.utc)
        assert window_start(TIMEFRAMES["1W"].lookback, FIXED_NOW) == FIXED_NOW - timedelta(days=7)
        assert window_start(TIMEFRAMES["3M"].lookback, FIXED_NOW) == datetime(2026, 7, 14, 15, 30, tzinfo=timezone.utc)
        assert window_start(TIMEFRAMES["Max"].lookback, FIXED_NOW) is None


# ---------------------------------------------------------------------------
# Lookback filtering
# ---------------------------------------------------------------------------


class TestApplyLookback:
    def test_same_day_only(self):
        series = {
            "2026-10-14 15:25:00": _candle(101),
            "2026-10-14 09:30:00": _candle(100),
            "2026-10-13 15:55:00": _candle(99),
        }
        points = apply_lookback(series, TIMEFRAMES["1D"], FIXED_NOW)
        assert [p.date for p in points] == ["2026-10-14 09:30:00", "2026-10-14 15:25:00"]
        assert points[0].value == 100.0
        assert points[0].open == 99.0
        assert points[0].volume == 100.0

    def test_month_window_sorted_ascending(self):
        series = {
            "2026-10-14": _candle(3),
            "2026-09-15": _candle(2),
            "2026-09-14": _candle(1),
            "2026-08-01": _candle(0),
        }
        points = apply_lookback(series, TIMEFRAMES["1M"], FIXED_NOW)
        # 2026-09-14 is before the 15:30 window start on that date
        assert [p.date for p in points] == ["2026-09-15", "2026-10-14"]

    def test_max_keeps_everything(self):
        series = {f"{year}-01-01": _candle(year) for year in range(1990, 2027)}
        points = apply_lookback(series, TIMEFRAMES["Max"], FIXED_NOW)
        assert len(points) == len(series)
        assert points[0].date == "1990-01-01"

    def test_malformed_timestamps_skipped(self):
        series = {"not a date": _candle(1), "2026-10-14": _candle(2)}
        points = apply_lookback(series, TIMEFRAMES["1Y"], FIXED_NOW)
        assert [p.date for p in points] == ["2026-10-14"]

    def test_empty_series(self):
        assert apply_lookback({}, TIMEFRAMES["5Y"], FIXED_NOW) == []
