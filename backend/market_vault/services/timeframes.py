"""Chart timeframe routing: selector -> provider granularity and lookback window."""
import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from market_vault.exceptions import InvalidTimeframeError
from market_vault.schemas.stock import Candle, ChartPoint, Granularity

logger = logging.getLogger(__name__)

INTRADAY_INTERVALS = ("5min", "60min")
DEFAULT_TIMEFRAME = "1D"


@dataclass(frozen=True)
class Lookback:
    days: int = 0
    months: int = 0
    same_day: bool = False

    @property
    def unbounded(self) -> bool:
        return not (self.days or self.months or self.same_day)


@dataclass(frozen=True)
class TimeframeRoute:
    timeframe: str
    granularity: Granularity
    interval: str
    lookback: Lookback


TIMEFRAMES: dict[str, TimeframeRoute] = {
    "1D": TimeframeRoute("1D", Granularity.INTRADAY, "5min", Lookback(same_day=True)),
    "1W": TimeframeRoute("1W", Granularity.INTRADAY, "60min", Lookback(days=7)),
    "1M": TimeframeRoute("1M", Granularity.DAILY, "daily", Lookback(months=1)),
    "3M": TimeframeRoute("3M", Granularity.DAILY, "daily", Lookback(months=3)),
    "1Y": TimeframeRoute("1Y", Granularity.WEEKLY, "weekly", Lookback(months=12)),
    "5Y": TimeframeRoute("5Y", Granularity.WEEKLY, "weekly", Lookback(months=60)),
    "Max": TimeframeRoute("Max", Granularity.MONTHLY, "monthly", Lookback()),
}

# How far back each granularity is fetched upstream. Each window covers the
# longest lookback routed to that granularity.
FETCH_WINDOWS: dict[str, timedelta | None] = {
    "5min": timedelta(days=5),
    "60min": timedelta(days=30),
    Granularity.DAILY.value: timedelta(days=92),
    Granularity.WEEKLY.value: timedelta(days=5 * 366),
    Granularity.MONTHLY.value: None,  # full history
}


def parse_timeframe(value: str) -> TimeframeRoute:
    route = TIMEFRAMES.get(value)
    if route is None:
        raise InvalidTimeframeError(value)
    return route


def resolve_granularity(timeframe: str) -> TimeframeRoute:
    """Table lookup; unrecognised selectors fall back to 1D."""
    try:
        return parse_timeframe(timeframe)
    except InvalidTimeframeError as e:
        logger.warning(f"{e}, using {DEFAULT_TIMEFRAME}")
        return TIMEFRAMES[DEFAULT_TIMEFRAME]


def interval_minutes(interval: str) -> int:
    if interval not in INTRADAY_INTERVALS:
        raise ValueError(f"Unsupported intraday interval: '{interval}'")
    return int(interval.removesuffix("min"))


def fetch_window(granularity: Granularity, interval: str = "5min") -> timedelta | None:
    if granularity == Granularity.INTRADAY:
        return FETCH_WINDOWS[interval]
    return FETCH_WINDOWS[granularity.value]


def shift_months(d: date, months: int) -> date:
    """Move a date back by whole months, clamping to the target month's last day."""
    month_index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def window_start(lookback: Lookback, now: datetime) -> datetime | None:
    if lookback.unbounded:
        return None
    if lookback.same_day:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if lookback.months:
        shifted = shift_months(now.date(), lookback.months)
        return now.replace(year=shifted.year, month=shifted.month, day=shifted.day)
    return now - timedelta(days=lookback.days)


def _parse_timestamp(ts: str) -> datetime:
    if " " in ts:
        return datetime.strptime(ts, "%Y-%m-%d %H:%M:%S")
    return datetime.strptime(ts, "%Y-%m-%d")


def apply_lookback(series: dict[str, dict], route: TimeframeRoute, now: datetime) -> list[ChartPoint]:
    """Filter a canonical series container to the route's window, oldest first.

    Series timestamps are naive UTC, so ``now`` is compared without tzinfo.
    """
    naive_now = now.replace(tzinfo=None)
    start = window_start(route.lookback, naive_now)
    today = naive_now.strftime("%Y-%m-%d")

    points = []
    for ts, values in series.items():
        try:
            when = _parse_timestamp(ts)
        except ValueError:
            logger.warning(f"Skipping malformed series timestamp '{ts}'")
            continue
        if route.lookback.same_day:
            if not ts.startswith(today):
                continue
        elif start is not None and when < start:
            continue
        candle = Candle.model_validate(values)
        points.append((when, ChartPoint(
            date=ts,
            value=float(candle.close),
            open=float(candle.open),
            high=float(candle.high),
            low=float(candle.low),
            volume=float(candle.volume),
        )))

    points.sort(key=lambda p: p[0])
    return [p for _, p in points]
