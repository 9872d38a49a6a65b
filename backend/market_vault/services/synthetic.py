"""
Synthetic candle series for symbols with a live quote but no historical bars.

Shapes per granularity:
- intraday: 96 buckets walking back from now, price oscillating around the
  current price by sin(i / 10) * 1%, no trend, volume split evenly
- daily/weekly/monthly: price drifts down linearly further back in time with
  uniform noise per bucket and a fixed high/low band

Every candle satisfies low <= min(open, close) <= max(open, close) <= high by
construction. Randomness comes from an injected numpy Generator; an unseeded
generator is intentionally non-deterministic.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import numpy as np

from market_vault.schemas.provider import ProviderBar, ProviderQuote
from market_vault.schemas.stock import Candle, Granularity
from market_vault.services.normalizer import (
    DATE_TIMESTAMP,
    INTRADAY_TIMESTAMP,
    fixed,
    to_number,
)
from market_vault.services.timeframes import interval_minutes, shift_months

logger = logging.getLogger(__name__)

DEFAULT_PRICE = 100.0
DEFAULT_VOLUME = 1000.0

INTRADAY_BUCKETS = 96
INTRADAY_AMPLITUDE = 0.01
INTRADAY_OPEN_OFFSET = 0.1
INTRADAY_BAND_OFFSET = 0.2

OPEN_FACTOR = 0.9995


@dataclass(frozen=True)
class PeriodicProfile:
    buckets: int
    drift: float  # fractional price decline per bucket back in time
    noise: float  # uniform noise half-width
    band: float  # high/low distance from close
    base_volume: int
    volume_spread: float  # full width of the uniform volume jitter


PROFILES: dict[Granularity, PeriodicProfile] = {
    Granularity.DAILY: PeriodicProfile(30, 0.002, 0.01, 0.01, 1_000_000, 0.3),
    Granularity.WEEKLY: PeriodicProfile(52, 0.001, 0.015, 0.02, 5_000_000, 0.4),
    Granularity.MONTHLY: PeriodicProfile(60, 0.004, 0.025, 0.04, 20_000_000, 0.5),
}

# Intraday pattern used when a day's intraday bars are rebuilt from its daily bar
TRADING_START_HOUR = 9
TRADING_HOURS = 7
INTRADAY_DIP = 0.005
DAY_SCALE = 0.001


class SyntheticSeriesGenerator:
    def __init__(self, rng: np.random.Generator | None = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    @classmethod
    def from_seed(cls, seed: int | None) -> "SyntheticSeriesGenerator":
        return cls(np.random.default_rng(seed))

    def generate(
        self,
        quote: ProviderQuote,
        granularity: Granularity,
        now: datetime | None = None,
        interval: str = "5min",
    ) -> dict[str, Candle]:
        now = now or datetime.now(timezone.utc)
        price = to_number(quote.price)
        if price <= 0:
            price = DEFAULT_PRICE

        if granularity == Granularity.INTRADAY:
            volume = to_number(quote.volume) or DEFAULT_VOLUME
            candles = self._intraday(price, volume, now, interval_minutes(interval))
        else:
            candles = self._periodic(price, PROFILES[granularity], granularity, now)

        logger.info(f"Generated {len(candles)} synthetic {granularity.value} candles for {quote.symbol}")
        return candles

    def _intraday(self, price: float, volume: float, now: datetime, step_minutes: int) -> dict[str, Candle]:
        bucket_volume = str(math.floor(volume / INTRADAY_BUCKETS))
        candles = {}
        for i in range(INTRADAY_BUCKETS):
            point = now - timedelta(minutes=i * step_minutes)
            adjusted = price + math.sin(i / 10) * INTRADAY_AMPLITUDE * price
            candles[point.astimezone(timezone.utc).strftime(INTRADAY_TIMESTAMP)] = Candle(
                open=fixed(max(adjusted - INTRADAY_OPEN_OFFSET, 0.0)),
                high=fixed(adjusted + INTRADAY_BAND_OFFSET),
                low=fixed(max(adjusted - INTRADAY_BAND_OFFSET, 0.0)),
                close=fixed(adjusted),
                volume=bucket_volume,
            )
        return candles

    def _bucket_dates(self, granularity: Granularity, count: int, now: datetime) -> list[tuple[int, datetime]]:
        today = now.astimezone(timezone.utc).date()
        dates = []
        for i in range(count):
            if granularity == Granularity.DAILY:
                d = today - timedelta(days=i)
                if d.weekday() >= 5:
                    continue
            elif granularity == Granularity.WEEKLY:
                d = today - timedelta(weeks=i)
            else:
                d = shift_months(today, i)
            dates.append((i, d))
        return dates

    def _periodic(
        self,
        price: float,
        profile: PeriodicProfile,
        granularity: Granularity,
        now: datetime,
    ) -> dict[str, Candle]:
        candles = {}
        half_spread = profile.volume_spread / 2
        for i, d in self._bucket_dates(granularity, profile.buckets, now):
            trend = 1 - i * profile.drift
            noise = self.rng.uniform(-profile.noise, profile.noise)
            adjusted = price * trend * (1 + noise)
            volume = math.floor(profile.base_volume * (1 + self.rng.uniform(-half_spread, half_spread)))
            candles[d.strftime(DATE_TIMESTAMP)] = Candle(
                open=fixed(adjusted * OPEN_FACTOR),
                high=fixed(adjusted * (1 + profile.band)),
                low=fixed(adjusted * (1 - profile.band)),
                close=fixed(adjusted),
                volume=str(volume),
            )
        return candles


def expand_daily_bars(bars: list[ProviderBar], interval: str = "5min") -> dict[str, Candle]:
    """Rebuild intraday candles from daily bars with a U-shaped session pattern.

    Prices dip towards mid-session and recover into the close; each successive
    day is scaled down by 0.1%. High/low are widened to enclose open and close.
    """
    step = interval_minutes(interval)
    candles = {}
    for day_index, bar in enumerate(bars):
        close = to_number(bar.close) or DEFAULT_PRICE
        scale = 1 - day_index * DAY_SCALE
        open_ = (to_number(bar.open) or close) * scale
        high = (to_number(bar.high) or close * 1.01) * scale
        low = (to_number(bar.low) or close * 0.99) * scale
        volume = str(math.floor((to_number(bar.volume) or DEFAULT_VOLUME) / INTRADAY_BUCKETS * step / 5))
        day = bar.time.astimezone(timezone.utc) if bar.time.tzinfo else bar.time

        for minutes in range(0, TRADING_HOURS * 60 + 1, step):
            progress = minutes / 60 / TRADING_HOURS
            adjusted = close * (1 - math.sin(progress * math.pi) * INTRADAY_DIP)
            point = day.replace(hour=TRADING_START_HOUR, minute=0, second=0, microsecond=0) + timedelta(minutes=minutes)
            candles[point.strftime(INTRADAY_TIMESTAMP)] = Candle(
                open=fixed(open_),
                high=fixed(max(high, open_, adjusted)),
                low=fixed(min(low, open_, adjusted)),
                close=fixed(adjusted),
                volume=volume,
            )
    return candles
