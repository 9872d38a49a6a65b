"""
Maps provider-shaped results onto the canonical response schema
("Global Quote", "Time Series (...)", bestMatches, feed).

Every numeric provider field may arrive as a number, a numeric string or not at
all. Absent or unparseable values become 0 so downstream arithmetic is always
defined, and all numbers leave this module as decimal strings.
"""
import math
from datetime import date, datetime, timezone

import numpy as np

from market_vault.exceptions import NotFoundError
from market_vault.schemas.provider import (
    ProviderBar,
    ProviderNewsItem,
    ProviderQuote,
    ProviderSearchResult,
    RawNumber,
)
from market_vault.schemas.stock import (
    Candle,
    GlobalQuote,
    Granularity,
    NewsItem,
    NewsTopic,
    SearchMatch,
)

INTRADAY_TIMESTAMP = "%Y-%m-%d %H:%M:%S"
DATE_TIMESTAMP = "%Y-%m-%d"

DEFAULT_NEWS_URL = "https://finance.yahoo.com"

PLACEHOLDER_NEWS = {
    "title": "Markets Today: Wizarding Finance Update",
    "summary": "The market is experiencing changes as various magical companies adjust to the new economic climate.",
    "url": DEFAULT_NEWS_URL,
    "source": "Magic Financial Times",
}


def to_number(value: RawNumber) -> float:
    """Coerce a raw provider value to a finite float, 0 when absent or invalid."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        f = float(value.strip()) if isinstance(value, str) else float(value)
    except (ValueError, TypeError):
        return 0.0
    return 0.0 if math.isnan(f) or math.isinf(f) else f


def number_str(value: float) -> str:
    """Shortest fixed-point decimal string for a number; integral values drop the fraction."""
    if value == int(value):
        return str(int(value))
    return np.format_float_positional(float(value), trim="-")


def fixed(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}"


def series_key(granularity: Granularity, interval: str = "5min") -> str:
    """Name of the container holding the candles for a granularity."""
    if granularity == Granularity.INTRADAY:
        return f"Time Series ({interval})"
    if granularity == Granularity.DAILY:
        return "Time Series (Daily)"
    if granularity == Granularity.WEEKLY:
        return "Weekly Time Series"
    return "Monthly Time Series"


def timestamp_format(granularity: Granularity) -> str:
    return INTRADAY_TIMESTAMP if granularity == Granularity.INTRADAY else DATE_TIMESTAMP


def series_information(granularity: Granularity, interval: str = "5min") -> str:
    if granularity == Granularity.INTRADAY:
        return f"Intraday Time Series with {interval} interval"
    if granularity == Granularity.DAILY:
        return "Daily Time Series"
    if granularity == Granularity.WEEKLY:
        return "Weekly Time Series"
    return "Monthly Time Series"


def build_meta(
    granularity: Granularity,
    symbol: str,
    now: datetime,
    interval: str = "5min",
    information: str | None = None,
) -> dict[str, str]:
    info = information or series_information(granularity, interval)
    if granularity == Granularity.INTRADAY:
        return {
            "1. Information": info,
            "2. Symbol": symbol,
            "3. Last Refreshed": now.isoformat(),
            "4. Interval": interval,
            "5. Output Size": "Compact",
            "6. Time Zone": "US/Eastern",
        }
    meta = {
        "1. Information": info,
        "2. Symbol": symbol,
        "3. Last Refreshed": now.strftime(DATE_TIMESTAMP),
    }
    if granularity == Granularity.DAILY:
        meta["4. Output Size"] = "Compact"
        meta["5. Time Zone"] = "US/Eastern"
    else:
        meta["4. Time Zone"] = "US/Eastern"
    return meta


def series_response(
    granularity: Granularity,
    symbol: str,
    candles: dict[str, Candle],
    now: datetime,
    interval: str = "5min",
    information: str | None = None,
) -> dict:
    """Assemble a time series response with exactly one granularity container."""
    return {
        "Meta Data": build_meta(granularity, symbol, now, interval, information),
        series_key(granularity, interval): {
            ts: candle.model_dump(by_alias=True) for ts, candle in candles.items()
        },
    }


def empty_series(granularity: Granularity, symbol: str, now: datetime, interval: str = "5min") -> dict:
    return series_response(granularity, symbol, {}, now, interval)


def normalize_quote(quote: ProviderQuote | None, symbol: str, today: date | None = None) -> GlobalQuote:
    """Map a provider quote to the "Global Quote" shape.

    A missing quote is an explicit not-found; a zeroed quote would read as a
    flat market.
    """
    if quote is None:
        raise NotFoundError(symbol)

    today = today or datetime.now(timezone.utc).date()
    price = to_number(quote.price)
    previous_close = to_number(quote.previous_close)
    if quote.change is not None:
        change = to_number(quote.change)
    else:
        change = round(price - previous_close, 4)
    change_percent = round(change / previous_close * 100, 4) if previous_close else 0.0

    return GlobalQuote(
        symbol=quote.symbol or symbol,
        open=number_str(to_number(quote.open)),
        high=number_str(to_number(quote.day_high)),
        low=number_str(to_number(quote.day_low)),
        price=number_str(price),
        volume=number_str(int(to_number(quote.volume))),
        latest_trading_day=today.strftime(DATE_TIMESTAMP),
        previous_close=number_str(previous_close),
        change=number_str(change),
        change_percent=f"{number_str(change_percent)}%",
    )


def normalize_bars(bars: list[ProviderBar], granularity: Granularity) -> dict[str, Candle]:
    fmt = timestamp_format(granularity)
    candles: dict[str, Candle] = {}
    for bar in bars:
        ts = bar.time.astimezone(timezone.utc) if bar.time.tzinfo else bar.time
        candles[ts.strftime(fmt)] = Candle(
            open=number_str(to_number(bar.open)),
            high=number_str(to_number(bar.high)),
            low=number_str(to_number(bar.low)),
            close=number_str(to_number(bar.close)),
            volume=number_str(int(to_number(bar.volume))),
        )
    return candles


def normalize_search(result: ProviderSearchResult, limit: int | None = None) -> list[SearchMatch]:
    matches = []
    for q in result.quotes:
        if not q.symbol:
            continue
        matches.append(SearchMatch(
            symbol=q.symbol,
            name=q.short_name or q.long_name or "",
            type=q.quote_type or "Equity",
            region=q.exchange or "US",
            currency=q.currency or "USD",
        ))
    return matches[:limit] if limit is not None else matches


def _epoch_to_iso(epoch: RawNumber, now: datetime) -> str:
    seconds = to_number(epoch)
    try:
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc) if seconds else now
    except (OverflowError, OSError, ValueError):
        dt = now
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def normalize_news(
    items: list[ProviderNewsItem],
    symbol: str,
    now: datetime,
    limit: int | None = None,
) -> list[NewsItem]:
    selected = items[:limit] if limit is not None else items
    return [
        NewsItem(
            title=item.title or f"Market News for {symbol}",
            summary=item.summary or "Market updates and financial news",
            url=item.link or DEFAULT_NEWS_URL,
            banner_image=item.thumbnail_url or "",
            source=item.publisher or "Yahoo Finance",
            time_published=_epoch_to_iso(item.publish_time, now),
            topics=[NewsTopic(topic=symbol)],
        )
        for item in selected
    ]


def placeholder_news(now: datetime) -> NewsItem:
    return NewsItem(
        **PLACEHOLDER_NEWS,
        time_published=now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        topics=[NewsTopic(topic="Markets")],
    )
