import asyncio
import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from functools import partial

import yfinance as yf

from market_vault.exceptions import NotFoundError, UpstreamError
from market_vault.schemas.provider import (
    ProviderBar,
    ProviderNewsItem,
    ProviderQuote,
    ProviderSearchMatch,
    ProviderSearchResult,
)
from market_vault.schemas.stock import Granularity
from market_vault.services.provider import MarketDataProvider, provider_interval

logger = logging.getLogger(__name__)

# Thread pool for running yfinance (synchronous) calls
_executor = ThreadPoolExecutor(max_workers=2)


def _clean(val):
    """Drop NaN/inf values yfinance uses for missing fields."""
    if val is None:
        return None
    try:
        f = float(val)
    except (ValueError, TypeError):
        return None
    return None if math.isnan(f) or math.isinf(f) else f


def _iso_to_epoch(value) -> float | None:
    if isinstance(value, (int, float)):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None


class YFinanceProvider(MarketDataProvider):
    name = "yfinance"

    def __init__(self, min_interval: float = 1.0):
        self.min_interval = min_interval
        self._last_call_time = 0.0
        self._lock = threading.Lock()

    def _rate_limit(self):
        with self._lock:
            elapsed = time.monotonic() - self._last_call_time
            if elapsed < self.min_interval:
                time.sleep(self.min_interval - elapsed)
            self._last_call_time = time.monotonic()

    def _call(self, func, *args, **kwargs):
        self._rate_limit()
        try:
            return func(*args, **kwargs)
        except (NotFoundError, UpstreamError):
            raise
        except Exception as e:
            logger.error(f"yfinance error in {func.__name__}: {e}")
            raise UpstreamError(f"yfinance call failed: {e}") from e

    async def _run_sync(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_executor, partial(self._call, func, *args, **kwargs))

    # --- synchronous workers ---

    @staticmethod
    def _get_quote(symbol: str) -> ProviderQuote:
        try:
            info = yf.Ticker(symbol).fast_info
            price = _clean(info.last_price)
        except KeyError:
            raise NotFoundError(symbol) from None
        if price is None:
            raise NotFoundError(symbol)
        return ProviderQuote(
            symbol=symbol,
            open=_clean(info.open),
            day_high=_clean(info.day_high),
            day_low=_clean(info.day_low),
            price=price,
            volume=_clean(info.last_volume),
            previous_close=_clean(info.previous_close),
        )

    @staticmethod
    def _get_history(symbol: str, interval: str, window: timedelta | None) -> list[ProviderBar]:
        ticker = yf.Ticker(symbol)
        if window is None:
            df = ticker.history(period="max", interval=interval)
        else:
            df = ticker.history(start=datetime.now(timezone.utc) - window, interval=interval)
        if df is None or df.empty:
            return []
        bars = []
        for idx, row in df.iterrows():
            ts = idx.to_pydatetime() if hasattr(idx, "to_pydatetime") else idx
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=timezone.utc)
            o, h, l, c = (_clean(row[col]) for col in ("Open", "High", "Low", "Close"))
            if o is None or h is None or l is None or c is None:
                continue
            bars.append(ProviderBar(
                time=ts,
                open=o,
                high=h,
                low=l,
                close=c,
                volume=_clean(row["Volume"]),
            ))
        return bars

    @staticmethod
    def _get_search(query: str, limit: int) -> ProviderSearchResult:
        search = yf.Search(query, max_results=limit, news_count=0)
        return ProviderSearchResult(
            quotes=[
                ProviderSearchMatch(
                    symbol=q.get("symbol"),
                    short_name=q.get("shortname"),
                    long_name=q.get("longname"),
                    quote_type=q.get("quoteType"),
                    exchange=q.get("exchange"),
                    currency=q.get("currency"),
                )
                for q in search.quotes or []
            ],
        )

    @staticmethod
    def _get_news(symbol: str, limit: int) -> list[ProviderNewsItem]:
        news = yf.Ticker(symbol).news
        if not news:
            return []
        items = []
        for item in news[:limit]:
            content = item.get("content", {}) if isinstance(item, dict) else {}
            resolutions = (content.get("thumbnail") or item.get("thumbnail") or {}).get("resolutions") or []
            items.append(ProviderNewsItem(
                title=content.get("title", item.get("title")),
                summary=content.get("summary"),
                link=(content.get("canonicalUrl") or {}).get("url", item.get("link")),
                publisher=(content.get("provider") or {}).get("displayName", item.get("publisher")),
                thumbnail_url=resolutions[0].get("url") if resolutions else None,
                publish_time=_iso_to_epoch(content.get("pubDate", item.get("providerPublishTime"))),
            ))
        return items

    # --- adapter interface ---

    async def fetch_quote(self, symbol: str) -> ProviderQuote:
        return await self._run_sync(self._get_quote, symbol)

    async def fetch_search(self, query: str, limit: int = 10) -> ProviderSearchResult:
        return await self._run_sync(self._get_search, query, limit)

    async def fetch_historical(
        self,
        symbol: str,
        granularity: Granularity,
        interval: str = "5min",
        window: timedelta | None = None,
    ) -> list[ProviderBar]:
        yf_interval = provider_interval(granularity, interval)
        return await self._run_sync(self._get_history, symbol, yf_interval, window)

    async def fetch_news(self, symbol: str, limit: int = 10) -> list[ProviderNewsItem]:
        return await self._run_sync(self._get_news, symbol, limit)
