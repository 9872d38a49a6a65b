"""
Direct Yahoo Finance client using the v8 chart and v1 search APIs.
Neither endpoint needs auth/crumb. Quotes come from the chart metadata.
"""
import logging
from datetime import datetime, timedelta, timezone

import httpx

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

BASE_URL = "https://query1.finance.yahoo.com"
HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
}


def _first(values: list | None):
    return values[0] if values else None


class YahooDirectProvider(MarketDataProvider):
    name = "yahoo"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs = {"headers": HEADERS, "follow_redirects": True, "transport": self.transport}
        # Only override the transport default when a timeout is configured
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return httpx.AsyncClient(**kwargs)

    async def _get(self, path: str, params: dict) -> tuple[int, dict]:
        url = f"{self.base_url}{path}"
        try:
            async with self._client() as client:
                resp = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Yahoo request error for {path}: {e}")
            raise UpstreamError(f"Request to {path} failed: {e}") from e
        try:
            data = resp.json()
        except ValueError as e:
            logger.warning(f"Yahoo returned non-JSON body ({resp.status_code}) for {path}")
            raise UpstreamError(f"Invalid response from {path}") from e
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected payload from {path}")
        return resp.status_code, data

    async def _chart(self, symbol: str, params: dict) -> dict | None:
        """Return the first chart result, None when the payload has no result."""
        status, data = await self._get(f"/v8/finance/chart/{symbol}", params)
        chart = data.get("chart") or {}
        error = chart.get("error")
        if error:
            if error.get("code") == "Not Found":
                raise NotFoundError(symbol)
            logger.warning(f"Yahoo chart error for {symbol}: {error}")
            raise UpstreamError(f"Chart error for {symbol}: {error.get('description', error)}")
        if status != 200:
            logger.warning(f"Yahoo chart API returned {status} for {symbol}")
            raise UpstreamError(f"Chart API returned {status} for {symbol}")
        results = chart.get("result") or []
        return results[0] if results else None

    async def fetch_quote(self, symbol: str) -> ProviderQuote:
        result = await self._chart(symbol, {"range": "1d", "interval": "1d"})
        if not result:
            raise NotFoundError(symbol)
        meta = result.get("meta") or {}
        quote = _first((result.get("indicators") or {}).get("quote")) or {}
        previous_close = meta.get("regularMarketPreviousClose") or meta.get("previousClose") or meta.get("chartPreviousClose")
        return ProviderQuote(
            symbol=meta.get("symbol") or symbol,
            open=meta.get("regularMarketOpen") or _first(quote.get("open")),
            day_high=meta.get("regularMarketDayHigh"),
            day_low=meta.get("regularMarketDayLow"),
            price=meta.get("regularMarketPrice"),
            volume=meta.get("regularMarketVolume"),
            previous_close=previous_close,
        )

    async def fetch_historical(
        self,
        symbol: str,
        granularity: Granularity,
        interval: str = "5min",
        window: timedelta | None = None,
    ) -> list[ProviderBar]:
        params = {
            "interval": provider_interval(granularity, interval),
            "includePrePost": "false",
        }
        if window is None:
            params["range"] = "max"
        else:
            now = datetime.now(timezone.utc)
            params["period1"] = int((now - window).timestamp())
            params["period2"] = int(now.timestamp())

        result = await self._chart(symbol, params)
        if not result:
            return []
        return self._parse_bars(result)

    @staticmethod
    def _parse_bars(result: dict) -> list[ProviderBar]:
        timestamps = result.get("timestamp") or []
        quotes = _first((result.get("indicators") or {}).get("quote")) or {}

        def column(name: str) -> list:
            return quotes.get(name) or []

        opens, highs, lows, closes, volumes = (column(n) for n in ("open", "high", "low", "close", "volume"))
        bars = []
        for i, ts in enumerate(timestamps):
            o = opens[i] if i < len(opens) else None
            h = highs[i] if i < len(highs) else None
            l = lows[i] if i < len(lows) else None
            c = closes[i] if i < len(closes) else None
            if o is None or h is None or l is None or c is None:
                continue
            bars.append(ProviderBar(
                time=datetime.fromtimestamp(ts, tz=timezone.utc),
                open=o,
                high=h,
                low=l,
                close=c,
                volume=volumes[i] if i < len(volumes) else None,
            ))
        return bars

    async def _search(self, query: str, quotes_count: int, news_count: int) -> dict:
        params = {
            "q": query,
            "quotesCount": quotes_count,
            "newsCount": news_count,
            "listsCount": 0,
            "enableFuzzyQuery": "true",
        }
        status, data = await self._get("/v1/finance/search", params)
        if status != 200:
            logger.warning(f"Yahoo search API returned {status} for query '{query}'")
            raise UpstreamError(f"Search API returned {status}")
        return data

    async def fetch_search(self, query: str, limit: int = 10) -> ProviderSearchResult:
        data = await self._search(query, quotes_count=limit, news_count=0)
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
                for q in data.get("quotes") or []
            ],
        )

    async def fetch_news(self, symbol: str, limit: int = 10) -> list[ProviderNewsItem]:
        data = await self._search(symbol, quotes_count=0, news_count=limit)
        items = []
        for n in data.get("news") or []:
            resolutions = (n.get("thumbnail") or {}).get("resolutions") or []
            items.append(ProviderNewsItem(
                title=n.get("title"),
                summary=n.get("summary"),
                link=n.get("link"),
                publisher=n.get("publisher"),
                thumbnail_url=resolutions[0].get("url") if resolutions else None,
                publish_time=n.get("providerPublishTime"),
            ))
        return items
