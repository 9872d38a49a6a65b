"""
Market data pipeline: provider adapter -> normalizer / synthetic generator,
with a fallback policy at every boundary.

Series requests resolve to the first tier that yields data:
  1. real bars from the provider
  2. (intraday only) intraday candles rebuilt from recent daily bars
  3. synthetic candles derived from a live quote
  4. an empty, well-formed container
News falls back to a single placeholder item. Search and quote errors are
raised to the caller.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import TypeVar

from market_vault.analysis.positions import (
    build_portfolio_summary,
    top_movers,
    watchlist_rows,
)
from market_vault.config import Settings
from market_vault.exceptions import MarketDataError
from market_vault.schemas.portfolio import (
    PortfolioStock,
    PortfolioSummary,
    StockSummary,
    WatchlistQuote,
    WatchlistStock,
)
from market_vault.schemas.provider import ProviderQuote
from market_vault.schemas.stock import ChartData, GlobalQuote, Granularity
from market_vault.services.normalizer import (
    empty_series,
    normalize_bars,
    normalize_news,
    normalize_quote,
    normalize_search,
    placeholder_news,
    series_information,
    series_key,
    series_response,
)
from market_vault.services.provider import MarketDataProvider
from market_vault.services.synthetic import SyntheticSeriesGenerator, expand_daily_bars
from market_vault.services.timeframes import apply_lookback, fetch_window, resolve_granularity

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUBSTITUTE_DAILY_WINDOW = timedelta(days=10)


async def gather_limited(calls: list[Callable[[], Awaitable[T]]], limit: int) -> list[T | BaseException]:
    """Run calls with at most `limit` in flight; results keep call order.

    A limit of 1 issues the calls strictly one after another. Exceptions are
    returned in place of results.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(call):
        async with semaphore:
            return await call()

    return await asyncio.gather(*(run(c) for c in calls), return_exceptions=True)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MarketDataService:
    def __init__(
        self,
        provider: MarketDataProvider,
        settings: Settings,
        generator: SyntheticSeriesGenerator | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.provider = provider
        self.settings = settings
        self.generator = generator or SyntheticSeriesGenerator.from_seed(settings.synthetic_seed)
        self.clock = clock

    # --- Search ---

    async def search(self, query: str) -> dict:
        query = (query or "").strip()
        if len(query) < self.settings.search_min_length:
            return {"bestMatches": []}
        result = await self.provider.fetch_search(query, self.settings.search_max_results)
        matches = normalize_search(result, self.settings.search_max_results)
        return {"bestMatches": [m.model_dump(by_alias=True) for m in matches]}

    # --- Quotes ---

    async def get_quote(self, symbol: str) -> GlobalQuote:
        quote = await self.provider.fetch_quote(symbol)
        return normalize_quote(quote, symbol, self.clock().date())

    async def get_quotes(self, symbols: list[str]) -> dict[str, GlobalQuote | None]:
        """Quotes for a batch of symbols; a failed lookup maps to None."""
        calls = [lambda s=s: self.get_quote(s) for s in symbols]
        results = await gather_limited(calls, self.settings.quote_concurrency)
        quotes = {}
        for symbol, result in zip(symbols, results):
            if isinstance(result, BaseException):
                logger.warning(f"Quote lookup failed for {symbol}: {result}")
                quotes[symbol] = None
            else:
                quotes[symbol] = result
        return quotes

    async def _quote_or_none(self, symbol: str) -> ProviderQuote | None:
        try:
            return await self.provider.fetch_quote(symbol)
        except MarketDataError as e:
            logger.info(f"No quote for {symbol} ({e})")
            return None

    # --- Time series ---

    async def get_series(self, symbol: str, granularity: Granularity, interval: str = "5min") -> dict:
        """Canonical time series response; never raises."""
        now = self.clock()
        try:
            return await self._series(symbol, granularity, interval, now)
        except Exception:
            logger.exception(f"{granularity.value} series pipeline failed for {symbol}")
            return empty_series(granularity, symbol, now, interval)

    async def _series(self, symbol: str, granularity: Granularity, interval: str, now: datetime) -> dict:
        try:
            bars = await self.provider.fetch_historical(
                symbol, granularity, interval, fetch_window(granularity, interval)
            )
        except MarketDataError as e:
            logger.error(f"Historical {granularity.value} fetch failed for {symbol}: {e}")
            return empty_series(granularity, symbol, now, interval)

        if bars:
            return series_response(granularity, symbol, normalize_bars(bars, granularity), now, interval)

        if granularity == Granularity.INTRADAY:
            substitute = await self._intraday_from_daily(symbol, interval, now)
            if substitute is not None:
                return substitute

        quote = await self._quote_or_none(symbol)
        if quote is None:
            logger.info(f"No {granularity.value} data or quote for {symbol}, returning empty series")
            return empty_series(granularity, symbol, now, interval)

        candles = self.generator.generate(quote, granularity, now, interval)
        information = f"{series_information(granularity, interval)} (synthetic)"
        return series_response(granularity, symbol, candles, now, interval, information)

    async def _intraday_from_daily(self, symbol: str, interval: str, now: datetime) -> dict | None:
        try:
            daily = await self.provider.fetch_historical(
                symbol, Granularity.DAILY, window=SUBSTITUTE_DAILY_WINDOW
            )
        except MarketDataError as e:
            logger.info(f"Daily substitute unavailable for {symbol}: {e}")
            return None
        if not daily:
            return None
        logger.info(f"Building {interval} series for {symbol} from {len(daily)} daily bars")
        return series_response(
            Granularity.INTRADAY,
            symbol,
            expand_daily_bars(daily, interval),
            now,
            interval,
            "Intraday Time Series (substitute with daily)",
        )

    async def get_chart(self, symbol: str, timeframe: str) -> ChartData:
        route = resolve_granularity(timeframe)
        data = await self.get_series(symbol, route.granularity, route.interval)
        container = data[series_key(route.granularity, route.interval)]
        return ChartData(
            symbol=symbol,
            timeframe=route.timeframe,
            granularity=route.granularity,
            interval=route.interval,
            information=data["Meta Data"]["1. Information"],
            points=apply_lookback(container, route, self.clock()),
        )

    # --- News ---

    async def get_news(self) -> dict:
        """News for the configured symbols, fetched concurrently.

        A failing symbol contributes nothing; an empty feed is replaced by one
        placeholder item.
        """
        now = self.clock()
        symbols = self.settings.news_symbols
        per_symbol = self.settings.news_items_per_symbol
        results = await asyncio.gather(
            *(self.provider.fetch_news(s, per_symbol) for s in symbols),
            return_exceptions=True,
        )
        feed = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, BaseException):
                logger.warning(f"News fetch failed for {symbol}: {result}")
                continue
            feed.extend(normalize_news(result, symbol, now, per_symbol))
        if not feed:
            logger.info("No news available, returning placeholder feed")
            feed = [placeholder_news(now)]
        return {"feed": [item.model_dump(exclude_none=True) for item in feed]}

    # --- Dashboard views ---

    async def get_top_movers(self) -> list[StockSummary]:
        symbols = self.settings.popular_symbols[: self.settings.movers_limit]
        return top_movers(await self.get_quotes(symbols))

    async def get_portfolio_summary(self, stocks: list[PortfolioStock]) -> PortfolioSummary:
        symbols = list(dict.fromkeys(s.symbol for s in stocks))
        return build_portfolio_summary(stocks, await self.get_quotes(symbols))

    async def get_watchlist_quotes(self, stocks: list[WatchlistStock]) -> list[WatchlistQuote]:
        symbols = list(dict.fromkeys(s.symbol for s in stocks))
        return watchlist_rows(stocks, await self.get_quotes(symbols))
