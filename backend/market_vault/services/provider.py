"""
Provider adapter interface.

Adapters call the upstream market data provider and return provider-shaped
results. Any transport, status or parse failure is raised as UpstreamError and
unknown symbols as NotFoundError; adapters never retry.
"""
from abc import ABC, abstractmethod
from datetime import timedelta

from market_vault.config import Settings
from market_vault.schemas.provider import (
    ProviderBar,
    ProviderNewsItem,
    ProviderQuote,
    ProviderSearchResult,
)
from market_vault.schemas.stock import Granularity

# Yahoo interval codes, shared by both adapters
YAHOO_INTERVALS = {
    "5min": "5m",
    "60min": "60m",
    Granularity.DAILY.value: "1d",
    Granularity.WEEKLY.value: "1wk",
    Granularity.MONTHLY.value: "1mo",
}


def provider_interval(granularity: Granularity, interval: str = "5min") -> str:
    key = interval if granularity == Granularity.INTRADAY else granularity.value
    try:
        return YAHOO_INTERVALS[key]
    except KeyError:
        raise ValueError(f"Unsupported interval '{interval}' for {granularity.value} series") from None


class MarketDataProvider(ABC):
    name: str = "provider"

    @abstractmethod
    async def fetch_quote(self, symbol: str) -> ProviderQuote: ...

    @abstractmethod
    async def fetch_search(self, query: str, limit: int = 10) -> ProviderSearchResult: ...

    @abstractmethod
    async def fetch_historical(
        self,
        symbol: str,
        granularity: Granularity,
        interval: str = "5min",
        window: timedelta | None = None,
    ) -> list[ProviderBar]:
        """Bars oldest first; an empty list when the provider has none."""

    @abstractmethod
    async def fetch_news(self, symbol: str, limit: int = 10) -> list[ProviderNewsItem]: ...


def get_provider(settings: Settings) -> MarketDataProvider:
    if settings.provider == "yfinance":
        from market_vault.services.yfinance_service import YFinanceProvider
        return YFinanceProvider(min_interval=settings.yfinance_min_interval)
    if settings.provider == "yahoo":
        from market_vault.services.yahoo_direct import YahooDirectProvider
        return YahooDirectProvider(base_url=settings.yahoo_base_url, timeout=settings.http_timeout)
    raise ValueError(f"Unknown market data provider '{settings.provider}'")
