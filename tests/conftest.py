"""
Shared test fixtures and helpers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from market_vault.config import Settings
from market_vault.exceptions import NotFoundError
from market_vault.main import create_app
from market_vault.schemas.provider import (
    ProviderBar,
    ProviderNewsItem,
    ProviderQuote,
    ProviderSearchResult,
)
from market_vault.schemas.stock import Granularity
from market_vault.services.market_data import MarketDataService
from market_vault.services.provider import MarketDataProvider
from market_vault.services.repository import MemoryRepository
from market_vault.services.synthetic import SyntheticSeriesGenerator

# A Wednesday, mid-session
FIXED_NOW = datetime(2026, 10, 14, 15, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


class FakeProvider(MarketDataProvider):
    """In-memory provider; configured values may be exceptions to raise."""

    name = "fake"

    def __init__(self) -> None:
        self.quotes: dict[str, ProviderQuote | Exception] = {}
        self.bars: dict[tuple[str, Granularity], list[ProviderBar] | Exception] = {}
        self.search_result: ProviderSearchResult | Exception = ProviderSearchResult()
        self.news: dict[str, list[ProviderNewsItem] | Exception] = {}
        self.calls: list[tuple] = []

    @staticmethod
    def _resolve(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_quote(self, symbol: str) -> ProviderQuote:
        self.calls.append(("quote", symbol))
        if symbol not in self.quotes:
            raise NotFoundError(symbol)
        return self._resolve(self.quotes[symbol])

    async def fetch_search(self, query: str, limit: int = 10) -> ProviderSearchResult:
        self.calls.append(("search", query))
        return self._resolve(self.search_result)

    async def fetch_historical(self, symbol, granularity, interval="5min", window=None):
        self.calls.append(("historical", symbol, granularity, interval, window))
        return self._resolve(self.bars.get((symbol, granularity), []))

    async def fetch_news(self, symbol: str, limit: int = 10) -> list[ProviderNewsItem]:
        self.calls.append(("news", symbol))
        return self._resolve(self.news.get(symbol, []))


def make_bars(closes: list[float], start: datetime, step: timedelta) -> list[ProviderBar]:
    return [
        ProviderBar(
            time=start + i * step,
            open=c - 1,
            high=c + 2,
            low=c - 2,
            close=c,
            volume=1_000_000 + i,
        )
        for i, c in enumerate(closes)
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, synthetic_seed=7)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def generator() -> SyntheticSeriesGenerator:
    return SyntheticSeriesGenerator.from_seed(42)


@pytest.fixture
def service(provider, settings, generator) -> MarketDataService:
    return MarketDataService(provider, settings, generator=generator, clock=lambda: FIXED_NOW)


@pytest.fixture
def repository() -> MemoryRepository:
    return MemoryRepository()


@pytest.fixture
def client(service, settings, repository) -> TestClient:
    app = create_app(settings=settings, repository=repository, market_data=service)
    return TestClient(app)


@pytest.fixture
def aapl_quote() -> ProviderQuote:
    return ProviderQuote(
        symbol="AAPL",
        open="149.5",
        day_high=151.2,
        day_low="147.9",
        price=150,
        volume="52000000",
        previous_close=148,
    )
