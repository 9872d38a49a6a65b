"""
Tests for the in-memory dashboard repository.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from market_vault.schemas.portfolio import PortfolioStockCreate, UserCreate, WatchlistStockCreate
from market_vault.services.repository import MemoryRepository


def _holding(symbol="NVDA", user_id=1) -> PortfolioStockCreate:
    return PortfolioStockCreate(
        user_id=user_id,
        symbol=symbol,
        name=symbol,
        shares=1,
        purchase_price=10,
        purchase_date=datetime(2026, 9, 1, tzinfo=timezone.utc),
    )


class TestDemoData:
    def test_seeded(self, repository):
        assert repository.get_user_by_username("demo").id == 1
        assert len(repository.get_market_indices()) == 6
        assert len(repository.get_portfolio_stocks(1)) == 4
        assert len(repository.get_watchlist_stocks(1)) == 4

    def test_purchase_dates_within_last_month(self):
        repo = MemoryRepository(rng=random.Random(3))
        now = datetime.now(timezone.utc)
        for stock in repo.get_portfolio_stocks(1):
            assert now - timedelta(days=30, seconds=5) <= stock.purchase_date <= now

    def test_empty(self):
        repo = MemoryRepository(seed_demo=False)
        assert repo.get_market_indices() == []
        assert repo.get_user(1) is None


class TestPortfolio:
    def test_ids_increment_per_entity(self):
        repo = MemoryRepository(seed_demo=False)
        user = repo.create_user(UserCreate(username="ann", password="x"))
        first = repo.create_portfolio_stock(_holding("A", user.id))
        second = repo.create_portfolio_stock(_holding("B", user.id))
        watch = repo.create_watchlist_stock(WatchlistStockCreate(user_id=user.id, symbol="C", name="C"))
        assert (first.id, second.id, watch.id) == (1, 2, 1)

    def test_filtered_by_user(self):
        repo = MemoryRepository(seed_demo=False)
        repo.create_portfolio_stock(_holding("A", 1))
        repo.create_portfolio_stock(_holding("B", 2))
        assert [s.symbol for s in repo.get_portfolio_stocks(2)] == ["B"]

    def test_update(self, repository):
        updated = repository.update_portfolio_stock(1, {"shares": 20, "id": 99})
        assert updated.id == 1
        assert updated.shares == 20
        assert repository.get_portfolio_stock(1).shares == 20
        assert repository.update_portfolio_stock(999, {"shares": 1}) is None

    def test_delete(self, repository):
        assert repository.delete_portfolio_stock(1) is True
        assert repository.get_portfolio_stock(1) is None
        assert repository.delete_portfolio_stock(1) is False

    def test_ids_not_reused_after_delete(self):
        repo = MemoryRepository(seed_demo=False)
        first = repo.create_portfolio_stock(_holding())
        repo.delete_portfolio_stock(first.id)
        assert repo.create_portfolio_stock(_holding()).id == 2


class TestWatchlistAndIndices:
    def test_watchlist_delete(self, repository):
        stock = repository.get_watchlist_stocks(1)[0]
        assert repository.delete_watchlist_stock(stock.id) is True
        assert repository.get_watchlist_stock(stock.id) is None

    def test_update_index(self, repository):
        updated = repository.update_market_index("VIX", {"value": 20.5, "name": "other"})
        assert updated.name == "VIX"
        assert updated.value == 20.5
        assert repository.update_market_index("FTSE", {"value": 1}) is None
