"""
Dashboard storage: users, portfolio holdings, watchlist entries and market
indices.

Handlers receive a repository instance through dependency injection; nothing
here is a module-level singleton. Contents live for the life of the process.
"""
import abc
import random
from datetime import datetime, timedelta, timezone

from market_vault.schemas.portfolio import (
    MarketIndex,
    PortfolioStock,
    PortfolioStockCreate,
    User,
    UserCreate,
    WatchlistStock,
    WatchlistStockCreate,
)

DEMO_INDICES = [
    ("S&P 500", 4682.80, 53.24, 1.15),
    ("NASDAQ", 15362.90, 270.02, 1.79),
    ("DOW", 36432.22, 246.76, 0.68),
    ("RUSSELL 2000", 2243.10, -4.97, -0.22),
    ("10-YR YIELD", 1.45, 0.05, 3.57),
    ("VIX", 16.48, -1.02, -5.83),
]

DEMO_PORTFOLIO = [
    ("AAPL", "Apple Inc.", 12, 150.25),
    ("MSFT", "Microsoft", 8, 330.75),
    ("TSLA", "Tesla, Inc.", 5, 950.53),
    ("AMZN", "Amazon", 3, 3350.50),
]

DEMO_WATCHLIST = [
    ("GOOG", "Alphabet Inc."),
    ("NFLX", "Netflix Inc."),
    ("JPM", "JPMorgan Chase"),
    ("DIS", "Disney"),
]


class AbstractRepository(abc.ABC):
    # Users

    @abc.abstractmethod
    def get_user(self, user_id: int) -> User | None: ...

    @abc.abstractmethod
    def get_user_by_username(self, username: str) -> User | None: ...

    @abc.abstractmethod
    def create_user(self, user: UserCreate) -> User: ...

    # Portfolio

    @abc.abstractmethod
    def get_portfolio_stocks(self, user_id: int) -> list[PortfolioStock]: ...

    @abc.abstractmethod
    def get_portfolio_stock(self, stock_id: int) -> PortfolioStock | None: ...

    @abc.abstractmethod
    def create_portfolio_stock(self, stock: PortfolioStockCreate) -> PortfolioStock: ...

    @abc.abstractmethod
    def update_portfolio_stock(self, stock_id: int, changes: dict) -> PortfolioStock | None: ...

    @abc.abstractmethod
    def delete_portfolio_stock(self, stock_id: int) -> bool: ...

    # Watchlist

    @abc.abstractmethod
    def get_watchlist_stocks(self, user_id: int) -> list[WatchlistStock]: ...

    @abc.abstractmethod
    def get_watchlist_stock(self, stock_id: int) -> WatchlistStock | None: ...

    @abc.abstractmethod
    def create_watchlist_stock(self, stock: WatchlistStockCreate) -> WatchlistStock: ...

    @abc.abstractmethod
    def delete_watchlist_stock(self, stock_id: int) -> bool: ...

    # Market indices

    @abc.abstractmethod
    def get_market_indices(self) -> list[MarketIndex]: ...

    @abc.abstractmethod
    def update_market_index(self, name: str, changes: dict) -> MarketIndex | None: ...

    @abc.abstractmethod
    def create_market_index(self, name: str, value: float, change: float, change_percent: float) -> MarketIndex: ...


class MemoryRepository(AbstractRepository):
    """Integer-keyed maps with one id counter per entity."""

    def __init__(self, seed_demo: bool = True, rng: random.Random | None = None):
        self._users: dict[int, User] = {}
        self._portfolio: dict[int, PortfolioStock] = {}
        self._watchlist: dict[int, WatchlistStock] = {}
        self._indices: dict[str, MarketIndex] = {}

        self._next_user_id = 1
        self._next_portfolio_id = 1
        self._next_watchlist_id = 1
        self._next_index_id = 1

        if seed_demo:
            self._seed_demo(rng or random.Random())

    def _seed_demo(self, rng: random.Random) -> None:
        demo = self.create_user(UserCreate(username="demo", password="password"))

        for name, value, change, change_percent in DEMO_INDICES:
            self.create_market_index(name, value, change, change_percent)

        now = datetime.now(timezone.utc)
        for symbol, name, shares, price in DEMO_PORTFOLIO:
            self.create_portfolio_stock(PortfolioStockCreate(
                user_id=demo.id,
                symbol=symbol,
                name=name,
                shares=shares,
                purchase_price=price,
                # Somewhere in the last 30 days
                purchase_date=now - timedelta(days=rng.random() * 30),
            ))

        for symbol, name in DEMO_WATCHLIST:
            self.create_watchlist_stock(WatchlistStockCreate(user_id=demo.id, symbol=symbol, name=name))

    # --- Users ---

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def create_user(self, user: UserCreate) -> User:
        record = User(id=self._next_user_id, **user.model_dump())
        self._next_user_id += 1
        self._users[record.id] = record
        return record

    # --- Portfolio ---

    def get_portfolio_stocks(self, user_id: int) -> list[PortfolioStock]:
        return [s for s in self._portfolio.values() if s.user_id == user_id]

    def get_portfolio_stock(self, stock_id: int) -> PortfolioStock | None:
        return self._portfolio.get(stock_id)

    def create_portfolio_stock(self, stock: PortfolioStockCreate) -> PortfolioStock:
        record = PortfolioStock(id=self._next_portfolio_id, **stock.model_dump())
        self._next_portfolio_id += 1
        self._portfolio[record.id] = record
        return record

    def update_portfolio_stock(self, stock_id: int, changes: dict) -> PortfolioStock | None:
        existing = self._portfolio.get(stock_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={k: v for k, v in changes.items() if k != "id"})
        self._portfolio[stock_id] = updated
        return updated

    def delete_portfolio_stock(self, stock_id: int) -> bool:
        return self._portfolio.pop(stock_id, None) is not None

    # --- Watchlist ---

    def get_watchlist_stocks(self, user_id: int) -> list[WatchlistStock]:
        return [s for s in self._watchlist.values() if s.user_id == user_id]

    def get_watchlist_stock(self, stock_id: int) -> WatchlistStock | None:
        return self._watchlist.get(stock_id)

    def create_watchlist_stock(self, stock: WatchlistStockCreate) -> WatchlistStock:
        record = WatchlistStock(id=self._next_watchlist_id, **stock.model_dump())
        self._next_watchlist_id += 1
        self._watchlist[record.id] = record
        return record

    def delete_watchlist_stock(self, stock_id: int) -> bool:
        return self._watchlist.pop(stock_id, None) is not None

    # --- Market indices ---

    def get_market_indices(self) -> list[MarketIndex]:
        return list(self._indices.values())

    def update_market_index(self, name: str, changes: dict) -> MarketIndex | None:
        existing = self._indices.get(name)
        if existing is None:
            return None
        updated = existing.model_copy(update={k: v for k, v in changes.items() if k not in ("id", "name")})
        self._indices[name] = updated
        return updated

    def create_market_index(self, name: str, value: float, change: float, change_percent: float) -> MarketIndex:
        record = MarketIndex(
            id=self._next_index_id,
            name=name,
            value=value,
            change=change,
            change_percent=change_percent,
            last_updated=datetime.now(timezone.utc),
        )
        self._next_index_id += 1
        self._indices[name] = record
        return record
