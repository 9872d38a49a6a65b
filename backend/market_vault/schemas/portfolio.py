from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel


# Longest accepted symbol, including the ^ index prefix
TICKER_MAX_LENGTH = 12

Ticker = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TICKER_MAX_LENGTH)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(CamelModel):
    id: int
    username: str
    password: str


class UserCreate(CamelModel):
    username: str
    password: str


class PortfolioStockCreate(CamelModel):
    user_id: int
    symbol: Ticker
    name: str
    shares: float = Field(gt=0)
    purchase_price: float = Field(ge=0)
    purchase_date: datetime


class PortfolioStock(PortfolioStockCreate):
    id: int


class WatchlistStockCreate(CamelModel):
    user_id: int
    symbol: Ticker
    name: str


class WatchlistStock(WatchlistStockCreate):
    id: int


class MarketIndex(CamelModel):
    id: int
    name: str
    value: float
    change: float
    change_percent: float
    last_updated: datetime


class StockSummary(CamelModel):
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float


class StockPosition(StockSummary):
    id: int
    shares: float
    purchase_price: float
    purchase_date: datetime
    market_value: float
    cost_basis: float
    gain_loss: float
    gain_loss_percent: float
    day_change: float
    quote_available: bool = True


class PortfolioSummary(CamelModel):
    positions: list[StockPosition]
    total_value: float
    total_cost: float
    total_gain_loss: float
    total_gain_loss_percent: float
    day_change: float
    day_change_percent: float


class WatchlistQuote(CamelModel):
    id: int
    symbol: str
    name: str
    quote: StockSummary | None = None
