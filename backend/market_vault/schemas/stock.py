from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Granularity(str, Enum):
    INTRADAY = "intraday"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class GlobalQuote(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(alias="01. symbol")
    open: str = Field(alias="02. open")
    high: str = Field(alias="03. high")
    low: str = Field(alias="04. low")
    price: str = Field(alias="05. price")
    volume: str = Field(alias="06. volume")
    latest_trading_day: str = Field(alias="07. latest trading day")
    previous_close: str = Field(alias="08. previous close")
    change: str = Field(alias="09. change")
    change_percent: str = Field(alias="10. change percent")


class SearchMatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(alias="1. symbol")
    name: str = Field(alias="2. name")
    type: str = Field(alias="3. type")
    region: str = Field(alias="4. region")
    market_open: str = Field("09:30", alias="5. marketOpen")
    market_close: str = Field("16:00", alias="6. marketClose")
    timezone: str = Field("UTC-5", alias="7. timezone")
    currency: str = Field(alias="8. currency")
    match_score: str = Field("1.0", alias="9. matchScore")


class Candle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    open: str = Field(alias="1. open")
    high: str = Field(alias="2. high")
    low: str = Field(alias="3. low")
    close: str = Field(alias="4. close")
    volume: str = Field(alias="5. volume")


class NewsTopic(BaseModel):
    topic: str
    relevance_score: str = "1.0"


class NewsItem(BaseModel):
    title: str
    summary: str
    url: str
    banner_image: str | None = None
    source: str
    source_domain: str = "finance.yahoo.com"
    time_published: str
    topics: list[NewsTopic] = []


class ChartPoint(BaseModel):
    date: str
    value: float
    open: float
    high: float
    low: float
    volume: float


class ChartData(BaseModel):
    symbol: str
    timeframe: str
    granularity: Granularity
    interval: str
    information: str
    points: list[ChartPoint]
