"""Raw provider-shaped results returned by the provider adapters.

Numeric fields are left loosely typed: upstream payloads deliver them as
numbers, numeric strings or not at all, and coercion is the normalizer's job.
"""
from datetime import datetime

from pydantic import BaseModel

RawNumber = int | float | str | None


class ProviderQuote(BaseModel):
    symbol: str
    open: RawNumber = None
    day_high: RawNumber = None
    day_low: RawNumber = None
    price: RawNumber = None
    volume: RawNumber = None
    previous_close: RawNumber = None
    change: RawNumber = None  # only for providers that report it; otherwise derived from previous close


class ProviderBar(BaseModel):
    time: datetime
    open: RawNumber = None
    high: RawNumber = None
    low: RawNumber = None
    close: RawNumber = None
    volume: RawNumber = None


class ProviderSearchMatch(BaseModel):
    symbol: str | None = None
    short_name: str | None = None
    long_name: str | None = None
    quote_type: str | None = None
    exchange: str | None = None
    currency: str | None = None


class ProviderNewsItem(BaseModel):
    title: str | None = None
    summary: str | None = None
    link: str | None = None
    publisher: str | None = None
    thumbnail_url: str | None = None
    publish_time: RawNumber = None  # unix epoch seconds


class ProviderSearchResult(BaseModel):
    quotes: list[ProviderSearchMatch] = []
