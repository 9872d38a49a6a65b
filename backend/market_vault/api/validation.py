"""Ticker validation shared by the stock, portfolio and watchlist routes."""
import re

from fastapi import HTTPException, Path

from market_vault.schemas.portfolio import TICKER_MAX_LENGTH

# Equities (AAPL, BRK.B), indices (^GSPC), currency and futures pairs (EURUSD=X)
TICKER_PATTERN = re.compile(rf"^(?=.{{1,{TICKER_MAX_LENGTH}}}$)\^?[A-Z0-9.\-=]+$")


def normalize_ticker(raw: str | None) -> str:
    """Uppercase and strip a ticker symbol.

    Raises:
        HTTPException: 400 when the ticker is empty or not symbol-shaped
    """
    ticker = (raw or "").strip().upper()
    if not ticker:
        raise HTTPException(status_code=400, detail="Ticker cannot be empty")
    if not TICKER_PATTERN.match(ticker):
        raise HTTPException(status_code=400, detail=f"Invalid ticker format: '{ticker}'")
    return ticker


def ticker_path(symbol: str = Path(max_length=20)) -> str:
    return normalize_ticker(symbol)
