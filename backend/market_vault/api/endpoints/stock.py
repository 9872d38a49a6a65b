import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from market_vault.api.dependencies import get_market_data
from market_vault.api.validation import ticker_path
from market_vault.exceptions import MarketDataError, NotFoundError
from market_vault.schemas.stock import ChartData, Granularity
from market_vault.services.market_data import MarketDataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stocks", tags=["stocks"])


@router.get("/search")
async def search_stocks(
    q: str = Query("", max_length=100),
    market_data: MarketDataService = Depends(get_market_data),
):
    """Search for tickers by symbol or company name."""
    try:
        return await market_data.search(q)
    except MarketDataError as e:
        logger.error(f"Search error for '{q}': {e}")
        raise HTTPException(status_code=502, detail="Failed to search stocks")


@router.get("/quote/{symbol}")
async def get_quote(symbol: str = Depends(ticker_path), market_data: MarketDataService = Depends(get_market_data)):
    try:
        quote = await market_data.get_quote(symbol)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Stock not found")
    except MarketDataError as e:
        logger.error(f"Quote error for {symbol}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch stock quote")
    return {"Global Quote": quote.model_dump(by_alias=True)}


@router.get("/intraday/{symbol}")
async def get_intraday(
    symbol: str = Depends(ticker_path),
    interval: str = Query("5min", pattern="^(5min|60min)$"),
    market_data: MarketDataService = Depends(get_market_data),
):
    return await market_data.get_series(symbol, Granularity.INTRADAY, interval)


@router.get("/daily/{symbol}")
async def get_daily(symbol: str = Depends(ticker_path), market_data: MarketDataService = Depends(get_market_data)):
    return await market_data.get_series(symbol, Granularity.DAILY)


@router.get("/weekly/{symbol}")
async def get_weekly(symbol: str = Depends(ticker_path), market_data: MarketDataService = Depends(get_market_data)):
    return await market_data.get_series(symbol, Granularity.WEEKLY)


@router.get("/monthly/{symbol}")
async def get_monthly(symbol: str = Depends(ticker_path), market_data: MarketDataService = Depends(get_market_data)):
    return await market_data.get_series(symbol, Granularity.MONTHLY)


@router.get("/chart/{symbol}", response_model=ChartData)
async def get_chart(
    symbol: str = Depends(ticker_path),
    timeframe: str = "1D",
    market_data: MarketDataService = Depends(get_market_data),
):
    """Series for a chart timeframe, filtered to its lookback window, oldest first."""
    return await market_data.get_chart(symbol, timeframe)
