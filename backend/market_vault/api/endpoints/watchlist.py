from fastapi import APIRouter, Depends, HTTPException, Response

from market_vault.api.dependencies import get_app_settings, get_market_data, get_repository
from market_vault.api.validation import normalize_ticker
from market_vault.config import Settings
from market_vault.schemas.portfolio import WatchlistQuote, WatchlistStock, WatchlistStockCreate
from market_vault.services.market_data import MarketDataService
from market_vault.services.repository import AbstractRepository

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])


@router.get("", response_model=list[WatchlistStock])
async def get_watchlist(
    repository: AbstractRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    return repository.get_watchlist_stocks(settings.demo_user_id)


@router.post("", response_model=WatchlistStock, status_code=201)
async def add_watchlist_stock(
    body: WatchlistStockCreate,
    repository: AbstractRepository = Depends(get_repository),
):
    body.symbol = normalize_ticker(body.symbol)
    return repository.create_watchlist_stock(body)


@router.get("/quotes", response_model=list[WatchlistQuote])
async def get_watchlist_quotes(
    repository: AbstractRepository = Depends(get_repository),
    market_data: MarketDataService = Depends(get_market_data),
    settings: Settings = Depends(get_app_settings),
):
    stocks = repository.get_watchlist_stocks(settings.demo_user_id)
    return await market_data.get_watchlist_quotes(stocks)


@router.delete("/{stock_id}", status_code=204)
async def delete_watchlist_stock(
    stock_id: int,
    repository: AbstractRepository = Depends(get_repository),
):
    if not repository.delete_watchlist_stock(stock_id):
        raise HTTPException(status_code=404, detail="Watchlist stock not found")
    return Response(status_code=204)
