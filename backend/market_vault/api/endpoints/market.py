from fastapi import APIRouter, Depends

from market_vault.api.dependencies import get_market_data, get_repository
from market_vault.schemas.portfolio import MarketIndex, StockSummary
from market_vault.services.market_data import MarketDataService
from market_vault.services.repository import AbstractRepository

router = APIRouter(prefix="/api/market", tags=["market"])


@router.get("/indices", response_model=list[MarketIndex])
async def get_market_indices(repository: AbstractRepository = Depends(get_repository)):
    return repository.get_market_indices()


@router.get("/news")
async def get_market_news(market_data: MarketDataService = Depends(get_market_data)):
    # Always a non-empty feed; upstream failures yield a placeholder item
    return await market_data.get_news()


@router.get("/movers", response_model=list[StockSummary])
async def get_top_movers(market_data: MarketDataService = Depends(get_market_data)):
    return await market_data.get_top_movers()
