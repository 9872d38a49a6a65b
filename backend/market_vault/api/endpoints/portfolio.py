from fastapi import APIRouter, Depends, HTTPException, Response

from market_vault.api.dependencies import get_app_settings, get_market_data, get_repository
from market_vault.api.validation import normalize_ticker
from market_vault.config import Settings
from market_vault.schemas.portfolio import PortfolioStock, PortfolioStockCreate, PortfolioSummary
from market_vault.services.market_data import MarketDataService
from market_vault.services.repository import AbstractRepository

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


@router.get("", response_model=list[PortfolioStock])
async def get_portfolio(
    repository: AbstractRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    return repository.get_portfolio_stocks(settings.demo_user_id)


@router.post("", response_model=PortfolioStock, status_code=201)
async def add_portfolio_stock(
    body: PortfolioStockCreate,
    repository: AbstractRepository = Depends(get_repository),
):
    body.symbol = normalize_ticker(body.symbol)
    return repository.create_portfolio_stock(body)


@router.get("/summary", response_model=PortfolioSummary)
async def get_portfolio_summary(
    repository: AbstractRepository = Depends(get_repository),
    market_data: MarketDataService = Depends(get_market_data),
    settings: Settings = Depends(get_app_settings),
):
    """Holdings valued at current quotes, with totals."""
    stocks = repository.get_portfolio_stocks(settings.demo_user_id)
    return await market_data.get_portfolio_summary(stocks)


@router.delete("/{stock_id}", status_code=204)
async def delete_portfolio_stock(
    stock_id: int,
    repository: AbstractRepository = Depends(get_repository),
):
    if not repository.delete_portfolio_stock(stock_id):
        raise HTTPException(status_code=404, detail="Portfolio stock not found")
    return Response(status_code=204)
