import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from market_vault.api.endpoints import market, portfolio, stock, watchlist
from market_vault.config import Settings, get_settings
from market_vault.services.market_data import MarketDataService
from market_vault.services.provider import MarketDataProvider, get_provider
from market_vault.services.repository import AbstractRepository, MemoryRepository


def create_app(
    settings: Settings | None = None,
    repository: AbstractRepository | None = None,
    provider: MarketDataProvider | None = None,
    market_data: MarketDataService | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Market Vault API", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if market_data is None:
        provider = provider or get_provider(settings)
        market_data = MarketDataService(provider, settings)
    app.state.settings = settings
    app.state.repository = repository or MemoryRepository()
    app.state.market_data = market_data
    logging.getLogger(__name__).info(f"Using {market_data.provider.name} provider for market data")

    app.include_router(stock.router)
    app.include_router(market.router)
    app.include_router(portfolio.router)
    app.include_router(watchlist.router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "service": "Market Vault"}

    return app


app = create_app()
