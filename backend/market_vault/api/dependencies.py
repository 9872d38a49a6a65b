from fastapi import Request

from market_vault.config import Settings
from market_vault.services.market_data import MarketDataService
from market_vault.services.repository import AbstractRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> AbstractRepository:
    """Repository wired into the application by create_app."""
    return request.app.state.repository


def get_market_data(request: Request) -> MarketDataService:
    return request.app.state.market_data
