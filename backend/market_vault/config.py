from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    log_level: str = "INFO"

    # Upstream provider: "yahoo" (direct HTTP) or "yfinance" (library)
    provider: str = "yahoo"
    yahoo_base_url: str = "https://query1.finance.yahoo.com"
    http_timeout: float | None = None  # None keeps the httpx default
    yfinance_min_interval: float = 1.0  # seconds between yfinance calls

    # News panel
    news_symbols: list[str] = ["AAPL", "MSFT", "GOOGL", "AMZN", "META"]
    news_items_per_symbol: int = 2

    # Top movers
    popular_symbols: list[str] = [
        "AAPL", "MSFT", "AMZN", "GOOGL", "META",
        "TSLA", "NVDA", "AMD", "NFLX", "JPM",
        "BAC", "DIS", "PLTR", "SNAP", "UBER",
    ]
    movers_limit: int = 8

    # Batched quote lookups run through a limiter of this size (1 = sequential)
    quote_concurrency: int = 1

    search_min_length: int = 2
    search_max_results: int = 10

    # None leaves synthetic series unseeded
    synthetic_seed: int | None = None

    demo_user_id: int = 1

    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    model_config = {"env_file": ".env"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
