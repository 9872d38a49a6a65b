"""Market data exception hierarchy.

Provider adapters raise these; the market data service decides which of them
reach the HTTP layer and which are absorbed into fallback responses.
"""


class MarketDataError(Exception):
    """Base class for market data failures."""


class NotFoundError(MarketDataError):
    """Raised when the provider does not know the requested symbol."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Symbol '{symbol}' not found")


class UpstreamError(MarketDataError):
    """Raised on transport, status or payload failures from the provider."""


class InvalidTimeframeError(MarketDataError):
    """Raised when a chart timeframe selector is not recognised."""

    def __init__(self, timeframe: str):
        self.timeframe = timeframe
        super().__init__(f"Unknown timeframe '{timeframe}'")


__all__ = [
    "MarketDataError",
    "NotFoundError",
    "UpstreamError",
    "InvalidTimeframeError",
]
