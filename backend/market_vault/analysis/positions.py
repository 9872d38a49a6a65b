"""Derived views over normalized quotes: top movers, portfolio positions, watchlist rows."""
from market_vault.schemas.portfolio import (
    PortfolioStock,
    PortfolioSummary,
    StockPosition,
    StockSummary,
    WatchlistQuote,
    WatchlistStock,
)
from market_vault.schemas.stock import GlobalQuote
from market_vault.services.normalizer import to_number

COMPANY_NAMES = {
    "AAPL": "Apple Inc.",
    "MSFT": "Microsoft Corp.",
    "AMZN": "Amazon.com Inc.",
    "GOOGL": "Alphabet Inc.",
    "META": "Meta Platforms Inc.",
    "TSLA": "Tesla Inc.",
    "NVDA": "NVIDIA Corp.",
    "AMD": "Advanced Micro Devices",
    "NFLX": "Netflix Inc.",
    "JPM": "JPMorgan Chase",
    "BAC": "Bank of America",
    "DIS": "Walt Disney Co.",
    "PLTR": "Palantir Technologies",
    "SNAP": "Snap Inc.",
    "UBER": "Uber Technologies",
}


def company_name(symbol: str) -> str:
    return COMPANY_NAMES.get(symbol, symbol)


def change_percent_value(quote: GlobalQuote) -> float:
    return to_number(quote.change_percent.rstrip("%"))


def quote_summary(symbol: str, name: str, quote: GlobalQuote) -> StockSummary:
    return StockSummary(
        symbol=symbol,
        name=name,
        price=to_number(quote.price),
        change=to_number(quote.change),
        change_percent=change_percent_value(quote),
    )


def top_movers(quotes: dict[str, GlobalQuote | None]) -> list[StockSummary]:
    """Quoted symbols ordered by absolute percent change, biggest first."""
    movers = [
        quote_summary(symbol, company_name(symbol), quote)
        for symbol, quote in quotes.items()
        if quote is not None
    ]
    movers.sort(key=lambda m: abs(m.change_percent), reverse=True)
    return movers


def _pct(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100 if denominator > 0 else 0.0


def build_portfolio_summary(
    stocks: list[PortfolioStock],
    quotes: dict[str, GlobalQuote | None],
) -> PortfolioSummary:
    """Value each holding at its quoted price; unquoted holdings count at 0."""
    positions = []
    for stock in stocks:
        quote = quotes.get(stock.symbol)
        price = to_number(quote.price) if quote else 0.0
        change = to_number(quote.change) if quote else 0.0
        market_value = price * stock.shares
        cost_basis = stock.purchase_price * stock.shares
        gain_loss = market_value - cost_basis
        positions.append(StockPosition(
            id=stock.id,
            symbol=stock.symbol,
            name=stock.name,
            price=price,
            change=change,
            change_percent=change_percent_value(quote) if quote else 0.0,
            shares=stock.shares,
            purchase_price=stock.purchase_price,
            purchase_date=stock.purchase_date,
            market_value=round(market_value, 2),
            cost_basis=round(cost_basis, 2),
            gain_loss=round(gain_loss, 2),
            gain_loss_percent=round(_pct(gain_loss, cost_basis), 2),
            day_change=round(change * stock.shares, 2),
            quote_available=quote is not None,
        ))

    total_value = sum(p.market_value for p in positions)
    total_cost = sum(p.cost_basis for p in positions)
    day_change = sum(p.day_change for p in positions)
    return PortfolioSummary(
        positions=positions,
        total_value=round(total_value, 2),
        total_cost=round(total_cost, 2),
        total_gain_loss=round(total_value - total_cost, 2),
        total_gain_loss_percent=round(_pct(total_value - total_cost, total_cost), 2),
        day_change=round(day_change, 2),
        day_change_percent=round(_pct(day_change, total_value), 2),
    )


def watchlist_rows(
    stocks: list[WatchlistStock],
    quotes: dict[str, GlobalQuote | None],
) -> list[WatchlistQuote]:
    rows = []
    for stock in stocks:
        quote = quotes.get(stock.symbol)
        rows.append(WatchlistQuote(
            id=stock.id,
            symbol=stock.symbol,
            name=stock.name,
            quote=quote_summary(stock.symbol, stock.name, quote) if quote else None,
        ))
    return rows
