"""
Tests for movers, portfolio valuation and watchlist rows over normalized quotes.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from market_vault.analysis.positions import (
    build_portfolio_summary,
    change_percent_value,
    company_name,
    top_movers,
    watchlist_rows,
)
from market_vault.schemas.portfolio import PortfolioStock, WatchlistStock
from market_vault.schemas.provider import ProviderQuote
from market_vault.services.normalizer import normalize_quote


def quote(symbol, price, previous_close):
    return normalize_quote(ProviderQuote(symbol=symbol, price=price, previous_close=previous_close),
                           symbol, date(2026, 10, 14))


def holding(id, symbol, shares, purchase_price):
    return PortfolioStock(id=id, user_id=1, symbol=symbol, name=symbol, shares=shares,
                          purchase_price=purchase_price, purchase_date=datetime(2026, 9, 1))


def test_company_name():
    assert company_name("NVDA") == "NVIDIA Corp."
    assert company_name("XYZ") == "XYZ"


def test_change_percent_value():
    assert change_percent_value(quote("A", 99, 100)) == -1.0


class TestTopMovers:
    def test_ordered_by_absolute_change(self):
        movers = top_movers({
            "AAPL": quote("AAPL", 101, 100),
            "TSLA": quote("TSLA", 95, 100),
            "MSFT": None,
            "META": quote("META", 103, 100),
        })
        assert [m.symbol for m in movers] == ["TSLA", "META", "AAPL"]
        assert movers[0].change == -5.0

    def test_empty(self):
        assert top_movers({"AAPL": None}) == []


class TestPortfolioSummary:
    def test_totals(self):
        summary = build_portfolio_summary(
            [holding(1, "AAPL", 10, 100), holding(2, "MSFT", 4, 300)],
            {"AAPL": quote("AAPL", 150, 148), "MSFT": quote("MSFT", 250, 260)},
        )
        assert summary.total_value == 2500.0
        assert summary.total_cost == 2200.0
        assert summary.total_gain_loss == 300.0
        assert summary.total_gain_loss_percent == pytest.approx(13.64)
        assert summary.day_change == -20.0
        assert summary.day_change_percent == -0.8
        msft = summary.positions[1]
        assert msft.gain_loss == -200.0
        assert msft.gain_loss_percent == pytest.approx(-16.67)

    def test_unquoted_holding_counts_at_zero(self):
        summary = build_portfolio_summary([holding(1, "GONE", 10, 5)], {"GONE": None})
        position = summary.positions[0]
        assert position.quote_available is False
        assert position.market_value == 0.0
        assert position.gain_loss == -50.0
        assert summary.day_change_percent == 0.0

    def test_empty_portfolio(self):
        summary = build_portfolio_summary([], {})
        assert summary.positions == []
        assert summary.total_gain_loss_percent == 0.0


def test_watchlist_rows_keep_order():
    rows = watchlist_rows(
        [WatchlistStock(id=3, user_id=1, symbol="JPM", name="JPMorgan"),
         WatchlistStock(id=1, user_id=1, symbol="DIS", name="Disney")],
        {"JPM": quote("JPM", 150, 150)},
    )
    assert [r.id for r in rows] == [3, 1]
    assert rows[0].quote.name == "JPMorgan"
    assert rows[0].quote.change_percent == 0.0
    assert rows[1].quote is None
