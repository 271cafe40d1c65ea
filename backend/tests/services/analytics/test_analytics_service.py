# backend/tests/services/analytics/test_analytics_service.py
"""
Tests for AnalyticsService.

Portfolio used by most tests (reporting in BRL, USD/BRL = 5.45):
    2024-01  BTC     buy 0.1 @ 40000 USD + 5 fee   new money  → 21827.25
    2024-02  MXRF11  buy 100 @ 10 BRL              new money  →  1000.00
    2024-03  MXRF11  buy 10 @ 10 BRL               reinvested →   100.00

    BTC now 50000 USD, MXRF11 now 11 BRL paying 109 BRL per month.
"""

from datetime import date
from decimal import Decimal

import pytest

from gemhub.models import AssetCategory, TransactionSource
from gemhub.services.analytics import AnalyticsService
from gemhub.services.exceptions import ValidationError
from tests.conftest import buy

CENTS = Decimal("0.01")


@pytest.fixture
def service(converter) -> AnalyticsService:
    return AnalyticsService(converter)


@pytest.fixture
def portfolio(store, ledger, sample_portfolio):
    p = store.load(sample_portfolio.id)
    ledger.record(p, "BTC", buy("0.1", "40000", "5", on=date(2024, 1, 20)), AssetCategory.CRYPTO)
    ledger.record(p, "MXRF11", buy("100", "10", on=date(2024, 2, 10)), AssetCategory.FII)
    ledger.record(
        p, "MXRF11", buy("10", "10", on=date(2024, 3, 10), source=TransactionSource.REINVESTMENT)
    )

    btc, mxrf = p.assets
    btc.current_price = Decimal("50000")
    mxrf.current_price = Decimal("11")
    mxrf.prov_dividend = Decimal("109")
    store.save(p)
    return store.load(sample_portfolio.id)


class TestMonthlyContributions:

    def test_buckets_by_month_and_source(self, service, portfolio):
        months = service.monthly_contributions(portfolio, "BRL")

        assert [m.month for m in months] == ["2024-01", "2024-02", "2024-03"]
        assert months[0].crypto == Decimal("21827.25")
        assert months[1].fii == Decimal("1000")
        assert months[2].reinvested == Decimal("100")
        assert months[2].fii == Decimal("0")

    def test_keeps_most_recent_months(self, service, portfolio):
        months = service.monthly_contributions(portfolio, "BRL", months=2)

        assert [m.month for m in months] == ["2024-02", "2024-03"]

    def test_reported_in_usd(self, service, portfolio):
        months = service.monthly_contributions(portfolio, "USD")

        assert months[0].crypto == Decimal("4005")

    def test_months_must_be_positive(self, service, portfolio):
        with pytest.raises(ValidationError):
            service.monthly_contributions(portfolio, "BRL", months=0)


class TestCapitalMetrics:

    def test_invested_versus_current(self, service, portfolio):
        metrics = service.capital_metrics(portfolio, "BRL")

        assert metrics.total_invested == Decimal("22927.25")
        assert metrics.new_money == Decimal("22827.25")
        assert metrics.reinvested == Decimal("100")
        # 0.1 × 50000 × 5.45 + 110 × 11
        assert metrics.current_total == Decimal("28460")
        assert metrics.profit == Decimal("5532.75")
        assert metrics.annual_income == Decimal("1308")
        assert metrics.yield_on_cost.quantize(CENTS) == Decimal("5.71")

    def test_empty_portfolio_has_zero_ratios(self, service, store, sample_portfolio):
        metrics = service.capital_metrics(store.load(sample_portfolio.id), "BRL")

        assert metrics.total_invested == Decimal("0")
        assert metrics.profit_pct == Decimal("0")
        assert metrics.yield_on_cost == Decimal("0")


class TestDividendBridge:

    def test_uses_held_btc_price_and_eth_fallback(self, service, portfolio):
        bridge = service.dividend_bridge(portfolio)

        assert bridge.monthly_dividends == Decimal("109")
        assert bridge.monthly_dividends_usd.quantize(CENTS) == Decimal("20.00")
        assert bridge.btc_price_usd == Decimal("50000")
        assert bridge.eth_price_usd == Decimal("3150")
        # 20 USD / 50000 × 100,000,000
        assert bridge.satoshis == Decimal("40000")
        assert bridge.eth.quantize(Decimal("0.000001")) == Decimal("0.006349")

    def test_no_fiis_means_no_income(self, service, store, ledger, sample_portfolio):
        p = store.load(sample_portfolio.id)
        ledger.record(p, "BTC", buy("1", "60000"), AssetCategory.CRYPTO)

        bridge = service.dividend_bridge(p)

        assert bridge.monthly_dividends == Decimal("0")
        assert bridge.satoshis == Decimal("0")


class TestGetAnalytics:

    def test_combines_all_sections(self, service, portfolio):
        result = service.get_analytics(portfolio, "brl", months=6)

        assert result.portfolio_id == portfolio.id
        assert result.reporting_currency == "BRL"
        assert len(result.monthly_contributions) == 3
        assert result.capital.current_total == Decimal("28460")
        assert result.dividend_bridge.satoshis == Decimal("40000")
