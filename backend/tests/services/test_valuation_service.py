# backend/tests/services/test_valuation_service.py
"""
Integration tests for ValuationService.

Positions are built through the ledger over in-memory SQLite, then valued.

Covers:
- Reporting currency resolution (explicit → portfolio → default)
- Valuation of a mixed crypto/FII portfolio
- Rebalance advice from current category totals
"""

from decimal import Decimal

import pytest

from gemhub.models import AssetCategory
from gemhub.services.exceptions import FXRateNotFoundError, InvalidGroupingError
from gemhub.services.valuation import GroupBy, ValuationService
from tests.conftest import buy, create_portfolio


@pytest.fixture
def service(converter) -> ValuationService:
    return ValuationService(converter, default_currency="BRL")


@pytest.fixture
def mixed_portfolio(store, ledger, sample_portfolio):
    """0.5 BTC (40k → 60k USD) and 1000 MXRF11 (9.50 → 10 BRL, 100 BRL/month)."""
    portfolio = store.load(sample_portfolio.id)
    ledger.record(portfolio, "BTC", buy("0.5", "40000"), AssetCategory.CRYPTO)
    ledger.record(portfolio, "MXRF11", buy("1000", "9.50"), AssetCategory.FII)

    btc, mxrf = portfolio.assets
    btc.current_price = Decimal("60000")
    mxrf.current_price = Decimal("10")
    mxrf.prov_dividend = Decimal("100")
    store.save(portfolio)
    return store.load(sample_portfolio.id)


class TestResolveCurrency:

    def test_explicit_currency_wins(self, service, sample_portfolio):
        assert service.resolve_currency(sample_portfolio, "usd") == "USD"

    def test_falls_back_to_portfolio_preference(self, db, service):
        portfolio = create_portfolio(db, preferred_currency="USD")

        assert service.resolve_currency(portfolio) == "USD"


class TestGetValuation:

    def test_values_mixed_portfolio_in_brl(self, service, mixed_portfolio):
        result = service.get_valuation(mixed_portfolio)

        assert result.reporting_currency == "BRL"
        assert result.total_value == Decimal("173500")
        assert result.category_totals()[AssetCategory.CRYPTO] == Decimal("163500")
        assert result.monthly_yield == Decimal("100")
        assert result.warnings == []

    def test_values_in_usd(self, service, mixed_portfolio):
        result = service.get_valuation(mixed_portfolio, "USD")

        # 30000 USD + 10000 BRL / 5.45
        assert result.total_value.quantize(Decimal("0.01")) == Decimal("31834.86")

    def test_group_by_sector(self, service, mixed_portfolio):
        result = service.get_valuation(mixed_portfolio, group_by="sector")

        assert result.group_by == GroupBy.SECTOR
        assert {g.key for g in result.groups} == {
            AssetCategory.CRYPTO.default_sector,
            AssetCategory.FII.default_sector,
        }

    def test_unknown_grouping_raises(self, service, mixed_portfolio):
        with pytest.raises(InvalidGroupingError):
            service.get_valuation(mixed_portfolio, group_by="exchange")

    def test_unsupported_currency_raises(self, service, mixed_portfolio):
        with pytest.raises(FXRateNotFoundError):
            service.get_valuation(mixed_portfolio, "EUR")

    def test_empty_portfolio(self, service, store, sample_portfolio):
        result = service.get_valuation(store.load(sample_portfolio.id))

        assert result.total_value == Decimal("0")
        assert result.assets == []


class TestGetRebalance:

    def test_rebalance_uses_category_totals(self, service, mixed_portfolio):
        """163500 crypto / 10000 FII is far above a 30% crypto target."""
        result = service.get_rebalance(mixed_portfolio, Decimal("0.30"), Decimal("5000"))

        assert result.current_a == Decimal("163500")
        assert result.current_b == Decimal("10000")
        assert result.allocation_a == Decimal("0")
        assert result.allocation_b == Decimal("5000")
