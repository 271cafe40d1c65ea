# backend/gemhub/services/analytics/service.py
"""
Analytics Service orchestrator.

Contribution and income analytics computed from a loaded portfolio:
1. Monthly contributions (new money per category vs reinvested dividends)
2. Capital metrics (invested capital vs current value, yield on cost)
3. Dividend bridge (FII income expressed in satoshis and ETH)

All amounts are converted from each asset's native currency to the
reporting currency with the injected converter. Nothing is rounded except
the satoshi count, which is a whole number by definition.

Architecture:
    AnalyticsService
        ├── uses → CurrencyConverter (native → reporting)
        └── uses → PortfolioValuator (current total)

Usage:
    from gemhub.services.analytics import AnalyticsService

    service = AnalyticsService(converter)
    result = service.get_analytics(portfolio, "BRL")
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING

from gemhub.models import AssetCategory, Portfolio, TransactionSource, TransactionType
from gemhub.services.analytics.types import (
    AnalyticsResult,
    CapitalMetrics,
    DividendBridge,
    MonthlyContribution,
)
from gemhub.services.constants import (
    DEFAULT_CONTRIBUTION_MONTHS,
    FALLBACK_BTC_PRICE_USD,
    FALLBACK_ETH_PRICE_USD,
    MONTHS_PER_YEAR,
    SATOSHIS_PER_BTC,
)
from gemhub.services.exceptions import ValidationError
from gemhub.services.valuation.calculators import PortfolioValuator

if TYPE_CHECKING:
    from gemhub.services.protocols import CurrencyConverterProtocol

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


class AnalyticsService:
    """
    Contribution and income analytics for a portfolio.

    Attributes:
        _converter: Injected currency converter
        _valuator: Calculator for the current portfolio total
    """

    def __init__(self, converter: CurrencyConverterProtocol) -> None:
        self._converter = converter
        self._valuator = PortfolioValuator(converter)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_analytics(
            self,
            portfolio: Portfolio,
            reporting_currency: str,
            months: int = DEFAULT_CONTRIBUTION_MONTHS,
    ) -> AnalyticsResult:
        """All analytics for one portfolio."""
        currency = reporting_currency.upper()
        return AnalyticsResult(
            portfolio_id=portfolio.id,
            reporting_currency=currency,
            capital=self.capital_metrics(portfolio, currency),
            monthly_contributions=self.monthly_contributions(portfolio, currency, months),
            dividend_bridge=self.dividend_bridge(portfolio),
        )

    def monthly_contributions(
            self,
            portfolio: Portfolio,
            reporting_currency: str,
            months: int = DEFAULT_CONTRIBUTION_MONTHS,
    ) -> list[MonthlyContribution]:
        """
        Bucket every transaction by calendar month.

        value = (quantity × price + fees) × rate(native → reporting)

        Reinvestments go to `reinvested`; everything else goes to the asset's
        category bucket.

        Args:
            portfolio: Loaded portfolio
            reporting_currency: Currency of the amounts
            months: Number of most recent months with activity to return

        Returns:
            Buckets in chronological order, at most `months` of them

        Raises:
            ValidationError: If months < 1
        """
        if months < 1:
            raise ValidationError(f"months must be at least 1, got {months}", field="months")

        buckets: dict[str, MonthlyContribution] = {}

        for asset in portfolio.assets:
            rate = self._converter.get_rate(asset.category.native_currency, reporting_currency)

            for txn in asset.transactions:
                key = txn.date.strftime("%Y-%m")
                bucket = buckets.setdefault(key, MonthlyContribution(month=key))
                value = (txn.quantity * txn.price + txn.fees) * rate

                if txn.source == TransactionSource.REINVESTMENT:
                    bucket.reinvested += value
                elif asset.category == AssetCategory.CRYPTO:
                    bucket.crypto += value
                else:
                    bucket.fii += value

        ordered = [buckets[key] for key in sorted(buckets)]
        return ordered[-months:]

    def capital_metrics(self, portfolio: Portfolio, reporting_currency: str) -> CapitalMetrics:
        """
        Compare invested capital with the current value.

        BUY adds quantity × price + fees to total_invested (and to new_money
        or reinvested by source). SELL subtracts quantity × price. DIVIDEND
        entries are ignored.
        """
        total_invested = _ZERO
        new_money = _ZERO
        reinvested = _ZERO
        annual_income = _ZERO

        for asset in portfolio.assets:
            rate = self._converter.get_rate(asset.category.native_currency, reporting_currency)

            for txn in asset.transactions:
                if txn.transaction_type == TransactionType.BUY:
                    value = (txn.quantity * txn.price + txn.fees) * rate
                    total_invested += value
                    if txn.source == TransactionSource.REINVESTMENT:
                        reinvested += value
                    else:
                        new_money += value
                elif txn.transaction_type == TransactionType.SELL:
                    total_invested -= txn.quantity * txn.price * rate

            if asset.category == AssetCategory.FII:
                annual_income += (asset.prov_dividend or _ZERO) * rate * MONTHS_PER_YEAR

        current_total = self._valuator.calculate(portfolio.assets, reporting_currency).total_value
        profit = current_total - total_invested

        if total_invested > _ZERO:
            profit_pct = profit / total_invested * _HUNDRED
            yield_on_cost = annual_income / total_invested * _HUNDRED
        else:
            profit_pct = _ZERO
            yield_on_cost = _ZERO

        return CapitalMetrics(
            total_invested=total_invested,
            new_money=new_money,
            reinvested=reinvested,
            current_total=current_total,
            profit=profit,
            profit_pct=profit_pct,
            annual_income=annual_income,
            yield_on_cost=yield_on_cost,
        )

    def dividend_bridge(self, portfolio: Portfolio) -> DividendBridge:
        """
        Express monthly FII dividends in BTC satoshis and ETH.

        Uses the held BTC/ETH current prices, or reference prices when the
        coin is not held.
        """
        fii_currency = AssetCategory.FII.native_currency
        monthly_dividends = sum(
            (a.prov_dividend or _ZERO for a in portfolio.assets if a.category == AssetCategory.FII),
            _ZERO,
        )
        monthly_usd = self._converter.convert(monthly_dividends, fii_currency, "USD")

        btc_price = self._held_price(portfolio, "BTC") or FALLBACK_BTC_PRICE_USD
        eth_price = self._held_price(portfolio, "ETH") or FALLBACK_ETH_PRICE_USD

        satoshis = (monthly_usd / btc_price * SATOSHIS_PER_BTC).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )

        return DividendBridge(
            monthly_dividends=monthly_dividends,
            monthly_dividends_usd=monthly_usd,
            btc_price_usd=btc_price,
            eth_price_usd=eth_price,
            satoshis=satoshis,
            eth=monthly_usd / eth_price,
        )

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    @staticmethod
    def _held_price(portfolio: Portfolio, ticker: str) -> Decimal | None:
        asset = next((a for a in portfolio.assets if a.ticker == ticker), None)
        if asset is None or not asset.current_price:
            return None
        return asset.current_price
