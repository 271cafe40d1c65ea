# backend/gemhub/services/analytics/types.py
"""
Data types for the Analytics Service.

All types use Decimal for financial precision.

Architecture:
    - MonthlyContribution: Money put into the portfolio during one month
    - CapitalMetrics: Invested capital versus current value
    - DividendBridge: FII income expressed in crypto units
    - AnalyticsResult: Combined result
"""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class MonthlyContribution:
    """
    Contributions bucketed by calendar month.

    Reinvestments are counted apart from the category buckets, so
    crypto + fii is new money only.

    Attributes:
        month: "YYYY-MM"
        crypto: New money into crypto assets
        fii: New money into FIIs
        reinvested: Money from reinvested dividends (any category)
    """
    month: str
    crypto: Decimal = field(default_factory=lambda: Decimal("0"))
    fii: Decimal = field(default_factory=lambda: Decimal("0"))
    reinvested: Decimal = field(default_factory=lambda: Decimal("0"))

    @property
    def total(self) -> Decimal:
        return self.crypto + self.fii + self.reinvested


@dataclass(frozen=True)
class CapitalMetrics:
    """
    Invested capital versus current portfolio value.

    Attributes:
        total_invested: Buys (with fees) minus sells (at sale value)
        new_money: Buys funded by new money
        reinvested: Buys funded by reinvested dividends
        current_total: Current market value of the portfolio
        profit: current_total - total_invested
        profit_pct: profit as % of total_invested (0 if nothing invested)
        annual_income: Provisioned FII dividends × 12
        yield_on_cost: annual_income as % of total_invested (0 if nothing invested)
    """
    total_invested: Decimal
    new_money: Decimal
    reinvested: Decimal
    current_total: Decimal
    profit: Decimal
    profit_pct: Decimal
    annual_income: Decimal
    yield_on_cost: Decimal


@dataclass(frozen=True)
class DividendBridge:
    """
    Monthly FII dividends converted into crypto units.

    Attributes:
        monthly_dividends: Provisioned FII dividends (BRL)
        monthly_dividends_usd: Same amount in USD
        btc_price_usd: BTC price used (held asset or reference price)
        eth_price_usd: ETH price used (held asset or reference price)
        satoshis: Dividends expressed in satoshis (whole units)
        eth: Dividends expressed in ETH
    """
    monthly_dividends: Decimal
    monthly_dividends_usd: Decimal
    btc_price_usd: Decimal
    eth_price_usd: Decimal
    satoshis: Decimal
    eth: Decimal


@dataclass
class AnalyticsResult:
    """Combined analytics for one portfolio."""
    portfolio_id: int
    reporting_currency: str
    capital: CapitalMetrics
    monthly_contributions: list[MonthlyContribution]
    dividend_bridge: DividendBridge
