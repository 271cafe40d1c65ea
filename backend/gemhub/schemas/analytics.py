# backend/gemhub/schemas/analytics.py
"""
Pydantic schemas for contribution and income analytics.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MonthlyContributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str = Field(..., examples=["2024-03"])
    crypto: Decimal
    fii: Decimal
    reinvested: Decimal


class CapitalMetricsResponse(BaseModel):
    """Invested capital versus current value."""

    model_config = ConfigDict(from_attributes=True)

    total_invested: Decimal
    new_money: Decimal
    reinvested: Decimal
    current_total: Decimal
    profit: Decimal
    profit_pct: Decimal = Field(..., description="Percent of invested capital")
    annual_income: Decimal = Field(..., description="Provisioned FII dividends × 12")
    yield_on_cost: Decimal = Field(..., description="Annual income as percent of invested capital")


class DividendBridgeResponse(BaseModel):
    """Monthly FII dividends expressed in crypto units."""

    model_config = ConfigDict(from_attributes=True)

    monthly_dividends: Decimal
    monthly_dividends_usd: Decimal
    btc_price_usd: Decimal
    eth_price_usd: Decimal
    satoshis: Decimal
    eth: Decimal


class AnalyticsResponse(BaseModel):
    """All analytics for one portfolio."""

    model_config = ConfigDict(from_attributes=True)

    portfolio_id: int
    reporting_currency: str
    capital: CapitalMetricsResponse
    monthly_contributions: list[MonthlyContributionResponse]
    dividend_bridge: DividendBridgeResponse
