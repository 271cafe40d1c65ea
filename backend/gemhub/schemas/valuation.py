# backend/gemhub/schemas/valuation.py
"""
Pydantic schemas for portfolio valuation and rebalance advice.

Amounts are returned unrounded; formatting is the client's concern.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from gemhub.models import AssetCategory


# =============================================================================
# VALUATION SCHEMAS
# =============================================================================

class AssetValuationResponse(BaseModel):
    """Market value of one asset."""

    model_config = ConfigDict(from_attributes=True)

    ticker: str
    category: AssetCategory
    sector: str
    quantity: Decimal
    average_price: Decimal = Field(..., description="Cost per unit, native currency")
    current_price: Decimal = Field(..., description="Price per unit, native currency")
    daily_change: Decimal = Field(..., description="Daily change in percent")
    native_currency: str
    fx_rate: Decimal = Field(..., description="Native → reporting multiplier")
    market_value_native: Decimal
    market_value: Decimal = Field(..., description="Market value, reporting currency")
    cost_basis: Decimal = Field(..., description="Cost basis, reporting currency")
    unrealized_pnl: Decimal
    unrealized_pct: Decimal | None = Field(..., description="None when cost basis is 0")
    weight: Decimal = Field(..., description="Share of the portfolio total in percent")
    prov_dividend: Decimal = Field(..., description="Provisioned monthly dividend, reporting currency")


class GroupTotalResponse(BaseModel):
    """Total for one category or sector."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    value: Decimal
    weight: Decimal
    asset_count: int


class PortfolioValuationResponse(BaseModel):
    """Complete portfolio valuation."""

    portfolio_id: int
    reporting_currency: str
    group_by: str
    total_value: Decimal
    total_cost_basis: Decimal
    total_unrealized_pnl: Decimal
    monthly_yield: Decimal
    native_totals: dict[str, Decimal] = Field(
        ...,
        description="Per-category totals in the category's native currency"
    )
    groups: list[GroupTotalResponse]
    assets: list[AssetValuationResponse]
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# REBALANCE SCHEMAS
# =============================================================================

class RebalanceResponse(BaseModel):
    """Suggested split of a new contribution between crypto and FIIs."""

    portfolio_id: int
    reporting_currency: str
    target_crypto_pct: Decimal = Field(..., description="Target crypto share in percent")
    contribution: Decimal
    current_crypto: Decimal
    current_fii: Decimal
    new_total: Decimal
    target_crypto: Decimal
    target_fii: Decimal
    crypto_allocation: Decimal
    fii_allocation: Decimal
