# backend/gemhub/services/valuation/types.py
"""
Internal data types for the Valuation Service.

These dataclasses are used internally by the valuation calculators.
They are NOT Pydantic schemas - those are defined in gemhub/schemas/valuation.py
for API serialization.

Design Principles:
- Immutable where possible (frozen=True for value objects)
- Use Decimal for ALL financial values (never float)
- No rounding: presentation formatting is the caller's concern
- Warnings accumulate for data quality tracking

Type Hierarchy:
    Position            - Quantity and average cost derived from a ledger
    AssetValuation      - Market value of one asset in the reporting currency
    GroupTotal          - Sum of market values for one category/sector
    PortfolioValuation  - Complete portfolio valuation
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal

from gemhub.models import AssetCategory


class GroupBy(str, enum.Enum):
    """Grouping key for valuation totals."""
    CATEGORY = "category"
    SECTOR = "sector"


# =============================================================================
# POSITION
# =============================================================================

@dataclass(frozen=True)
class Position:
    """
    Position derived from an asset's transaction ledger.

    Attributes:
        total_quantity: Units currently held (never negative)
        average_price: Volume-weighted acquisition cost per unit, fees included.
                       Zero when the ledger holds no buys.
        buy_count: Number of BUY transactions processed
        warnings: Data quality notes (e.g. oversell clamped to zero)
    """

    total_quantity: Decimal
    average_price: Decimal
    buy_count: int = 0
    warnings: tuple[str, ...] = ()

    @property
    def has_position(self) -> bool:
        """True if there are units currently held."""
        return self.total_quantity > Decimal("0")


# =============================================================================
# VALUATION
# =============================================================================

@dataclass(frozen=True)
class AssetValuation:
    """
    Market value of a single asset.

    Attributes:
        ticker: Asset ticker
        category: Asset category
        sector: Sector label
        quantity: Units held
        average_price: Cost per unit in native currency
        current_price: Market price per unit in native currency
        daily_change: Daily change in percent
        native_currency: Currency the asset is quoted in
        fx_rate: Multiplier from native to reporting currency (1 if equal)
        market_value_native: quantity × current_price
        market_value: market_value_native × fx_rate
        cost_basis: quantity × average_price × fx_rate
        unrealized_pnl: market_value - cost_basis
        unrealized_pct: unrealized_pnl as % of cost_basis (None if cost is 0)
        weight: Share of the portfolio grand total in percent
        prov_dividend: Provisioned monthly dividend in the reporting currency (0 if none)
    """

    ticker: str
    category: AssetCategory
    sector: str
    quantity: Decimal
    average_price: Decimal
    current_price: Decimal
    daily_change: Decimal
    native_currency: str
    fx_rate: Decimal
    market_value_native: Decimal
    market_value: Decimal
    cost_basis: Decimal
    unrealized_pnl: Decimal
    unrealized_pct: Decimal | None
    weight: Decimal
    prov_dividend: Decimal


@dataclass(frozen=True)
class GroupTotal:
    """
    Total market value of one group (category or sector).

    Attributes:
        key: Group key (category value or sector name)
        value: Sum of market values in the reporting currency
        weight: Share of the grand total in percent
        asset_count: Number of assets in the group
    """

    key: str
    value: Decimal
    weight: Decimal
    asset_count: int


@dataclass
class PortfolioValuation:
    """
    Complete portfolio valuation in a single reporting currency.

    Attributes:
        reporting_currency: Currency of all aggregated amounts
        group_by: Grouping key used for `groups`
        assets: Per-asset valuations, in portfolio order
        groups: Totals per group, in first-seen order
        native_totals: Per-category totals in each category's native currency
        total_value: Grand total (sum of all market values)
        total_cost_basis: Sum of all cost bases
        monthly_yield: Sum of provisioned monthly dividends
        warnings: Data quality notes
    """

    reporting_currency: str
    group_by: GroupBy
    assets: list[AssetValuation]
    groups: list[GroupTotal]
    native_totals: dict[AssetCategory, Decimal]
    total_value: Decimal
    total_cost_basis: Decimal
    monthly_yield: Decimal
    warnings: list[str] = field(default_factory=list)

    def category_totals(self) -> dict[AssetCategory, Decimal]:
        """Reporting-currency total per category, zero for absent categories."""
        totals = {category: Decimal("0") for category in AssetCategory}
        for asset in self.assets:
            totals[asset.category] += asset.market_value
        return totals

    @property
    def total_unrealized_pnl(self) -> Decimal:
        return self.total_value - self.total_cost_basis
