# backend/gemhub/services/valuation/calculators.py
"""
Point-in-time valuation calculators.

Each calculator follows the Single Responsibility Principle:
- PositionAggregator: Derives quantity and average cost from a ledger
- MarketValueCalculator: Values one asset in the reporting currency
- PortfolioValuator: Aggregates asset values by category or sector

Design Principles:
- Each calculator does ONE thing well
- Stateless (no instance state besides injected collaborators)
- Receives all dependencies explicitly
- Returns structured result objects
- Uses Decimal for ALL financial calculations, with no rounding

Usage:
    aggregator = PositionAggregator()
    position = aggregator.aggregate(asset.transactions)

    valuator = PortfolioValuator(converter)
    valuation = valuator.calculate(portfolio.assets, "BRL", GroupBy.SECTOR)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from gemhub.models import Asset, AssetCategory, Transaction, TransactionType
from gemhub.services.exceptions import InvalidGroupingError
from gemhub.services.valuation.types import (
    AssetValuation,
    GroupBy,
    GroupTotal,
    PortfolioValuation,
    Position,
)

if TYPE_CHECKING:
    from gemhub.services.fx_rate_service import CurrencyConverter

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


# =============================================================================
# POSITION AGGREGATOR
# =============================================================================

class PositionAggregator:
    """
    Recomputes an asset's position from its full transaction ledger.

    Processes BUY and SELL transactions in chronological order (by date, ties
    kept in ledger order). DIVIDEND entries do not affect quantity or cost.

    BUY:
        total_cost = average_price × total_quantity + price × quantity + fees
        total_quantity += quantity
        average_price = total_cost / total_quantity

    SELL:
        total_quantity = max(0, total_quantity - quantity)
        average_price unchanged (realized gains are not tracked)

    Note:
        Selling more than is held clamps the quantity to zero. The clamp is
        reported as a warning, never raised.
    """

    def aggregate(self, transactions: Iterable[Transaction]) -> Position:
        """
        Aggregate a ledger into a Position.

        Args:
            transactions: The asset's transactions in insertion order

        Returns:
            Position with quantity, average price and warnings
        """
        # sorted() is stable: same-day entries keep their insertion order
        ordered = sorted(transactions, key=lambda txn: txn.date)

        total_quantity = _ZERO
        average_price = _ZERO
        buy_count = 0
        warnings: list[str] = []

        for txn in ordered:
            if txn.transaction_type == TransactionType.BUY:
                total_cost = (
                        average_price * total_quantity
                        + txn.price * txn.quantity
                        + txn.fees
                )
                total_quantity += txn.quantity
                average_price = total_cost / total_quantity
                buy_count += 1

            elif txn.transaction_type == TransactionType.SELL:
                if txn.quantity > total_quantity:
                    message = (
                        f"Sell of {txn.quantity} on {txn.date} exceeds holdings "
                        f"of {total_quantity}; quantity clamped to 0"
                    )
                    logger.warning(message)
                    warnings.append(message)
                total_quantity = max(_ZERO, total_quantity - txn.quantity)

        if buy_count == 0:
            return Position(
                total_quantity=_ZERO,
                average_price=_ZERO,
                buy_count=0,
                warnings=tuple(warnings),
            )

        return Position(
            total_quantity=total_quantity,
            average_price=average_price,
            buy_count=buy_count,
            warnings=tuple(warnings),
        )


# =============================================================================
# MARKET VALUE CALCULATOR
# =============================================================================

class MarketValueCalculator:
    """
    Calculates the market value of one asset in the reporting currency.

    market_value = total_quantity × current_price × multiplier

    The multiplier is the FX rate from the category's native currency to the
    reporting currency, or 1 when they are the same.
    """

    def __init__(self, converter: CurrencyConverter) -> None:
        self._converter = converter

    def multiplier(self, category: AssetCategory, reporting_currency: str) -> Decimal:
        """FX multiplier from the category's native currency to the reporting currency."""
        return self._converter.get_rate(category.native_currency, reporting_currency)

    def calculate(
            self,
            asset: Asset,
            reporting_currency: str,
            grand_total: Decimal | None = None,
    ) -> AssetValuation:
        """
        Value a single asset.

        Args:
            asset: Asset with derived position and current price
            reporting_currency: Currency to report in
            grand_total: Portfolio total for the weight calculation (optional)

        Returns:
            AssetValuation in the reporting currency
        """
        fx_rate = self.multiplier(asset.category, reporting_currency)
        quantity = asset.total_quantity or _ZERO
        average_price = asset.average_price or _ZERO
        current_price = asset.current_price or _ZERO

        market_value_native = quantity * current_price
        market_value = market_value_native * fx_rate
        cost_basis = quantity * average_price * fx_rate
        unrealized_pnl = market_value - cost_basis

        if cost_basis == _ZERO:
            unrealized_pct = None
        else:
            unrealized_pct = unrealized_pnl / cost_basis * _HUNDRED

        if grand_total:
            weight = market_value / grand_total * _HUNDRED
        else:
            weight = _ZERO

        return AssetValuation(
            ticker=asset.ticker,
            category=asset.category,
            sector=asset.sector,
            quantity=quantity,
            average_price=average_price,
            current_price=current_price,
            daily_change=asset.daily_change or _ZERO,
            native_currency=asset.category.native_currency,
            fx_rate=fx_rate,
            market_value_native=market_value_native,
            market_value=market_value,
            cost_basis=cost_basis,
            unrealized_pnl=unrealized_pnl,
            unrealized_pct=unrealized_pct,
            weight=weight,
            prov_dividend=(asset.prov_dividend or _ZERO) * fx_rate,
        )


# =============================================================================
# PORTFOLIO VALUATOR
# =============================================================================

class PortfolioValuator:
    """
    Aggregates asset market values into a single reporting currency.

    - Grand total = sum of per-asset market values
    - Group totals by category or sector, with weights
    - Native totals per category (crypto in USD, FII in BRL)
    - Monthly yield = sum of provisioned dividends, converted like values
    """

    def __init__(self, converter: CurrencyConverter) -> None:
        self._value_calc = MarketValueCalculator(converter)

    @staticmethod
    def resolve_group_by(group_by: GroupBy | str) -> GroupBy:
        """Parse a grouping key, raising InvalidGroupingError when unknown."""
        if isinstance(group_by, GroupBy):
            return group_by
        try:
            return GroupBy(str(group_by).lower())
        except ValueError:
            raise InvalidGroupingError(str(group_by)) from None

    def calculate(
            self,
            assets: Sequence[Asset],
            reporting_currency: str,
            group_by: GroupBy | str = GroupBy.CATEGORY,
    ) -> PortfolioValuation:
        """
        Value all assets and aggregate them.

        Args:
            assets: Portfolio assets
            reporting_currency: Currency to report in
            group_by: Grouping key for totals (category or sector)

        Returns:
            PortfolioValuation with per-asset detail and aggregates

        Raises:
            InvalidGroupingError: If group_by is not a known key
        """
        grouping = self.resolve_group_by(group_by)

        # First pass: grand total, needed for weights
        grand_total = sum(
            (self._value_calc.calculate(asset, reporting_currency).market_value for asset in assets),
            _ZERO,
        )

        valuations = [
            self._value_calc.calculate(asset, reporting_currency, grand_total)
            for asset in assets
        ]

        group_values: dict[str, Decimal] = {}
        group_counts: dict[str, int] = {}
        native_totals = {category: _ZERO for category in AssetCategory}
        total_cost_basis = _ZERO
        monthly_yield = _ZERO

        for valuation in valuations:
            key = valuation.category.value if grouping == GroupBy.CATEGORY else valuation.sector
            group_values[key] = group_values.get(key, _ZERO) + valuation.market_value
            group_counts[key] = group_counts.get(key, 0) + 1

            native_totals[valuation.category] += valuation.market_value_native
            total_cost_basis += valuation.cost_basis
            monthly_yield += valuation.prov_dividend

        groups = [
            GroupTotal(
                key=key,
                value=value,
                weight=(value / grand_total * _HUNDRED) if grand_total else _ZERO,
                asset_count=group_counts[key],
            )
            for key, value in group_values.items()
        ]

        warnings = [
            f"No current price for {valuation.ticker}"
            for valuation in valuations
            if valuation.quantity > _ZERO and valuation.current_price == _ZERO
        ]

        return PortfolioValuation(
            reporting_currency=reporting_currency.upper(),
            group_by=grouping,
            assets=valuations,
            groups=groups,
            native_totals=native_totals,
            total_value=grand_total,
            total_cost_basis=total_cost_basis,
            monthly_yield=monthly_yield,
            warnings=warnings,
        )
