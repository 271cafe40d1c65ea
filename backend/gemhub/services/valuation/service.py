# backend/gemhub/services/valuation/service.py
"""
Valuation Service - Main orchestrator for portfolio valuation.

This is the single entry point for valuation and allocation advice:
- get_valuation(): Complete portfolio valuation in one reporting currency
- get_rebalance(): Split a new contribution between crypto and the rest

Design Principles:
- Dependency Injection: CurrencyConverter injected via constructor
- Single Entry Point: All valuation goes through this service
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Composable: Uses specialized calculators for each task

Usage:
    from gemhub.services.valuation import ValuationService

    service = ValuationService(converter)

    valuation = service.get_valuation(portfolio, "BRL", group_by="sector")
    suggestion = service.get_rebalance(portfolio, Decimal("0.30"), Decimal("5000"))
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from gemhub.models import AssetCategory, Portfolio
from gemhub.services.constants import DEFAULT_REPORTING_CURRENCY
from gemhub.services.rebalance import RebalanceAdvisor, RebalanceSuggestion
from gemhub.services.valuation.calculators import PortfolioValuator
from gemhub.services.valuation.types import GroupBy, PortfolioValuation

if TYPE_CHECKING:
    from gemhub.services.protocols import CurrencyConverterProtocol

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for portfolio valuation operations.

    Works on an already loaded portfolio snapshot: assets carry their cached
    position and current price, so no database access happens here.

    Attributes:
        _converter: Injected currency converter
        _valuator: Portfolio aggregation calculator
        _advisor: Rebalance advisor
    """

    def __init__(
            self,
            converter: CurrencyConverterProtocol,
            default_currency: str = DEFAULT_REPORTING_CURRENCY,
    ) -> None:
        """
        Initialize the valuation service.

        Args:
            converter: Currency converter for native → reporting conversion
            default_currency: Reporting currency when the caller gives none
        """
        self._converter = converter
        self._default_currency = default_currency.upper()
        self._valuator = PortfolioValuator(converter)
        self._advisor = RebalanceAdvisor()

        logger.info("ValuationService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def resolve_currency(self, portfolio: Portfolio, reporting_currency: str | None = None) -> str:
        """Requested currency, else the portfolio's preferred one, else the service default."""
        return (reporting_currency or portfolio.preferred_currency or self._default_currency).upper()

    def get_valuation(
            self,
            portfolio: Portfolio,
            reporting_currency: str | None = None,
            group_by: GroupBy | str = GroupBy.CATEGORY,
    ) -> PortfolioValuation:
        """
        Value a portfolio.

        Args:
            portfolio: Loaded portfolio with assets
            reporting_currency: Currency to report in. Defaults to the
                                portfolio's preferred currency, then to the
                                service default.
            group_by: Grouping key for totals ("category" or "sector")

        Returns:
            PortfolioValuation

        Raises:
            InvalidGroupingError: If group_by is unknown
            FXRateNotFoundError: If the reporting currency is unsupported
        """
        currency = self.resolve_currency(portfolio, reporting_currency)

        logger.debug(
            f"Valuing portfolio {portfolio.id}: {len(portfolio.assets)} assets, "
            f"currency={currency}, group_by={group_by}"
        )

        valuation = self._valuator.calculate(portfolio.assets, currency, group_by)

        for warning in valuation.warnings:
            logger.warning(f"Portfolio {portfolio.id}: {warning}")

        return valuation

    def get_rebalance(
            self,
            portfolio: Portfolio,
            target_crypto_pct: Decimal,
            contribution: Decimal,
            reporting_currency: str | None = None,
    ) -> RebalanceSuggestion:
        """
        Suggest how to split a contribution between crypto and FIIs.

        Args:
            portfolio: Loaded portfolio with assets
            target_crypto_pct: Desired crypto share as a fraction (0.30 = 30%)
            contribution: New money to allocate, in the reporting currency
            reporting_currency: Currency of the totals and contribution

        Returns:
            RebalanceSuggestion where side A is crypto and side B is FIIs

        Raises:
            ValidationError: If the target or contribution is out of range
        """
        valuation = self.get_valuation(portfolio, reporting_currency)

        return self._advisor.suggest_for_category(
            valuation.category_totals(),
            AssetCategory.CRYPTO,
            target_crypto_pct,
            contribution,
        )
