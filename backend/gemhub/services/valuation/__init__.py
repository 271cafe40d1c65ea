# backend/gemhub/services/valuation/__init__.py
"""
Valuation Service Package.

This package provides:
- Position derivation from a transaction ledger (PositionAggregator)
- Portfolio valuation in one reporting currency (get_valuation)
- Contribution rebalance advice (get_rebalance)

Usage:
    from gemhub.services.valuation import ValuationService

    service = ValuationService(converter)
    result = service.get_valuation(portfolio, "BRL", group_by="sector")

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── calculators.py           # Point-in-time calculators
    └── service.py               # ValuationService (orchestrator)

Data Flow:
    Transactions → PositionAggregator → Position (cached on Asset)
    Asset + FX rate → MarketValueCalculator → AssetValuation
    AssetValuations → PortfolioValuator → PortfolioValuation
    Category totals → RebalanceAdvisor → RebalanceSuggestion
"""

# Calculators (for testing / direct usage)
from gemhub.services.valuation.calculators import (
    PositionAggregator,
    MarketValueCalculator,
    PortfolioValuator,
)
# Main service
from gemhub.services.valuation.service import ValuationService
# Internal types
from gemhub.services.valuation.types import (
    GroupBy,
    Position,
    AssetValuation,
    GroupTotal,
    PortfolioValuation,
)

__all__ = [
    # Main service
    "ValuationService",

    # Data types
    "GroupBy",
    "Position",
    "AssetValuation",
    "GroupTotal",
    "PortfolioValuation",

    # Calculators
    "PositionAggregator",
    "MarketValueCalculator",
    "PortfolioValuator",
]
