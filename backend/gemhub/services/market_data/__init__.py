# backend/gemhub/services/market_data/__init__.py
"""
Price feed package.

This package contains:
- Abstract interface for price providers (base.py)
- Random-walk simulator (simulated.py)
- Binance realtime implementation (binance.py)
- Refresh orchestration and scheduling (refresh.py)

Usage:
    from gemhub.services.market_data import (
        BinancePriceProvider,
        PriceMode,
        PriceRefreshService,
    )

    service = PriceRefreshService(BinancePriceProvider(settings.binance_api_url))
    outcome = service.refresh(portfolio.assets, PriceMode.REALTIME)

Architecture:
    PriceFeedProvider (ABC)
    ├── SimulatedPriceProvider
    └── BinancePriceProvider (falls back to the simulator per asset)

    PriceRefreshService
    └── Merges quotes into matching assets

    PriceRefreshScheduler
    └── Runs refresh_all_portfolios on a fixed interval
"""

from gemhub.services.market_data.base import (
    PriceFeedProvider,
    PriceFetchResult,
    PriceMode,
    PriceQuote,
)
from gemhub.services.market_data.binance import BinancePriceProvider
from gemhub.services.market_data.refresh import (
    PriceRefreshScheduler,
    PriceRefreshService,
    RefreshOutcome,
    refresh_all_portfolios,
)
from gemhub.services.market_data.simulated import SimulatedPriceProvider

__all__ = [
    # Abstract interface
    "PriceFeedProvider",
    "PriceMode",
    # Data classes
    "PriceQuote",
    "PriceFetchResult",
    # Concrete implementations
    "SimulatedPriceProvider",
    "BinancePriceProvider",
    # Refresh
    "PriceRefreshService",
    "RefreshOutcome",
    "PriceRefreshScheduler",
    "refresh_all_portfolios",
]
