# backend/gemhub/routers/__init__.py
"""
API routers for GEM Hub.

Each router handles a specific domain, all nested under /portfolios:
- portfolios: Portfolio profile and assets
- transactions: Ledger entries (record, list, remove)
- valuation: Portfolio valuation and rebalance advice
- analytics: Contribution/income analytics and CSV export
- prices: Manual price refresh
"""

from gemhub.routers.analytics import router as analytics_router
from gemhub.routers.portfolios import router as portfolios_router
from gemhub.routers.prices import router as prices_router
from gemhub.routers.transactions import router as transactions_router
from gemhub.routers.valuation import router as valuation_router

__all__ = [
    "portfolios_router",
    "transactions_router",
    "valuation_router",
    "analytics_router",
    "prices_router",
]
