# backend/gemhub/services/__init__.py
"""
Service layer for business logic.

Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive collaborators (store, converter, provider) explicitly
- Are easily testable via dependency injection

Usage:
    from gemhub.services import LedgerService, ValuationService
    from gemhub.services import (
        InvalidTransactionError,
        PortfolioNotFoundError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Category profiles and defaults
    ├── protocols.py                 # Service interfaces (Protocol classes)
    ├── fx_rate_service.py           # USD/BRL conversion
    ├── ledger.py                    # Record/remove transactions
    ├── persistence.py               # SqlPortfolioStore, ChangeNotifier
    ├── rebalance.py                 # Contribution split advice
    ├── export.py                    # CSV export of the ledger
    ├── analytics/                   # Contribution and income analytics
    ├── market_data/                 # Price feeds and scheduled refresh
    └── valuation/                   # Position aggregation and valuation
"""

from gemhub.services.analytics import AnalyticsService
from gemhub.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidTransactionError,
    InvalidGroupingError,
    CategoryMismatchError,
    NotFoundError,
    PortfolioNotFoundError,
    AssetNotFoundError,
    TransactionNotFoundError,
    PersistenceError,
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    FXRateError,
    FXRateNotFoundError,
    FXConversionError,
)
from gemhub.services.export import TransactionExporter, ExportRow, export_filename
from gemhub.services.fx_rate_service import CurrencyConverter
from gemhub.services.ledger import LedgerService, NewTransaction, infer_category
from gemhub.services.market_data import (
    BinancePriceProvider,
    PriceMode,
    PriceRefreshScheduler,
    PriceRefreshService,
    SimulatedPriceProvider,
)
from gemhub.services.persistence import ChangeNotifier, SqlPortfolioStore
from gemhub.services.rebalance import RebalanceAdvisor, RebalanceSuggestion
from gemhub.services.valuation import ValuationService

__all__ = [
    # ==========================================================================
    # Services
    # ==========================================================================
    "LedgerService",
    "NewTransaction",
    "infer_category",
    "ValuationService",
    "RebalanceAdvisor",
    "RebalanceSuggestion",
    "AnalyticsService",
    "CurrencyConverter",
    "TransactionExporter",
    "ExportRow",
    "export_filename",
    # Persistence
    "SqlPortfolioStore",
    "ChangeNotifier",
    # Price feed
    "PriceMode",
    "SimulatedPriceProvider",
    "BinancePriceProvider",
    "PriceRefreshService",
    "PriceRefreshScheduler",

    # ==========================================================================
    # Exceptions
    # ==========================================================================
    "ServiceError",
    "ValidationError",
    "InvalidTransactionError",
    "InvalidGroupingError",
    "CategoryMismatchError",
    "NotFoundError",
    "PortfolioNotFoundError",
    "AssetNotFoundError",
    "TransactionNotFoundError",
    "PersistenceError",
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "FXRateError",
    "FXRateNotFoundError",
    "FXConversionError",
]
