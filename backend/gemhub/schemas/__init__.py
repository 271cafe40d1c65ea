# backend/gemhub/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

Organized by domain:
- analytics: Contribution history, capital metrics, dividend bridge
- errors: Error response formats
- portfolios: Portfolio and asset responses
- prices: Price refresh outcome
- transactions: Ledger entries
- validators: Reusable validation functions (ticker, currency)
- valuation: Portfolio valuation and rebalance advice

Usage:
    from gemhub.schemas import TransactionCreate, TransactionResponse
    from gemhub.schemas import PortfolioValuationResponse
"""

from gemhub.schemas.analytics import (
    AnalyticsResponse,
    CapitalMetricsResponse,
    DividendBridgeResponse,
    MonthlyContributionResponse,
)
from gemhub.schemas.errors import ErrorDetail, ValidationErrorDetail
from gemhub.schemas.portfolios import AssetResponse, PortfolioCreate, PortfolioResponse
from gemhub.schemas.prices import PriceRefreshResponse
from gemhub.schemas.transactions import (
    TransactionCreate,
    TransactionListResponse,
    TransactionResponse,
)
from gemhub.schemas.valuation import (
    AssetValuationResponse,
    GroupTotalResponse,
    PortfolioValuationResponse,
    RebalanceResponse,
)

__all__ = [
    # Analytics
    "AnalyticsResponse",
    "CapitalMetricsResponse",
    "DividendBridgeResponse",
    "MonthlyContributionResponse",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # Portfolios
    "PortfolioCreate",
    "PortfolioResponse",
    "AssetResponse",
    # Prices
    "PriceRefreshResponse",
    # Transactions
    "TransactionCreate",
    "TransactionResponse",
    "TransactionListResponse",
    # Valuation
    "AssetValuationResponse",
    "GroupTotalResponse",
    "PortfolioValuationResponse",
    "RebalanceResponse",
]
