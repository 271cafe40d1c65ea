# backend/gemhub/services/market_data/base.py
"""
Abstract interface for price feed providers.

This module defines the contract that all price providers must follow.
Using an abstract base class allows for:
- Swapping the simulated feed for a realtime one without touching callers
- Mock implementations for testing
- Partial failure reporting in one shape for every provider

Providers never mutate assets. They return quotes keyed by ticker and the
refresh service decides what to merge.
"""

import enum
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from gemhub.models import Asset


class PriceMode(str, enum.Enum):
    """Where prices come from."""
    SIMULATED = "simulated"
    REALTIME = "realtime"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class PriceQuote:
    """
    One price update for one ticker, in the asset's native currency.

    Attributes:
        ticker: Asset ticker (upper-case)
        price: New current price
        daily_change: New daily change in percent
        source: Provider name that produced the quote ("binance", "simulated")
    """

    ticker: str
    price: Decimal
    daily_change: Decimal
    source: str

    def __post_init__(self) -> None:
        if not self.ticker:
            raise ValueError("ticker is required")


@dataclass
class PriceFetchResult:
    """
    Result of a price fetch for a set of assets.

    Attributes:
        prices: Quotes keyed by ticker
        partial_failure: True if any asset fell back to a simulated quote
        failed: Ticker → error message for assets whose realtime fetch failed
    """

    prices: dict[str, PriceQuote] = field(default_factory=dict)
    partial_failure: bool = False
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def quote_count(self) -> int:
        return len(self.prices)


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class PriceFeedProvider(ABC):
    """
    Abstract base class for price feed providers.

    No retry or backoff: a failed fetch is simply superseded by the next
    scheduled refresh.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this provider.

        Used for logging and error messages.
        """
        pass

    @abstractmethod
    def fetch_prices(
            self,
            assets: Sequence[Asset],
            mode: PriceMode = PriceMode.SIMULATED,
    ) -> PriceFetchResult:
        """
        Fetch new prices for the given assets.

        Args:
            assets: Assets to price (ticker, category, current_price, daily_change)
            mode: Simulated or realtime

        Returns:
            PriceFetchResult with one quote per priced asset

        Raises:
            MarketDataError: If the provider cannot produce any result
        """
        pass
