# backend/gemhub/services/constants.py
"""
Centralized constants for the GEM Hub services.

This module provides a single source of truth for the business constants
used across the application:

1. Category profiles (native currency, default sector, price volatility)
2. Price feed parameters for simulated and realtime refresh
3. Analytics defaults

Usage:
    from gemhub.services.constants import (
        CATEGORY_PROFILES,
        DEFAULT_USD_TO_BRL,
    )
"""

from dataclasses import dataclass
from decimal import Decimal

from gemhub.models import AssetCategory


# =============================================================================
# CATEGORY PROFILES
# =============================================================================

@dataclass(frozen=True)
class CategoryProfile:
    """
    Per-category data used by valuation and price simulation.

    Attributes:
        native_currency: Currency the category is quoted in (ISO 4217)
        default_sector: Sector assigned to newly created assets
        volatility: Amplitude of one simulated price step (0.005 = ±0.25%)
        realtime_feed: Whether a public realtime price feed exists
    """
    native_currency: str
    default_sector: str
    volatility: Decimal
    realtime_feed: bool


CATEGORY_PROFILES: dict[AssetCategory, CategoryProfile] = {
    AssetCategory.CRYPTO: CategoryProfile(
        native_currency="USD",
        default_sector="Ouro Digital",
        volatility=Decimal("0.005"),
        realtime_feed=True,
    ),
    AssetCategory.FII: CategoryProfile(
        native_currency="BRL",
        default_sector="Imobiliário",
        volatility=Decimal("0.001"),
        realtime_feed=False,
    ),
}

# B3 real-estate fund tickers end with this suffix (e.g. MXRF11, HGLG11)
FII_TICKER_SUFFIX: str = "11"


# =============================================================================
# CURRENCY
# =============================================================================

SUPPORTED_CURRENCIES: frozenset[str] = frozenset({"BRL", "USD"})

DEFAULT_REPORTING_CURRENCY: str = "BRL"

# Fallback USD/BRL rate when none is configured
DEFAULT_USD_TO_BRL: Decimal = Decimal("5.45")


# =============================================================================
# PRICE FEED SETTINGS
# =============================================================================

# Seconds between scheduled price refreshes
DEFAULT_PRICE_REFRESH_INTERVAL: int = 60

# Binance quote asset appended to crypto tickers (BTC -> BTCUSDT)
BINANCE_QUOTE_ASSET: str = "USDT"

# FIIs have no public realtime feed: drift = (U(0,1) - center) * amplitude
FII_DRIFT_CENTER: Decimal = Decimal("0.48")
FII_DRIFT_AMPLITUDE: Decimal = Decimal("0.004")


# =============================================================================
# ANALYTICS SETTINGS
# =============================================================================

# Number of monthly buckets returned by contribution history
DEFAULT_CONTRIBUTION_MONTHS: int = 6

MONTHS_PER_YEAR: int = 12

SATOSHIS_PER_BTC: Decimal = Decimal("100000000")

# Reference prices (USD) used when BTC/ETH are not held in the portfolio
FALLBACK_BTC_PRICE_USD: Decimal = Decimal("64000")
FALLBACK_ETH_PRICE_USD: Decimal = Decimal("3150")
