# backend/gemhub/dependencies.py
"""
Dependency injection module for FastAPI services.

Stateless services and shared collaborators (converter, price provider,
change notifier) are process-wide singletons, lazily created on first use.
The portfolio store and ledger are built per request around the request's
database session.

Usage in routers:
    from gemhub.dependencies import get_ledger_service, get_portfolio_store

    @router.post("/")
    def record(
        ledger: LedgerService = Depends(get_ledger_service),
        store: SqlPortfolioStore = Depends(get_portfolio_store),
    ):
        ...
"""

import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from gemhub.config import settings
from gemhub.database import get_db
from gemhub.models import Portfolio
from gemhub.services.analytics import AnalyticsService
from gemhub.services.export import TransactionExporter
from gemhub.services.fx_rate_service import CurrencyConverter
from gemhub.services.ledger import LedgerService
from gemhub.services.market_data import (
    BinancePriceProvider,
    PriceMode,
    PriceRefreshService,
    SimulatedPriceProvider,
)
from gemhub.services.persistence import ChangeNotifier, SqlPortfolioStore
from gemhub.services.valuation import ValuationService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_currency_converter, get_change_notifier, get_price_provider (no deps)
# 2. get_valuation_service, get_analytics_service, get_exporter (converter)
# 3. get_price_refresh_service (provider)


@lru_cache(maxsize=1)
def get_currency_converter() -> CurrencyConverter:
    logger.debug(f"Initializing singleton CurrencyConverter (USD/BRL={settings.usd_to_brl})")
    return CurrencyConverter(usd_to_brl=settings.usd_to_brl)


@lru_cache(maxsize=1)
def get_change_notifier() -> ChangeNotifier:
    """
    Process-wide change notifier.

    Shared by request-scoped stores and the background refresh job, so a
    subscriber sees every save regardless of which session made it.
    """
    logger.debug("Initializing singleton ChangeNotifier")
    return ChangeNotifier()


@lru_cache(maxsize=1)
def get_price_provider() -> BinancePriceProvider:
    """Binance provider; falls back to (and in simulated mode delegates to) the simulator."""
    logger.debug(f"Initializing singleton BinancePriceProvider ({settings.binance_api_url})")
    return BinancePriceProvider(
        base_url=settings.binance_api_url,
        timeout=settings.price_request_timeout,
        simulator=SimulatedPriceProvider(),
    )


@lru_cache(maxsize=1)
def get_valuation_service() -> ValuationService:
    logger.debug("Initializing singleton ValuationService")
    return ValuationService(
        converter=get_currency_converter(),
        default_currency=settings.reporting_currency,
    )


@lru_cache(maxsize=1)
def get_analytics_service() -> AnalyticsService:
    logger.debug("Initializing singleton AnalyticsService")
    return AnalyticsService(converter=get_currency_converter())


@lru_cache(maxsize=1)
def get_exporter() -> TransactionExporter:
    return TransactionExporter(converter=get_currency_converter())


@lru_cache(maxsize=1)
def get_price_refresh_service() -> PriceRefreshService:
    logger.debug(f"Initializing singleton PriceRefreshService (mode={settings.price_mode})")
    return PriceRefreshService(
        provider=get_price_provider(),
        default_mode=PriceMode(settings.price_mode),
    )


# =============================================================================
# REQUEST-SCOPED SERVICES
# =============================================================================

def get_portfolio_store(
        db: Session = Depends(get_db),
        notifier: ChangeNotifier = Depends(get_change_notifier),
) -> SqlPortfolioStore:
    """Portfolio store bound to the request's session."""
    return SqlPortfolioStore(db, notifier)


def get_ledger_service(
        store: SqlPortfolioStore = Depends(get_portfolio_store),
) -> LedgerService:
    """Ledger bound to the request's portfolio store."""
    return LedgerService(store)


def get_portfolio(
        portfolio_id: int,
        store: SqlPortfolioStore = Depends(get_portfolio_store),
) -> Portfolio:
    """
    Load the portfolio named in the path.

    Raises PortfolioNotFoundError (mapped to 404 by the global handler).
    """
    return store.load(portfolio_id)
