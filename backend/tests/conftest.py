# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- Store, ledger and converter fixtures
- Mock price provider
- API TestClient with dependency overrides
- Sample data factories
"""

import os

# Must be set before any gemhub import: settings are read at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("PRICE_REFRESH_ENABLED", "false")

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gemhub.database import get_db
from gemhub.dependencies import get_price_refresh_service
from gemhub.main import app
from gemhub.models import (
    Base,
    Asset,
    AssetCategory,
    Portfolio,
    Transaction,
    TransactionSource,
    TransactionType,
)
from gemhub.services.exceptions import ProviderUnavailableError
from gemhub.services.fx_rate_service import CurrencyConverter
from gemhub.services.ledger import LedgerService, NewTransaction
from gemhub.services.market_data import PriceRefreshService
from gemhub.services.market_data.base import (
    PriceFeedProvider,
    PriceFetchResult,
    PriceMode,
    PriceQuote,
)
from gemhub.services.persistence import ChangeNotifier, SqlPortfolioStore


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the test engine (for jobs that open their own session)."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Iterator[Session]:
    """Create a database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def converter() -> CurrencyConverter:
    """Converter with the default USD/BRL rate of 5.45."""
    return CurrencyConverter(usd_to_brl=Decimal("5.45"))


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def store(db: Session, notifier: ChangeNotifier) -> SqlPortfolioStore:
    return SqlPortfolioStore(db, notifier)


@pytest.fixture
def ledger(store: SqlPortfolioStore) -> LedgerService:
    return LedgerService(store)


# =============================================================================
# MOCK PRICE PROVIDER
# =============================================================================

class MockPriceProvider(PriceFeedProvider):
    """
    Mock implementation of PriceFeedProvider for testing.

    Allows configuring quotes for specific tickers and simulating errors.
    """

    def __init__(self):
        self._prices: dict[str, tuple[Decimal, Decimal]] = {}
        self._error: Exception | None = None
        self._partial_failure = False
        self.call_count = 0
        self.last_mode: PriceMode | None = None

    @property
    def name(self) -> str:
        return "mock"

    def set_price(self, ticker: str, price: str, daily_change: str = "0") -> None:
        """Configure a quote for a ticker."""
        self._prices[ticker.upper()] = (Decimal(price), Decimal(daily_change))

    def set_error(self, error: Exception) -> None:
        """Make every fetch raise `error`."""
        self._error = error

    def set_partial_failure(self, value: bool = True) -> None:
        self._partial_failure = value

    def fetch_prices(
            self,
            assets: Sequence[Asset],
            mode: PriceMode = PriceMode.SIMULATED,
    ) -> PriceFetchResult:
        self.call_count += 1
        self.last_mode = mode

        if self._error is not None:
            raise self._error

        result = PriceFetchResult(partial_failure=self._partial_failure)
        for ticker, (price, change) in self._prices.items():
            result.prices[ticker] = PriceQuote(
                ticker=ticker, price=price, daily_change=change, source=self.name
            )
        return result


@pytest.fixture
def mock_provider() -> MockPriceProvider:
    """Create a fresh mock provider for each test."""
    return MockPriceProvider()


@pytest.fixture
def unavailable_error() -> ProviderUnavailableError:
    return ProviderUnavailableError("mock", "connection refused")


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def create_portfolio(
        db: Session,
        name: str = "Test Portfolio",
        preferred_currency: str = "BRL",
) -> Portfolio:
    """Factory function for creating Portfolio entities in the database."""
    portfolio = Portfolio(name=name, preferred_currency=preferred_currency)
    db.add(portfolio)
    db.commit()
    db.refresh(portfolio)
    return portfolio


def create_asset(
        db: Session,
        portfolio: Portfolio,
        ticker: str = "BTC",
        category: AssetCategory = AssetCategory.CRYPTO,
        sector: str | None = None,
        current_price: Decimal = Decimal("0"),
        daily_change: Decimal = Decimal("0"),
        prov_dividend: Decimal | None = None,
) -> Asset:
    """
    Factory function for creating an Asset without ledger entries.

    The cached position starts at zero; record transactions through the
    ledger to derive it.
    """
    asset = Asset(
        portfolio_id=portfolio.id,
        ticker=ticker,
        category=category,
        sector=sector or category.default_sector,
        average_price=Decimal("0"),
        total_quantity=Decimal("0"),
        current_price=current_price,
        daily_change=daily_change,
        prov_dividend=prov_dividend,
    )
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


def buy(
        quantity: str,
        price: str,
        fees: str = "0",
        on: date = date(2024, 1, 15),
        source: TransactionSource = TransactionSource.NEW_MONEY,
) -> NewTransaction:
    """Shorthand for a BUY NewTransaction."""
    return NewTransaction(
        transaction_type=TransactionType.BUY,
        quantity=Decimal(quantity),
        price=Decimal(price),
        fees=Decimal(fees),
        date=on,
        source=source,
    )


def sell(quantity: str, price: str, fees: str = "0", on: date = date(2024, 2, 15)) -> NewTransaction:
    """Shorthand for a SELL NewTransaction."""
    return NewTransaction(
        transaction_type=TransactionType.SELL,
        quantity=Decimal(quantity),
        price=Decimal(price),
        fees=Decimal(fees),
        date=on,
    )


def make_transaction(
        transaction_type: TransactionType,
        quantity: str,
        price: str,
        fees: str = "0",
        on: date = date(2024, 1, 15),
        seq: int = 1,
        source: TransactionSource = TransactionSource.NEW_MONEY,
) -> Transaction:
    """Unsaved Transaction entity for pure calculator tests."""
    return Transaction(
        id=f"tx{seq}",
        seq=seq,
        transaction_type=transaction_type,
        source=source,
        date=on,
        quantity=Decimal(quantity),
        price=Decimal(price),
        fees=Decimal(fees),
    )


# =============================================================================
# FIXTURE EXPORTS
# =============================================================================

@pytest.fixture
def sample_portfolio(db: Session) -> Portfolio:
    """Provide an empty sample Portfolio for tests."""
    return create_portfolio(db)


# =============================================================================
# API CLIENT
# =============================================================================

@pytest.fixture(scope="function")
def client(db: Session, mock_provider: MockPriceProvider) -> Iterator[TestClient]:
    """
    TestClient with the database session and price provider overridden.

    Requests share the test's session, so rows written through the API are
    visible to the test and vice versa.
    """

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_price_refresh_service] = lambda: PriceRefreshService(
        mock_provider, PriceMode.SIMULATED
    )

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
