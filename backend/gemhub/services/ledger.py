# backend/gemhub/services/ledger.py
"""
Transaction ledger operations.

The ledger is the single source of truth for an asset's position. Each
mutation appends or removes one transaction, recomputes the asset's cached
position through the PositionAggregator and saves the portfolio, so the
cached fields are never stale when an operation returns.

Usage:
    ledger = LedgerService(store)

    txn = ledger.record(portfolio, "btc", NewTransaction(
        transaction_type=TransactionType.BUY,
        quantity=Decimal("0.1"),
        price=Decimal("40000"),
        fees=Decimal("5"),
        date=date(2024, 1, 15),
    ))
    ledger.remove(portfolio, "BTC", txn.id)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from gemhub.models import (
    Asset,
    AssetCategory,
    Portfolio,
    Transaction,
    TransactionSource,
    TransactionType,
)
from gemhub.services.constants import FII_TICKER_SUFFIX
from gemhub.services.exceptions import (
    AssetNotFoundError,
    CategoryMismatchError,
    InvalidTransactionError,
    TransactionNotFoundError,
)
from gemhub.services.valuation.calculators import PositionAggregator
from gemhub.services.valuation.types import Position

if TYPE_CHECKING:
    from gemhub.services.protocols import PortfolioStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewTransaction:
    """Transaction data as entered, before it gets an id."""

    transaction_type: TransactionType
    quantity: Decimal
    price: Decimal
    date: date
    fees: Decimal = Decimal("0")
    source: TransactionSource = TransactionSource.NEW_MONEY


def normalize_ticker(ticker: str) -> str:
    return ticker.strip().upper()


def infer_category(ticker: str) -> AssetCategory:
    """
    Guess a category from the ticker.

    B3 real-estate fund tickers end in "11" (MXRF11, HGLG11); anything else
    is treated as crypto. Ambiguous for unknown symbols, so callers should
    prefer an explicit category.
    """
    if normalize_ticker(ticker).endswith(FII_TICKER_SUFFIX):
        return AssetCategory.FII
    return AssetCategory.CRYPTO


def new_transaction_id() -> str:
    return uuid.uuid4().hex


class LedgerService:
    """
    Records and removes transactions, keeping positions consistent.

    The persistence handle is passed in explicitly; the service never opens
    its own connection.
    """

    def __init__(
            self,
            store: PortfolioStore,
            aggregator: PositionAggregator | None = None,
    ) -> None:
        self._store = store
        self._aggregator = aggregator or PositionAggregator()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def record(
            self,
            portfolio: Portfolio,
            ticker: str,
            tx: NewTransaction,
            category: AssetCategory | None = None,
    ) -> Transaction:
        """
        Append a transaction to the asset matching `ticker`.

        The asset is created when the ticker is unseen, using `category` or,
        when none is given, the category inferred from the ticker.

        Args:
            portfolio: Loaded portfolio to mutate
            ticker: Asset ticker (case-insensitive)
            tx: Transaction data
            category: Explicit asset category (optional)

        Returns:
            The stored Transaction, with its generated id

        Raises:
            InvalidTransactionError: If the transaction data is invalid
            CategoryMismatchError: If `category` contradicts the existing asset
            PersistenceError: If the portfolio cannot be saved
        """
        symbol = normalize_ticker(ticker)
        self._validate(symbol, tx)

        asset = self._find_asset(portfolio, symbol)

        if asset is None:
            asset = self._create_asset(portfolio, symbol, tx, category)
        elif category is not None and category != asset.category:
            raise CategoryMismatchError(symbol, asset.category.value, category.value)

        next_seq = max((t.seq for t in asset.transactions), default=0) + 1
        txn = Transaction(
            id=new_transaction_id(),
            seq=next_seq,
            transaction_type=tx.transaction_type,
            source=tx.source,
            date=tx.date,
            quantity=tx.quantity,
            price=tx.price,
            fees=tx.fees,
            created_at=datetime.now(timezone.utc),
        )
        asset.transactions.append(txn)

        self.refresh_position(asset)
        self._store.save(portfolio)

        logger.info(
            f"Recorded {tx.transaction_type.value} {tx.quantity} {symbol} @ {tx.price} "
            f"in portfolio {portfolio.id} (tx={txn.id})"
        )
        return txn

    def remove(self, portfolio: Portfolio, ticker: str, transaction_id: str) -> None:
        """
        Remove one transaction and recompute the asset's position.

        The asset itself is kept even when its ledger becomes empty.

        Raises:
            AssetNotFoundError: If the ticker is not in the portfolio
            TransactionNotFoundError: If the id is not in the asset's ledger
            PersistenceError: If the portfolio cannot be saved
        """
        symbol = normalize_ticker(ticker)
        asset = self._find_asset(portfolio, symbol)
        if asset is None:
            raise AssetNotFoundError(symbol)

        txn = next((t for t in asset.transactions if t.id == transaction_id), None)
        if txn is None:
            raise TransactionNotFoundError(transaction_id, symbol)

        asset.transactions.remove(txn)

        self.refresh_position(asset)
        self._store.save(portfolio)

        logger.info(f"Removed transaction {transaction_id} from {symbol} in portfolio {portfolio.id}")

    def refresh_position(self, asset: Asset) -> Position:
        """
        Recompute and store an asset's cached position from its ledger.

        This is the only place that writes average_price and total_quantity.
        """
        position = self._aggregator.aggregate(asset.transactions)
        asset.total_quantity = position.total_quantity
        asset.average_price = position.average_price
        return position

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    @staticmethod
    def _validate(symbol: str, tx: NewTransaction) -> None:
        if not symbol:
            raise InvalidTransactionError("Ticker cannot be empty", field="ticker")
        if tx.quantity <= 0:
            raise InvalidTransactionError(
                f"Quantity must be positive, got {tx.quantity}", field="quantity"
            )
        if tx.price <= 0:
            raise InvalidTransactionError(
                f"Price must be positive, got {tx.price}", field="price"
            )
        if tx.fees < 0:
            raise InvalidTransactionError(
                f"Fees cannot be negative, got {tx.fees}", field="fees"
            )

    @staticmethod
    def _find_asset(portfolio: Portfolio, symbol: str) -> Asset | None:
        return next((a for a in portfolio.assets if a.ticker == symbol), None)

    @staticmethod
    def _create_asset(
            portfolio: Portfolio,
            symbol: str,
            tx: NewTransaction,
            category: AssetCategory | None,
    ) -> Asset:
        if category is None:
            category = infer_category(symbol)
            logger.warning(
                f"No category given for new asset {symbol}; inferred {category.value} from ticker"
            )

        asset = Asset(
            ticker=symbol,
            category=category,
            sector=category.default_sector,
            average_price=Decimal("0"),
            total_quantity=Decimal("0"),
            current_price=tx.price,
            daily_change=Decimal("0"),
            last_update=datetime.now(timezone.utc),
        )
        portfolio.assets.append(asset)

        logger.info(f"Created {category.value} asset {symbol} in portfolio {portfolio.id}")
        return asset
