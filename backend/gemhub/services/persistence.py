# backend/gemhub/services/persistence.py
"""
Portfolio persistence backed by a SQLAlchemy session.

SqlPortfolioStore implements the PortfolioStore protocol. Whether portfolios
live in a server database (PostgreSQL) or in local storage (SQLite file) is
decided by DATABASE_URL; the code path is the same.

Change subscriptions go through a ChangeNotifier shared by the whole
process, so a save made by one request (or by the scheduled price refresh)
reaches subscribers registered from anywhere else.

Concurrency:
    Last writer wins. Two sessions saving the same portfolio are not
    coordinated beyond what the database itself enforces.
"""

from __future__ import annotations

import logging
import threading

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from gemhub.models import Asset, Portfolio, RiskProfile
from gemhub.services.constants import DEFAULT_REPORTING_CURRENCY
from gemhub.services.exceptions import PersistenceError, PortfolioNotFoundError
from gemhub.services.protocols import ChangeCallback, Unsubscribe

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """
    Thread-safe registry of per-portfolio change callbacks.

    A callback that raises is logged and skipped; other subscribers still
    run and the save that triggered the notification is not affected.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[int, list[ChangeCallback]] = {}

    def subscribe(self, portfolio_id: int, callback: ChangeCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.setdefault(portfolio_id, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(portfolio_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(portfolio_id, None)

        return unsubscribe

    def notify(self, portfolio: Portfolio) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(portfolio.id, []))

        for callback in callbacks:
            try:
                callback(portfolio)
            except Exception:
                logger.exception(f"Change subscriber failed for portfolio {portfolio.id}")

    def subscriber_count(self, portfolio_id: int) -> int:
        with self._lock:
            return len(self._subscribers.get(portfolio_id, []))


class SqlPortfolioStore:
    """
    PortfolioStore over a SQLAlchemy session.

    The session is owned by the caller (request scope or refresh job); the
    store never closes it.
    """

    def __init__(self, db: Session, notifier: ChangeNotifier) -> None:
        self._db = db
        self._notifier = notifier

    def load(self, portfolio_id: int) -> Portfolio:
        """
        Load a portfolio with its assets and their ledgers.

        Raises:
            PortfolioNotFoundError: If no portfolio has this id
        """
        query = (
            select(Portfolio)
            .options(selectinload(Portfolio.assets).selectinload(Asset.transactions))
            .where(Portfolio.id == portfolio_id)
        )
        portfolio = self._db.scalar(query)

        if portfolio is None:
            raise PortfolioNotFoundError(portfolio_id)

        return portfolio

    def save(self, portfolio: Portfolio) -> None:
        """
        Commit the portfolio and notify subscribers.

        Raises:
            PersistenceError: If the commit fails. The session is rolled back,
                              so the stored state is the last saved one.
        """
        self._db.add(portfolio)
        self._commit()

        logger.debug(f"Saved portfolio {portfolio.id}")
        self._notifier.notify(portfolio)

    def subscribe(self, portfolio_id: int, callback: ChangeCallback) -> Unsubscribe:
        return self._notifier.subscribe(portfolio_id, callback)

    def create(
            self,
            name: str,
            email: str | None = None,
            risk_profile: RiskProfile = RiskProfile.MODERADO,
            preferred_currency: str = DEFAULT_REPORTING_CURRENCY,
    ) -> Portfolio:
        """Create and commit an empty portfolio."""
        portfolio = Portfolio(
            name=name,
            email=email,
            risk_profile=risk_profile,
            preferred_currency=preferred_currency.upper(),
        )
        self._db.add(portfolio)
        self._commit()
        self._db.refresh(portfolio)

        logger.info(f"Created portfolio {portfolio.id} ({name})")
        return portfolio

    def list_portfolio_ids(self) -> list[int]:
        return list(self._db.scalars(select(Portfolio.id).order_by(Portfolio.id)))

    def _commit(self) -> None:
        try:
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"Commit failed, session rolled back: {e}")
            raise PersistenceError(str(e)) from e
