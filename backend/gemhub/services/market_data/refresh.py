# backend/gemhub/services/market_data/refresh.py
"""
Price refresh orchestration.

PriceRefreshService merges a provider's quotes into assets:
- Only tickers present in the asset list are updated
- Quotes for unknown tickers are ignored
- Provider failures are caught here and produce a "no update" outcome, so
  prices keep their last known values

PriceRefreshScheduler runs a job on a fixed interval with an APScheduler
BackgroundScheduler (interval trigger).
A run that fails is logged and the next tick still happens. There is no
retry, no backoff and no cancellation of a run in progress: a newer refresh
simply overwrites an older one.

Usage:
    service = PriceRefreshService(provider, PriceMode.SIMULATED)
    outcome = service.refresh(portfolio.assets)

    scheduler = PriceRefreshScheduler(
        60, lambda: refresh_all_portfolios(SessionLocal, service, notifier)
    )
    scheduler.start()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import httpx
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from gemhub.models import Asset
from gemhub.services.exceptions import MarketDataError, PersistenceError
from gemhub.services.market_data.base import PriceFeedProvider, PriceMode
from gemhub.services.persistence import SqlPortfolioStore

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from gemhub.services.persistence import ChangeNotifier

logger = logging.getLogger(__name__)


@dataclass
class RefreshOutcome:
    """
    Result of merging one price fetch into a set of assets.

    Attributes:
        mode: Price mode used
        updated: Tickers whose price was updated
        ignored: Quoted tickers with no matching asset
        partial_failure: True if some assets fell back to simulated prices
        error: Error message when the fetch failed and nothing was updated
    """

    mode: PriceMode
    updated: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)
    partial_failure: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def updated_count(self) -> int:
        return len(self.updated)


class PriceRefreshService:
    """Fetches quotes and merges them into assets."""

    def __init__(
            self,
            provider: PriceFeedProvider,
            default_mode: PriceMode = PriceMode.SIMULATED,
    ) -> None:
        self._provider = provider
        self._default_mode = default_mode

    @property
    def default_mode(self) -> PriceMode:
        return self._default_mode

    def refresh(self, assets: Sequence[Asset], mode: PriceMode | None = None) -> RefreshOutcome:
        """
        Refresh prices in place.

        Args:
            assets: Assets to update (mutated: current_price, daily_change, last_update)
            mode: Price mode (defaults to the service's mode)

        Returns:
            RefreshOutcome. On provider failure, `error` is set and no asset
            is modified.
        """
        mode = mode or self._default_mode
        outcome = RefreshOutcome(mode=mode)

        if not assets:
            return outcome

        try:
            result = self._provider.fetch_prices(assets, mode)
        except (MarketDataError, httpx.HTTPError) as e:
            logger.warning(f"Price refresh via {self._provider.name} failed, keeping last prices: {e}")
            outcome.error = str(e)
            return outcome

        now = datetime.now(timezone.utc)
        by_ticker = {asset.ticker: asset for asset in assets}

        for ticker, quote in result.prices.items():
            asset = by_ticker.get(ticker)
            if asset is None:
                outcome.ignored.append(ticker)
                continue
            asset.current_price = quote.price
            asset.daily_change = quote.daily_change
            asset.last_update = now
            outcome.updated.append(ticker)

        outcome.partial_failure = result.partial_failure

        logger.info(
            f"Price refresh ({mode.value}): {outcome.updated_count} updated, "
            f"{len(outcome.ignored)} ignored, partial_failure={outcome.partial_failure}"
        )
        return outcome


def refresh_all_portfolios(
        session_factory: Callable[[], Session],
        refresh_service: PriceRefreshService,
        notifier: ChangeNotifier,
) -> dict[int, RefreshOutcome]:
    """
    Refresh and save every portfolio, one session per run.

    A portfolio that fails to save keeps its previous prices; the others are
    still processed.

    Returns:
        Portfolio id → RefreshOutcome
    """
    outcomes: dict[int, RefreshOutcome] = {}

    with session_factory() as db:
        store = SqlPortfolioStore(db, notifier)

        for portfolio_id in store.list_portfolio_ids():
            portfolio = store.load(portfolio_id)
            outcome = refresh_service.refresh(portfolio.assets)
            outcomes[portfolio_id] = outcome

            if not outcome.updated:
                continue
            try:
                store.save(portfolio)
            except PersistenceError as e:
                logger.error(f"Could not save refreshed prices for portfolio {portfolio_id}: {e}")

    return outcomes


class PriceRefreshScheduler:
    """
    Calls a job every `interval` seconds on an APScheduler background scheduler.

    The first run happens one interval after start(). Overlapping runs are
    skipped (max_instances=1) and missed runs are coalesced into one.
    """

    JOB_ID = "price_refresh"

    def __init__(self, interval: float, job: Callable[[], object]) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._interval = interval
        self._job = job
        self._scheduler: BackgroundScheduler | None = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def next_run_time(self) -> datetime | None:
        if not self.is_running:
            return None
        job = self._scheduler.get_job(self.JOB_ID)
        return job.next_run_time if job else None

    def start(self) -> None:
        if self.is_running:
            return
        self._scheduler = BackgroundScheduler(daemon=True)
        self._scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=self._interval),
            id=self.JOB_ID,
            name="Price Refresh",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"Price refresh scheduler started (every {self._interval}s)")

    def stop(self, wait: bool = True) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("Price refresh scheduler stopped")

    def run_once(self) -> None:
        """Run the job once, logging any exception."""
        try:
            self._job()
        except Exception:
            logger.exception("Scheduled price refresh failed")
