# backend/gemhub/services/market_data/simulated.py
"""
Simulated price feed.

Each refresh moves every price by a small random step:

    change       = (U(0,1) - 0.5) × volatility(category)
    price        = current_price × (1 + change)
    daily_change = daily_change + change × 100

Volatility comes from the category profile (crypto 0.005, FII 0.001).
"""

import logging
import random
from collections.abc import Sequence
from decimal import Decimal

from gemhub.models import Asset
from gemhub.services.constants import CATEGORY_PROFILES
from gemhub.services.market_data.base import (
    PriceFeedProvider,
    PriceFetchResult,
    PriceMode,
    PriceQuote,
)

logger = logging.getLogger(__name__)

_HALF = Decimal("0.5")
_HUNDRED = Decimal("100")


class SimulatedPriceProvider(PriceFeedProvider):
    """
    Random-walk price provider.

    Example:
        provider = SimulatedPriceProvider(rng=random.Random(42))
        result = provider.fetch_prices(portfolio.assets)
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return "simulated"

    def draw(self) -> Decimal:
        """One uniform sample in [0, 1) as a Decimal."""
        return Decimal(str(self._rng.random()))

    def quote(self, asset: Asset) -> PriceQuote:
        """Simulate the next price of a single asset."""
        volatility = CATEGORY_PROFILES[asset.category].volatility
        change = (self.draw() - _HALF) * volatility
        return step_quote(asset, change, self.name)

    def fetch_prices(
            self,
            assets: Sequence[Asset],
            mode: PriceMode = PriceMode.SIMULATED,
    ) -> PriceFetchResult:
        result = PriceFetchResult()
        for asset in assets:
            result.prices[asset.ticker] = self.quote(asset)

        logger.debug(f"Simulated {result.quote_count} prices")
        return result


def step_quote(asset: Asset, change: Decimal, source: str) -> PriceQuote:
    """Apply a relative change to an asset's current price and daily change."""
    current_price = asset.current_price or Decimal("0")
    daily_change = asset.daily_change or Decimal("0")
    return PriceQuote(
        ticker=asset.ticker,
        price=current_price * (1 + change),
        daily_change=daily_change + change * _HUNDRED,
        source=source,
    )
