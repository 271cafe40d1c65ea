# backend/gemhub/services/market_data/binance.py
"""
Binance realtime price provider.

Crypto prices come from the public Binance REST API:

    GET {base_url}/api/v3/ticker/24hr?symbol={TICKER}USDT

    {"symbol": "BTCUSDT", "lastPrice": "64210.01", "priceChangePercent": "2.41", ...}

Categories without a public feed (FIIs) get a small upward-biased drift:

    drift = (U(0,1) - 0.48) × 0.004

Any per-asset failure falls back to the simulated quote for that asset and
flags the result as a partial failure. In simulated mode the provider
delegates to the simulator entirely.

Uses httpx with a synchronous client: refreshes run in request handlers and
in the background refresh thread, neither of which has an event loop.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

import httpx

from gemhub.models import Asset
from gemhub.services.constants import (
    BINANCE_QUOTE_ASSET,
    CATEGORY_PROFILES,
    FII_DRIFT_AMPLITUDE,
    FII_DRIFT_CENTER,
)
from gemhub.services.exceptions import (
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
)
from gemhub.services.market_data.base import (
    PriceFeedProvider,
    PriceFetchResult,
    PriceMode,
    PriceQuote,
)
from gemhub.services.market_data.simulated import SimulatedPriceProvider, step_quote

logger = logging.getLogger(__name__)

TICKER_24H_PATH = "/api/v3/ticker/24hr"

# Binance error code for an unknown trading pair
_INVALID_SYMBOL_CODE = -1121


class BinancePriceProvider(PriceFeedProvider):
    """
    Realtime provider backed by Binance, with simulated fallback.

    Configuration:
        base_url: Binance REST base URL
        timeout: Request timeout in seconds (default: 10)
        simulator: Fallback provider (default: new SimulatedPriceProvider)
        client: Pre-built httpx.Client (tests inject one with MockTransport)

    Example:
        provider = BinancePriceProvider("https://api.binance.com")
        result = provider.fetch_prices(portfolio.assets, PriceMode.REALTIME)
        if result.partial_failure:
            ...
    """

    def __init__(
            self,
            base_url: str,
            timeout: float = 10.0,
            simulator: SimulatedPriceProvider | None = None,
            client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._simulator = simulator or SimulatedPriceProvider()
        self._client = client

    @property
    def name(self) -> str:
        return "binance"

    def fetch_prices(
            self,
            assets: Sequence[Asset],
            mode: PriceMode = PriceMode.REALTIME,
    ) -> PriceFetchResult:
        if mode == PriceMode.SIMULATED:
            return self._simulator.fetch_prices(assets, mode)

        result = PriceFetchResult()

        for asset in assets:
            if not CATEGORY_PROFILES[asset.category].realtime_feed:
                result.prices[asset.ticker] = self._drift_quote(asset)
                continue

            try:
                result.prices[asset.ticker] = self.get_quote(asset.ticker)
            except MarketDataError as e:
                logger.warning(f"Realtime fetch failed for {asset.ticker}, using simulated price: {e}")
                result.partial_failure = True
                result.failed[asset.ticker] = str(e)
                result.prices[asset.ticker] = self._simulator.quote(asset)

        logger.info(
            f"Fetched {result.quote_count} prices from {self.name} "
            f"({len(result.failed)} fell back to simulation)"
        )
        return result

    def get_quote(self, ticker: str) -> PriceQuote:
        """
        Fetch the 24h ticker for one crypto asset.

        Raises:
            TickerNotFoundError: Binance does not list {ticker}USDT
            ProviderUnavailableError: Network error, bad status or bad payload
        """
        symbol = f"{ticker.upper()}{BINANCE_QUOTE_ASSET}"

        try:
            response = self._get(TICKER_24H_PATH, params={"symbol": symbol})
        except httpx.RequestError as e:
            raise ProviderUnavailableError(self.name, f"Network error for {symbol}: {e}") from e

        if response.status_code == 400 and self._is_invalid_symbol(response):
            raise TickerNotFoundError(ticker, self.name)

        if response.status_code != 200:
            raise ProviderUnavailableError(
                self.name, f"HTTP {response.status_code} for {symbol}"
            )

        try:
            data = response.json()
            price = Decimal(str(data["lastPrice"]))
            change = Decimal(str(data["priceChangePercent"]))
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            raise ProviderUnavailableError(self.name, f"Malformed response for {symbol}: {e}") from e

        if price <= 0:
            raise ProviderUnavailableError(self.name, f"Non-positive price for {symbol}: {price}")

        return PriceQuote(ticker=ticker.upper(), price=price, daily_change=change, source=self.name)

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _get(self, path: str, params: dict[str, str]) -> httpx.Response:
        url = f"{self._base_url}{path}"
        if self._client is not None:
            return self._client.get(url, params=params, timeout=self._timeout)
        with httpx.Client(timeout=self._timeout) as client:
            return client.get(url, params=params)

    def _drift_quote(self, asset: Asset) -> PriceQuote:
        drift = (self._simulator.draw() - FII_DRIFT_CENTER) * FII_DRIFT_AMPLITUDE
        return step_quote(asset, drift, "drift")

    @staticmethod
    def _is_invalid_symbol(response: httpx.Response) -> bool:
        try:
            return response.json().get("code") == _INVALID_SYMBOL_CODE
        except ValueError:
            return False
