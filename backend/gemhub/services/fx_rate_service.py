# backend/gemhub/services/fx_rate_service.py
"""
Currency conversion between the categories' native currencies.

Crypto assets are quoted in USD and FIIs in BRL, so the only non-trivial
pair is USD/BRL. The rate is configured (settings.usd_to_brl) rather than
fetched.

=============================================================================
FX RATE CONVENTION
=============================================================================

    rate = "1 base_currency = X quote_currency"

Example:
    base_currency = "USD"
    quote_currency = "BRL"
    rate = 5.45

    Meaning: 1 USD = 5.45 BRL

Conversion formula:
    To convert USD → BRL:  BRL_amount = USD_amount × rate
    To convert BRL → USD:  USD_amount = BRL_amount ÷ rate

Usage:
    from gemhub.services.fx_rate_service import CurrencyConverter

    converter = CurrencyConverter(usd_to_brl=Decimal("5.45"))
    converter.get_rate("USD", "BRL")          # Decimal("5.45")
    converter.convert(Decimal("100"), "USD", "BRL")  # Decimal("545.00")
"""

import logging
from decimal import Decimal

from gemhub.services.exceptions import FXConversionError, FXRateNotFoundError

logger = logging.getLogger(__name__)


class CurrencyConverter:
    """
    Converts amounts between USD and BRL using a fixed USD/BRL rate.

    Identity conversions (same currency) always return a rate of 1.
    """

    def __init__(self, usd_to_brl: Decimal) -> None:
        """
        Initialize with the USD/BRL rate.

        Args:
            usd_to_brl: BRL received for 1 USD (must be positive)

        Raises:
            FXConversionError: If the rate is zero or negative
        """
        if usd_to_brl <= Decimal("0"):
            raise FXConversionError(
                f"USD/BRL rate must be positive, got {usd_to_brl}",
                base_currency="USD",
                quote_currency="BRL",
            )
        self._usd_to_brl = usd_to_brl

    @property
    def usd_to_brl(self) -> Decimal:
        return self._usd_to_brl

    def get_rate(self, base_currency: str, quote_currency: str) -> Decimal:
        """
        Get the exchange rate: 1 base = rate × quote.

        Raises:
            FXRateNotFoundError: If the pair is not USD/BRL in either direction
        """
        base = base_currency.upper().strip()
        quote = quote_currency.upper().strip()

        if base == quote:
            return Decimal("1")

        if (base, quote) == ("USD", "BRL"):
            return self._usd_to_brl

        if (base, quote) == ("BRL", "USD"):
            return Decimal("1") / self._usd_to_brl

        raise FXRateNotFoundError(base, quote)

    def convert(self, amount: Decimal, base_currency: str, quote_currency: str) -> Decimal:
        """Convert an amount from base currency to quote currency."""
        return amount * self.get_rate(base_currency, quote_currency)
