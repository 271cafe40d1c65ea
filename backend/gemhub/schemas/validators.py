# backend/gemhub/schemas/validators.py
"""
Reusable validation functions for Pydantic schemas and query parameters.

- Ticker validation and normalization (BTC, MXRF11)
- Reporting currency validation (BRL, USD)
"""

import re

from gemhub.services.constants import SUPPORTED_CURRENCIES

# Ticker: 1-20 uppercase letters/digits
TICKER_PATTERN = re.compile(r'^[A-Z0-9]{1,20}$')
TICKER_MAX_LENGTH = 20


def validate_ticker(value: str) -> str:
    """
    Validate and normalize a ticker symbol.

    Returns:
        Normalized ticker (uppercase, trimmed)

    Raises:
        ValueError: If the ticker is empty or not alphanumeric
    """
    if not value or not value.strip():
        raise ValueError("Ticker cannot be empty")

    normalized = value.strip().upper()

    if len(normalized) > TICKER_MAX_LENGTH:
        raise ValueError(f"Ticker cannot exceed {TICKER_MAX_LENGTH} characters")

    if not TICKER_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid ticker format: '{normalized}'. Ticker must be alphanumeric"
        )

    return normalized


def validate_currency(value: str) -> str:
    """
    Validate and normalize a reporting currency.

    Raises:
        ValueError: If the currency is not supported
    """
    normalized = value.strip().upper()
    if normalized not in SUPPORTED_CURRENCIES:
        raise ValueError(
            f"Unsupported currency: '{value}'. Supported: {', '.join(sorted(SUPPORTED_CURRENCIES))}"
        )
    return normalized


def validate_currency_query(value: str | None) -> str | None:
    """Same as validate_currency, but None passes through (optional query params)."""
    if value is None:
        return None
    return validate_currency(value)

