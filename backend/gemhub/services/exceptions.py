# backend/gemhub/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidTransactionError
    │   ├── InvalidGroupingError
    │   └── CategoryMismatchError
    ├── NotFoundError
    │   ├── PortfolioNotFoundError
    │   ├── AssetNotFoundError
    │   └── TransactionNotFoundError
    ├── PersistenceError
    ├── MarketDataError
    │   ├── ProviderUnavailableError
    │   └── TickerNotFoundError
    └── FXRateError
        ├── FXRateNotFoundError
        └── FXConversionError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    This is for programmatic validation errors (invalid parameters, missing
    required fields, etc.). Request bodies are validated by Pydantic first.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidTransactionError(ValidationError):
    """
    Raised when a transaction is rejected before it reaches the ledger.

    Quantity and price must be positive, fees must not be negative.
    """


class InvalidGroupingError(ValidationError):
    """
    Raised when valuation totals are requested by an unknown grouping key.

    Valid keys are: category, sector
    """

    def __init__(self, group_by: str) -> None:
        self.group_by = group_by
        super().__init__(
            f"Invalid grouping: '{group_by}'. Valid options: category, sector",
            field="group_by",
        )


class CategoryMismatchError(ValidationError):
    """
    Raised when an explicit category contradicts the existing asset's category.
    """

    def __init__(self, ticker: str, existing: str, requested: str) -> None:
        self.ticker = ticker
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"Asset '{ticker}' is {existing}, cannot record it as {requested}",
            field="category",
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Portfolio", "Asset")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class PortfolioNotFoundError(NotFoundError):
    """
    Raised when a portfolio cannot be found.

    Attributes:
        portfolio_id: ID of the portfolio that was not found
    """

    def __init__(self, portfolio_id: int) -> None:
        self.portfolio_id = portfolio_id
        super().__init__(
            f"Portfolio {portfolio_id} not found",
            resource_type="Portfolio",
            resource_id=portfolio_id,
        )


class AssetNotFoundError(NotFoundError):
    """Raised when a ticker is not held in the portfolio."""

    def __init__(self, ticker: str) -> None:
        self.ticker = ticker
        super().__init__(
            f"Asset '{ticker}' not found in portfolio",
            resource_type="Asset",
            resource_id=ticker,
        )


class TransactionNotFoundError(NotFoundError):
    """Raised when a transaction id is not part of the asset's ledger."""

    def __init__(self, transaction_id: str, ticker: str) -> None:
        self.transaction_id = transaction_id
        self.ticker = ticker
        super().__init__(
            f"Transaction '{transaction_id}' not found for asset '{ticker}'",
            resource_type="Transaction",
            resource_id=transaction_id,
        )


# =============================================================================
# PERSISTENCE ERRORS
# =============================================================================


class PersistenceError(ServiceError):
    """
    Raised when the persistence collaborator fails to store a portfolio.

    The session is rolled back before raising, so the stored state is the
    last successfully saved one.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to persist portfolio: {reason}")


# =============================================================================
# MARKET DATA PROVIDER ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for price feed failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a price feed is temporarily unavailable.

    Examples:
    - Network timeout
    - Server errors (500, 502, 503)
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class TickerNotFoundError(MarketDataError):
    """
    Raised when a ticker symbol is not known to the provider.
    """

    def __init__(self, ticker: str, provider: str) -> None:
        message = f"Ticker '{ticker}' not found by {provider}"
        super().__init__(message, provider=provider)
        self.ticker = ticker


# =============================================================================
# FX RATE ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """
    Base exception for FX rate errors.

    Attributes:
        base_currency: The base currency code
        quote_currency: The quote currency code
    """

    def __init__(
            self,
            message: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        self.base_currency = base_currency
        self.quote_currency = quote_currency
        super().__init__(message)


class FXRateNotFoundError(FXRateError):
    """
    Raised when no rate is configured for the requested currency pair.
    """

    def __init__(self, base_currency: str, quote_currency: str) -> None:
        super().__init__(
            f"No FX rate available for {base_currency}/{quote_currency}",
            base_currency=base_currency,
            quote_currency=quote_currency,
        )


class FXConversionError(FXRateError):
    """
    Raised when FX rate conversion fails due to invalid parameters.

    Examples:
    - Attempting to invert a zero rate
    - Invalid rate value (negative, zero)

    Attributes:
        reason: Specific reason for conversion failure
    """

    def __init__(
            self,
            reason: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            f"FX conversion error: {reason}",
            base_currency=base_currency,
            quote_currency=quote_currency,
        )


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "InvalidTransactionError",
    "InvalidGroupingError",
    "CategoryMismatchError",
    # Not Found
    "NotFoundError",
    "PortfolioNotFoundError",
    "AssetNotFoundError",
    "TransactionNotFoundError",
    # Persistence
    "PersistenceError",
    # Market Data
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    # FX Rate
    "FXRateError",
    "FXRateNotFoundError",
    "FXConversionError",
]
