# backend/gemhub/schemas/transactions.py
"""
Pydantic schemas for ledger transactions.

Validation layers:
- Field constraints: positive quantity and price, non-negative fees
- Field validators: ticker normalization, no future dates
- Service: category consistency, ledger bookkeeping

IMPORTANT: All financial values use Decimal for precision.
Never use float for money!
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gemhub.models import AssetCategory, TransactionSource, TransactionType
from gemhub.schemas.validators import validate_ticker


class TransactionCreate(BaseModel):
    """
    Schema for recording a transaction.

    The asset is created on the first transaction for an unseen ticker.
    `category` is optional: when omitted for a new ticker it is inferred
    from the ticker (FII if it ends in "11", otherwise crypto).
    """

    ticker: str = Field(
        ...,
        examples=["BTC", "MXRF11"],
        description="Asset ticker"
    )
    transaction_type: TransactionType = Field(
        ...,
        description="buy, sell or dividend"
    )
    quantity: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Units traded (must be positive)",
        examples=["0.1", "150"]
    )
    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Unit price in the asset's native currency (must be positive)",
        examples=["40000", "10.45"]
    )
    fees: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=18,
        decimal_places=8,
        description="Fees paid (0 or positive)",
        examples=["0", "5"]
    )
    date: dt.date = Field(
        ...,
        description="Trade date",
        examples=["2024-01-15"]
    )
    source: TransactionSource = Field(
        default=TransactionSource.NEW_MONEY,
        description="Where the money came from"
    )
    category: AssetCategory | None = Field(
        default=None,
        description="Asset category (recommended for new tickers)"
    )

    @field_validator('ticker')
    @classmethod
    def validate_and_normalize_ticker(cls, v: str) -> str:
        return validate_ticker(v)

    @field_validator('date')
    @classmethod
    def validate_date_not_in_future(cls, v: dt.date) -> dt.date:
        """Prevent recording transactions that haven't happened yet."""
        today = dt.date.today()
        if v > today:
            raise ValueError(f"Transaction date cannot be in the future (sent: {v}, today: {today})")
        return v


class TransactionResponse(BaseModel):
    """One ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    ticker: str
    category: AssetCategory
    transaction_type: TransactionType
    source: TransactionSource
    date: dt.date
    quantity: Decimal
    price: Decimal
    fees: Decimal
    created_at: dt.datetime | None = None


class TransactionListResponse(BaseModel):
    """Portfolio ledger, newest first."""

    items: list[TransactionResponse]
    total: int
