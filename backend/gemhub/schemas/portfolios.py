# backend/gemhub/schemas/portfolios.py
"""
Pydantic schemas for portfolios and their assets.

- PortfolioCreate: what clients send to open a portfolio
- AssetMetricsUpdate: reported FII metrics, dividend provision and target
- AssetResponse: one holding with its cached position and market data
- PortfolioResponse: profile plus assets
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gemhub.models import AssetCategory, RiskProfile
from gemhub.schemas.validators import validate_currency


class PortfolioCreate(BaseModel):
    """Schema for creating a new portfolio."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        examples=["Carteira Principal"],
        description="Owner or portfolio name"
    )
    email: str | None = Field(
        default=None,
        max_length=255,
        examples=["investor@example.com"],
    )
    risk_profile: RiskProfile = Field(
        default=RiskProfile.MODERADO,
        description="Investor risk profile"
    )
    preferred_currency: str = Field(
        default="BRL",
        examples=["BRL", "USD"],
        description="Default reporting currency"
    )

    @field_validator('name')
    @classmethod
    def normalize_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Name cannot be blank")
        return stripped

    @field_validator('preferred_currency')
    @classmethod
    def validate_and_normalize_currency(cls, v: str) -> str:
        return validate_currency(v)


class AssetMetricsUpdate(BaseModel):
    """
    Schema for updating an asset's reported metrics.

    All fields are optional - only send what you want to change. Send null
    to clear a metric (sector cannot be cleared). Quantity and average price
    are not here: they only change through the ledger.
    """

    sector: str | None = Field(default=None, min_length=1, max_length=50, examples=["Papel"])
    target_allocation: Decimal | None = Field(
        default=None, ge=0, le=100, description="Target weight in percent"
    )
    prov_dividend: Decimal | None = Field(
        default=None, ge=0, description="Provisioned monthly dividend for the whole holding, native currency"
    )
    dividend_yield: Decimal | None = Field(default=None, ge=0, description="Percent")
    price_to_book: Decimal | None = Field(default=None, ge=0, description="P/VP ratio")
    vacancy: Decimal | None = Field(default=None, ge=0, le=100, description="Percent")

    @field_validator('sector')
    @classmethod
    def sector_not_blank(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Sector cannot be blank")
        return v.strip()


class AssetResponse(BaseModel):
    """
    One holding.

    average_price and total_quantity are derived from the asset's ledger.
    Prices are in the category's native currency.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    ticker: str
    category: AssetCategory
    sector: str
    average_price: Decimal
    total_quantity: Decimal
    current_price: Decimal
    daily_change: Decimal
    target_allocation: Decimal | None = None
    prov_dividend: Decimal | None = None
    dividend_yield: Decimal | None = None
    price_to_book: Decimal | None = None
    vacancy: Decimal | None = None
    last_update: datetime | None = None
    transaction_count: int = Field(default=0, description="Number of ledger entries")


class PortfolioResponse(BaseModel):
    """Portfolio profile plus its assets, in creation order."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str | None
    risk_profile: RiskProfile
    preferred_currency: str
    created_at: datetime | None = None
    assets: list[AssetResponse] = Field(default_factory=list)
