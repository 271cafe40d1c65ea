# backend/gemhub/schemas/prices.py
"""
Pydantic schemas for price refresh.
"""

from pydantic import BaseModel, ConfigDict, Field

from gemhub.services.market_data import PriceMode


class PriceRefreshResponse(BaseModel):
    """
    Outcome of a manual price refresh.

    `success` is False when the feed failed entirely; prices then keep
    their last known values.
    """

    model_config = ConfigDict(from_attributes=True)

    portfolio_id: int
    mode: PriceMode
    success: bool
    updated: list[str] = Field(default_factory=list, description="Tickers whose price changed")
    ignored: list[str] = Field(default_factory=list, description="Quoted tickers not in the portfolio")
    partial_failure: bool = Field(
        default=False,
        description="True if some assets fell back to simulated prices"
    )
    error: str | None = None
