# backend/gemhub/routers/prices.py
"""
Manual price refresh.

- POST /portfolios/{id}/prices/refresh - Fetch quotes and update current prices

The background scheduler (see main.py) does the same for every portfolio on
a fixed interval when PRICE_REFRESH_ENABLED is set.
"""

from fastapi import APIRouter, Depends, Query

from gemhub.dependencies import get_portfolio, get_portfolio_store, get_price_refresh_service
from gemhub.models import Portfolio
from gemhub.schemas.prices import PriceRefreshResponse
from gemhub.services.market_data import PriceMode, PriceRefreshService
from gemhub.services.persistence import SqlPortfolioStore

router = APIRouter(
    prefix="/portfolios",
    tags=["Prices"],
)


@router.post(
    "/{portfolio_id}/prices/refresh",
    response_model=PriceRefreshResponse,
    summary="Refresh current prices",
)
def refresh_prices(
        portfolio: Portfolio = Depends(get_portfolio),
        mode: PriceMode | None = Query(
            default=None,
            description="simulated or realtime (default: PRICE_MODE setting)",
        ),
        service: PriceRefreshService = Depends(get_price_refresh_service),
        store: SqlPortfolioStore = Depends(get_portfolio_store),
) -> PriceRefreshResponse:
    """
    Update every asset's current price and daily change.

    In realtime mode crypto prices come from Binance and FIIs drift around
    their last price. Crypto assets the exchange cannot quote fall back to a
    simulated step and `partial_failure` is set.

    A failed feed is not an error: `success` is false and prices keep their
    last known values.

    Raises **404** if the portfolio does not exist.
    """
    outcome = service.refresh(portfolio.assets, mode)

    if outcome.updated:
        store.save(portfolio)

    return PriceRefreshResponse(
        portfolio_id=portfolio.id,
        mode=outcome.mode,
        success=outcome.success,
        updated=outcome.updated,
        ignored=outcome.ignored,
        partial_failure=outcome.partial_failure,
        error=outcome.error,
    )
