# backend/gemhub/routers/portfolios.py
"""
Portfolio endpoints.

- POST /portfolios - Open a new, empty portfolio
- GET /portfolios/{id} - Profile plus assets with their cached positions
- PATCH /portfolios/{id}/assets/{ticker} - Update an asset's reported metrics

Assets are never created here: the first transaction for an unseen ticker
creates its asset (see the transactions router). The PATCH only touches
reported values (sector, target, dividend provision, FII metrics), never the
ledger-derived position.
"""

import logging

from fastapi import APIRouter, Depends, status

from gemhub.dependencies import get_portfolio, get_portfolio_store
from gemhub.models import Asset, Portfolio
from gemhub.schemas.portfolios import (
    AssetMetricsUpdate,
    AssetResponse,
    PortfolioCreate,
    PortfolioResponse,
)
from gemhub.services.exceptions import AssetNotFoundError
from gemhub.services.ledger import normalize_ticker
from gemhub.services.persistence import SqlPortfolioStore

logger = logging.getLogger(__name__)


# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolios",
    tags=["Portfolios"],
)


# =============================================================================
# MAPPER FUNCTIONS
# =============================================================================

def _map_asset(asset: Asset) -> AssetResponse:
    response = AssetResponse.model_validate(asset)
    response.transaction_count = len(asset.transactions)
    return response


def _map_portfolio(portfolio: Portfolio) -> PortfolioResponse:
    return PortfolioResponse(
        id=portfolio.id,
        name=portfolio.name,
        email=portfolio.email,
        risk_profile=portfolio.risk_profile,
        preferred_currency=portfolio.preferred_currency,
        created_at=portfolio.created_at,
        assets=[_map_asset(asset) for asset in portfolio.assets],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "",
    response_model=PortfolioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new portfolio",
)
def create_portfolio(
        portfolio: PortfolioCreate,
        store: SqlPortfolioStore = Depends(get_portfolio_store),
) -> PortfolioResponse:
    """
    Open an empty portfolio.

    - **name**: Owner or portfolio name
    - **risk_profile**: conservador, moderado or arrojado
    - **preferred_currency**: Default reporting currency (BRL or USD)
    """
    created = store.create(
        name=portfolio.name,
        email=portfolio.email,
        risk_profile=portfolio.risk_profile,
        preferred_currency=portfolio.preferred_currency,
    )
    return _map_portfolio(created)


@router.get(
    "/{portfolio_id}",
    response_model=PortfolioResponse,
    summary="Get a portfolio",
    response_description="Portfolio profile with its assets",
)
def get_portfolio_detail(
        portfolio: Portfolio = Depends(get_portfolio),
) -> PortfolioResponse:
    """
    Get a portfolio with its assets in creation order.

    `average_price` and `total_quantity` are derived from each asset's
    ledger; prices are in the asset's native currency.

    Raises **404** if the portfolio does not exist.
    """
    return _map_portfolio(portfolio)


@router.patch(
    "/{portfolio_id}/assets/{ticker}",
    response_model=AssetResponse,
    summary="Update an asset's metrics",
    response_description="The updated asset",
)
def update_asset_metrics(
        ticker: str,
        metrics: AssetMetricsUpdate,
        portfolio: Portfolio = Depends(get_portfolio),
        store: SqlPortfolioStore = Depends(get_portfolio_store),
) -> AssetResponse:
    """
    Update an asset's reported metrics (partial update).

    Only the provided fields are updated. `prov_dividend` feeds the
    valuation's monthly yield and the analytics dividend bridge.

    Raises **404** if the portfolio or the ticker does not exist.
    """
    symbol = normalize_ticker(ticker)
    asset = next((a for a in portfolio.assets if a.ticker == symbol), None)
    if asset is None:
        raise AssetNotFoundError(symbol)

    update_data = metrics.model_dump(exclude_unset=True)

    # Apply updates
    for field, value in update_data.items():
        setattr(asset, field, value)

    store.save(portfolio)
    logger.info(f"Updated {symbol} metrics in portfolio {portfolio.id}: {sorted(update_data)}")

    return _map_asset(asset)
