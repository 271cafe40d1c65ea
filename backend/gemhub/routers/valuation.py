# backend/gemhub/routers/valuation.py
"""
Portfolio valuation endpoints.

- GET /portfolios/{id}/valuation - Market value per asset and per group
- GET /portfolios/{id}/rebalance - Split of a new contribution between crypto and FIIs

Valuations are computed from the stored snapshot (cached positions and last
known prices); nothing here calls a price feed.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import AfterValidator

from gemhub.dependencies import get_portfolio, get_valuation_service
from gemhub.models import Portfolio
from gemhub.schemas.validators import validate_currency_query
from gemhub.schemas.valuation import (
    AssetValuationResponse,
    GroupTotalResponse,
    PortfolioValuationResponse,
    RebalanceResponse,
)
from gemhub.services.valuation import ValuationService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolios",
    tags=["Valuation"],
)

DEFAULT_TARGET_CRYPTO_PCT = Decimal("30")


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_valuation(portfolio_id: int, valuation) -> PortfolioValuationResponse:
    """Map internal PortfolioValuation to Pydantic schema."""
    return PortfolioValuationResponse(
        portfolio_id=portfolio_id,
        reporting_currency=valuation.reporting_currency,
        group_by=valuation.group_by.value,
        total_value=valuation.total_value,
        total_cost_basis=valuation.total_cost_basis,
        total_unrealized_pnl=valuation.total_unrealized_pnl,
        monthly_yield=valuation.monthly_yield,
        native_totals={category.value: total for category, total in valuation.native_totals.items()},
        groups=[GroupTotalResponse.model_validate(group) for group in valuation.groups],
        assets=[AssetValuationResponse.model_validate(asset) for asset in valuation.assets],
        warnings=valuation.warnings,
    )


def _map_rebalance(
        portfolio_id: int,
        reporting_currency: str,
        target_crypto_pct: Decimal,
        suggestion,
) -> RebalanceResponse:
    """Map internal RebalanceSuggestion (A = crypto, B = FII) to Pydantic schema."""
    return RebalanceResponse(
        portfolio_id=portfolio_id,
        reporting_currency=reporting_currency,
        target_crypto_pct=target_crypto_pct,
        contribution=suggestion.contribution,
        current_crypto=suggestion.current_a,
        current_fii=suggestion.current_b,
        new_total=suggestion.new_total,
        target_crypto=suggestion.target_a,
        target_fii=suggestion.target_b,
        crypto_allocation=suggestion.allocation_a,
        fii_allocation=suggestion.allocation_b,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/{portfolio_id}/valuation",
    response_model=PortfolioValuationResponse,
    summary="Get portfolio valuation",
    response_description="Per-asset valuations and group totals",
)
def get_portfolio_valuation(
        portfolio: Portfolio = Depends(get_portfolio),
        group_by: str = Query(
            default="category",
            description="Group totals by 'category' or 'sector'",
        ),
        currency: Annotated[
            str | None,
            Query(description="Reporting currency (default: the portfolio's preferred currency)"),
            AfterValidator(validate_currency_query),
        ] = None,
        service: ValuationService = Depends(get_valuation_service),
) -> PortfolioValuationResponse:
    """
    Value the portfolio in one reporting currency.

    Returns:
    - **assets**: Market value, cost basis, unrealized P&L and weight per asset
    - **groups**: Totals per category or sector with their weights
    - **native_totals**: Category totals in each category's own currency
    - **monthly_yield**: Provisioned monthly FII dividends

    Assets without a current price are valued at 0 and reported in `warnings`.

    Raises **400** for an unknown `group_by`.
    Raises **404** if the portfolio does not exist.
    """
    # Domain exceptions propagate to global handlers
    valuation = service.get_valuation(portfolio, currency, group_by)
    return _map_valuation(portfolio.id, valuation)


@router.get(
    "/{portfolio_id}/rebalance",
    response_model=RebalanceResponse,
    summary="Suggest a contribution split",
    response_description="How much of the contribution goes to crypto and to FIIs",
)
def get_rebalance(
        portfolio: Portfolio = Depends(get_portfolio),
        target_crypto_pct: Decimal = Query(
            default=DEFAULT_TARGET_CRYPTO_PCT,
            ge=0,
            le=100,
            description="Target crypto share in percent",
        ),
        contribution: Decimal = Query(
            ...,
            ge=0,
            description="New money to allocate, in the reporting currency",
        ),
        currency: Annotated[
            str | None,
            Query(description="Reporting currency"),
            AfterValidator(validate_currency_query),
        ] = None,
        service: ValuationService = Depends(get_valuation_service),
) -> RebalanceResponse:
    """
    Split a new contribution so the portfolio moves toward the target mix.

    The contribution is never sold against: when one side is already above
    its target, everything goes to the other side. The two allocations
    always add up to the contribution, unless both sides are above target
    (then both are 0).

    Raises **404** if the portfolio does not exist.
    """
    suggestion = service.get_rebalance(
        portfolio,
        target_crypto_pct / Decimal("100"),
        contribution,
        reporting_currency=currency,
    )
    reporting_currency = service.resolve_currency(portfolio, currency)
    return _map_rebalance(portfolio.id, reporting_currency, target_crypto_pct, suggestion)
