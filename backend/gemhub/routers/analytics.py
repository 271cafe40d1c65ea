# backend/gemhub/routers/analytics.py
"""
Portfolio analytics and export endpoints.

- GET /portfolios/{id}/analytics - Capital metrics, monthly contributions, dividend bridge
- GET /portfolios/{id}/export.csv - Ledger as a CSV download
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import AfterValidator

from gemhub.dependencies import get_analytics_service, get_exporter, get_portfolio
from gemhub.models import Portfolio
from gemhub.schemas.analytics import AnalyticsResponse
from gemhub.schemas.validators import validate_currency_query
from gemhub.services.analytics import AnalyticsService
from gemhub.services.constants import DEFAULT_CONTRIBUTION_MONTHS
from gemhub.services.export import TransactionExporter, export_filename

router = APIRouter(
    prefix="/portfolios",
    tags=["Analytics"],
)


@router.get(
    "/{portfolio_id}/analytics",
    response_model=AnalyticsResponse,
    summary="Get portfolio analytics",
)
def get_portfolio_analytics(
        portfolio: Portfolio = Depends(get_portfolio),
        currency: Annotated[
            str | None,
            Query(description="Reporting currency (default: the portfolio's preferred currency)"),
            AfterValidator(validate_currency_query),
        ] = None,
        months: int = Query(
            default=DEFAULT_CONTRIBUTION_MONTHS,
            ge=1,
            le=120,
            description="Number of most recent months of contributions",
        ),
        service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsResponse:
    """
    Contribution and income analytics.

    - **capital**: Invested capital, profit and yield on cost
    - **monthly_contributions**: New money per category and reinvested dividends
    - **dividend_bridge**: Monthly FII income expressed in satoshis and ETH

    Raises **404** if the portfolio does not exist.
    """
    result = service.get_analytics(portfolio, currency or portfolio.preferred_currency, months)
    return AnalyticsResponse.model_validate(result)


@router.get(
    "/{portfolio_id}/export.csv",
    summary="Export the ledger as CSV",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
def export_portfolio_csv(
        portfolio: Portfolio = Depends(get_portfolio),
        currency: Annotated[
            str | None,
            Query(description="Currency of the total column"),
            AfterValidator(validate_currency_query),
        ] = None,
        exporter: TransactionExporter = Depends(get_exporter),
) -> Response:
    """
    Download every transaction as one CSV row, oldest first.

    Columns: date, ticker, type, source, quantity, unit_price, currency,
    total in the reporting currency (rounded to cents).

    Raises **404** if the portfolio does not exist.
    """
    reporting_currency = (currency or portfolio.preferred_currency).upper()
    rows = exporter.build_rows(portfolio, reporting_currency)
    content = exporter.to_csv(rows, reporting_currency)

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(date.today())}"'},
    )
