# backend/gemhub/routers/transactions.py
"""
Ledger endpoints.

- GET /portfolios/{id}/transactions - Ledger across all assets, newest first
- POST /portfolios/{id}/transactions - Record a buy, sell or dividend
- DELETE /portfolios/{id}/assets/{ticker}/transactions/{tx_id} - Remove one entry

Every write recomputes the asset's cached position and saves the portfolio.
Transactions are immutable: correct a mistake by deleting and re-recording.
"""

from fastapi import APIRouter, Depends, status

from gemhub.dependencies import get_ledger_service, get_portfolio
from gemhub.models import Asset, Portfolio, Transaction
from gemhub.schemas.transactions import (
    TransactionCreate,
    TransactionListResponse,
    TransactionResponse,
)
from gemhub.services.ledger import LedgerService, NewTransaction

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolios",
    tags=["Transactions"],
)


# =============================================================================
# MAPPER FUNCTIONS
# =============================================================================

def _map_transaction(asset: Asset, txn: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=txn.id,
        ticker=asset.ticker,
        category=asset.category,
        transaction_type=txn.transaction_type,
        source=txn.source,
        date=txn.date,
        quantity=txn.quantity,
        price=txn.price,
        fees=txn.fees,
        created_at=txn.created_at,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/{portfolio_id}/transactions",
    response_model=TransactionListResponse,
    summary="List the portfolio ledger",
)
def list_transactions(
        portfolio: Portfolio = Depends(get_portfolio),
) -> TransactionListResponse:
    """
    List every transaction of every asset, newest first.

    Same-day entries of one asset keep their recording order (latest first).

    Raises **404** if the portfolio does not exist.
    """
    entries = [(asset, txn) for asset in portfolio.assets for txn in asset.transactions]
    entries.sort(key=lambda entry: (entry[1].date, entry[1].seq), reverse=True)

    items = [_map_transaction(asset, txn) for asset, txn in entries]
    return TransactionListResponse(items=items, total=len(items))


@router.post(
    "/{portfolio_id}/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a transaction",
)
def create_transaction(
        body: TransactionCreate,
        portfolio: Portfolio = Depends(get_portfolio),
        ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """
    Record a transaction for an asset, creating the asset on first use.

    - **ticker**: Asset ticker, e.g. BTC or MXRF11
    - **transaction_type**: buy, sell or dividend
    - **quantity** / **price**: Positive amounts; price in the asset's native currency
    - **fees**: Optional, 0 or positive
    - **category**: Optional for new tickers; inferred from the ticker when omitted

    Selling more than is held is accepted and clamps the position to zero.

    Raises **400** if the category contradicts the existing asset.
    Raises **404** if the portfolio does not exist.
    """
    txn = ledger.record(
        portfolio,
        body.ticker,
        NewTransaction(
            transaction_type=body.transaction_type,
            quantity=body.quantity,
            price=body.price,
            date=body.date,
            fees=body.fees,
            source=body.source,
        ),
        category=body.category,
    )
    return _map_transaction(txn.asset, txn)


@router.delete(
    "/{portfolio_id}/assets/{ticker}/transactions/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a transaction",
)
def delete_transaction(
        ticker: str,
        transaction_id: str,
        portfolio: Portfolio = Depends(get_portfolio),
        ledger: LedgerService = Depends(get_ledger_service),
) -> None:
    """
    Remove one transaction and recompute the asset's position.

    The asset stays in the portfolio even when its ledger becomes empty.

    Raises **404** if the portfolio, asset or transaction does not exist.
    """
    ledger.remove(portfolio, ticker, transaction_id)
    return None
