# backend/tests/routers/test_transactions_api.py
"""
Integration tests for ledger API endpoints.

Covers:
- POST /portfolios/{id}/transactions (record, asset creation, category rules)
- GET /portfolios/{id}/transactions (newest first)
- DELETE /portfolios/{id}/assets/{ticker}/transactions/{tx_id}
- Request validation (422) and service errors (400, 404)
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest


def txn_payload(**overrides) -> dict:
    payload = {
        "ticker": "btc",
        "transaction_type": "buy",
        "quantity": "0.1",
        "price": "40000",
        "fees": "5",
        "date": "2024-01-15",
    }
    payload.update(overrides)
    return payload


def post_txn(client, portfolio_id: int, **overrides):
    return client.post(f"/portfolios/{portfolio_id}/transactions", json=txn_payload(**overrides))


# =============================================================================
# RECORD
# =============================================================================

class TestRecordTransaction:

    def test_first_transaction_creates_asset(self, client, sample_portfolio):
        response = post_txn(client, sample_portfolio.id)

        assert response.status_code == 201
        data = response.json()
        assert len(data["id"]) == 32
        assert data["ticker"] == "BTC"
        assert data["category"] == "crypto"
        assert data["source"] == "new_money"
        assert Decimal(data["fees"]) == Decimal("5")

        assets = client.get(f"/portfolios/{sample_portfolio.id}").json()["assets"]
        assert assets[0]["ticker"] == "BTC"
        assert Decimal(assets[0]["total_quantity"]) == Decimal("0.1")
        # (0.1 × 40000 + 5) / 0.1
        assert Decimal(assets[0]["average_price"]) == Decimal("40050")

    def test_category_inferred_from_fii_ticker(self, client, sample_portfolio):
        response = post_txn(client, sample_portfolio.id, ticker="mxrf11", quantity="100", price="10")

        assert response.json()["category"] == "fii"

    def test_explicit_category_wins_for_new_ticker(self, client, sample_portfolio):
        response = post_txn(client, sample_portfolio.id, ticker="XPTO11", category="crypto")

        assert response.json()["category"] == "crypto"

    def test_category_mismatch_rejected(self, client, sample_portfolio):
        post_txn(client, sample_portfolio.id)

        response = post_txn(client, sample_portfolio.id, category="fii")

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "CategoryMismatchError"
        assert data["details"] == {"ticker": "BTC", "existing": "crypto", "requested": "fii"}

    def test_oversell_clamps_position(self, client, sample_portfolio):
        post_txn(client, sample_portfolio.id)

        response = post_txn(
            client, sample_portfolio.id, transaction_type="sell", quantity="1", fees="0",
            date="2024-02-01",
        )

        assert response.status_code == 201
        asset = client.get(f"/portfolios/{sample_portfolio.id}").json()["assets"][0]
        assert Decimal(asset["total_quantity"]) == Decimal("0")

    def test_reinvestment_source(self, client, sample_portfolio):
        response = post_txn(
            client, sample_portfolio.id, ticker="MXRF11", quantity="3", price="10",
            source="reinvestment",
        )

        assert response.json()["source"] == "reinvestment"

    def test_portfolio_not_found(self, client):
        response = post_txn(client, 9999)

        assert response.status_code == 404


class TestRecordTransactionValidation:

    @pytest.mark.parametrize("field,value", [
        ("quantity", "0"),
        ("quantity", "-1"),
        ("price", "0"),
        ("fees", "-0.01"),
        ("ticker", "BT-C"),
        ("ticker", "  "),
        ("transaction_type", "swap"),
        ("source", "salary"),
    ])
    def test_invalid_field(self, client, sample_portfolio, field, value):
        response = post_txn(client, sample_portfolio.id, **{field: value})

        assert response.status_code == 422
        fields = [d["field"] for d in response.json()["details"]]
        assert f"body.{field}" in fields

    def test_future_date_rejected(self, client, sample_portfolio):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()

        response = post_txn(client, sample_portfolio.id, date=tomorrow)

        assert response.status_code == 422

    def test_nothing_recorded_on_validation_error(self, client, sample_portfolio):
        post_txn(client, sample_portfolio.id, quantity="0")

        assert client.get(f"/portfolios/{sample_portfolio.id}").json()["assets"] == []


# =============================================================================
# LIST
# =============================================================================

class TestListTransactions:

    def test_newest_first_across_assets(self, client, sample_portfolio):
        post_txn(client, sample_portfolio.id, date="2024-01-15")
        post_txn(client, sample_portfolio.id, ticker="MXRF11", quantity="100", price="10", date="2024-03-01")
        post_txn(client, sample_portfolio.id, date="2024-02-01")

        response = client.get(f"/portfolios/{sample_portfolio.id}/transactions")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert [(t["ticker"], t["date"]) for t in data["items"]] == [
            ("MXRF11", "2024-03-01"),
            ("BTC", "2024-02-01"),
            ("BTC", "2024-01-15"),
        ]

    def test_same_day_latest_recorded_first(self, client, sample_portfolio):
        first = post_txn(client, sample_portfolio.id).json()
        second = post_txn(client, sample_portfolio.id, quantity="0.2").json()

        items = client.get(f"/portfolios/{sample_portfolio.id}/transactions").json()["items"]

        assert [t["id"] for t in items] == [second["id"], first["id"]]

    def test_empty_ledger(self, client, sample_portfolio):
        response = client.get(f"/portfolios/{sample_portfolio.id}/transactions")

        assert response.json() == {"items": [], "total": 0}


# =============================================================================
# DELETE
# =============================================================================

class TestDeleteTransaction:

    def test_delete_recomputes_position(self, client, sample_portfolio):
        first = post_txn(client, sample_portfolio.id, fees="0").json()
        post_txn(client, sample_portfolio.id, quantity="0.1", price="50000", fees="0")

        response = client.delete(
            f"/portfolios/{sample_portfolio.id}/assets/btc/transactions/{first['id']}"
        )

        assert response.status_code == 204
        asset = client.get(f"/portfolios/{sample_portfolio.id}").json()["assets"][0]
        assert asset["transaction_count"] == 1
        assert Decimal(asset["average_price"]) == Decimal("50000")

    def test_asset_kept_when_ledger_empties(self, client, sample_portfolio):
        txn = post_txn(client, sample_portfolio.id).json()

        client.delete(f"/portfolios/{sample_portfolio.id}/assets/BTC/transactions/{txn['id']}")

        asset = client.get(f"/portfolios/{sample_portfolio.id}").json()["assets"][0]
        assert asset["transaction_count"] == 0
        assert Decimal(asset["total_quantity"]) == Decimal("0")
        assert Decimal(asset["average_price"]) == Decimal("0")

    def test_unknown_transaction(self, client, sample_portfolio):
        post_txn(client, sample_portfolio.id)

        response = client.delete(f"/portfolios/{sample_portfolio.id}/assets/BTC/transactions/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "TransactionNotFoundError"

    def test_unknown_asset(self, client, sample_portfolio):
        response = client.delete(f"/portfolios/{sample_portfolio.id}/assets/ETH/transactions/abc")

        assert response.status_code == 404
        assert response.json()["error"] == "AssetNotFoundError"
