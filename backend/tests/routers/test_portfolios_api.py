# backend/tests/routers/test_portfolios_api.py
"""
Integration tests for Portfolio API endpoints.

These tests verify full HTTP request/response cycles for:
- POST /portfolios (Create)
- GET /portfolios/{id} (Read with assets)
- PATCH /portfolios/{id}/assets/{ticker} (Reported metrics)
- GET / and GET /health

Tests validate:
- Correct status codes
- Response structure matches schemas
- Error responses (404, 422)
"""

from datetime import date
from decimal import Decimal

import pytest

from gemhub.models import AssetCategory
from tests.conftest import buy, create_portfolio


class TestCreatePortfolio:
    """Tests for POST /portfolios."""

    def test_create_with_defaults(self, client):
        response = client.post("/portfolios", json={"name": "  Carteira Principal "})

        assert response.status_code == 201
        data = response.json()
        assert data["id"] > 0
        assert data["name"] == "Carteira Principal"
        assert data["risk_profile"] == "moderado"
        assert data["preferred_currency"] == "BRL"
        assert data["assets"] == []

    def test_create_with_profile_and_currency(self, client):
        response = client.post("/portfolios", json={
            "name": "Growth",
            "email": "investor@example.com",
            "risk_profile": "arrojado",
            "preferred_currency": "usd",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "investor@example.com"
        assert data["risk_profile"] == "arrojado"
        assert data["preferred_currency"] == "USD"

    def test_blank_name_rejected(self, client):
        response = client.post("/portfolios", json={"name": "   "})

        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"

    def test_unsupported_currency_rejected(self, client):
        response = client.post("/portfolios", json={"name": "Euro", "preferred_currency": "EUR"})

        assert response.status_code == 422
        fields = [d["field"] for d in response.json()["details"]]
        assert "body.preferred_currency" in fields

    def test_unknown_risk_profile_rejected(self, client):
        response = client.post("/portfolios", json={"name": "X", "risk_profile": "yolo"})

        assert response.status_code == 422


class TestGetPortfolio:
    """Tests for GET /portfolios/{id}."""

    def test_returns_assets_in_creation_order(self, client, db, store, ledger):
        portfolio = create_portfolio(db)
        loaded = store.load(portfolio.id)
        ledger.record(loaded, "MXRF11", buy("100", "10"), AssetCategory.FII)
        ledger.record(loaded, "BTC", buy("0.1", "40000", on=date(2024, 1, 10)), AssetCategory.CRYPTO)
        ledger.record(loaded, "BTC", buy("0.1", "50000", on=date(2024, 2, 10)))

        response = client.get(f"/portfolios/{portfolio.id}")

        assert response.status_code == 200
        assets = response.json()["assets"]
        assert [a["ticker"] for a in assets] == ["MXRF11", "BTC"]

        btc = assets[1]
        assert btc["category"] == "crypto"
        assert btc["transaction_count"] == 2
        assert Decimal(btc["total_quantity"]) == Decimal("0.2")
        assert Decimal(btc["average_price"]) == Decimal("45000")

    def test_empty_portfolio(self, client, sample_portfolio):
        response = client.get(f"/portfolios/{sample_portfolio.id}")

        assert response.status_code == 200
        assert response.json()["assets"] == []

    def test_not_found(self, client):
        response = client.get("/portfolios/9999")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "PortfolioNotFoundError"
        assert data["details"]["resource_type"] == "Portfolio"
        assert data["details"]["resource_id"] == "9999"


class TestUpdateAssetMetrics:
    """Tests for PATCH /portfolios/{id}/assets/{ticker}."""

    @pytest.fixture
    def fii_portfolio(self, db, store, ledger):
        portfolio = store.load(create_portfolio(db).id)
        ledger.record(portfolio, "MXRF11", buy("1000", "10"), AssetCategory.FII)
        return portfolio

    def test_updates_reported_metrics(self, client, fii_portfolio):
        response = client.patch(
            f"/portfolios/{fii_portfolio.id}/assets/MXRF11",
            json={
                "prov_dividend": "100",
                "dividend_yield": "12.5",
                "price_to_book": "0.98",
                "vacancy": "0",
                "sector": "Papel",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ticker"] == "MXRF11"
        assert data["sector"] == "Papel"
        assert Decimal(data["prov_dividend"]) == Decimal("100")
        assert Decimal(data["dividend_yield"]) == Decimal("12.5")
        assert Decimal(data["price_to_book"]) == Decimal("0.98")
        assert Decimal(data["vacancy"]) == Decimal("0")

    def test_dividend_provision_feeds_valuation_and_analytics(self, client, fii_portfolio):
        client.patch(f"/portfolios/{fii_portfolio.id}/assets/mxrf11", json={"prov_dividend": "100"})

        valuation = client.get(f"/portfolios/{fii_portfolio.id}/valuation").json()
        analytics = client.get(f"/portfolios/{fii_portfolio.id}/analytics").json()

        assert Decimal(valuation["monthly_yield"]) == Decimal("100")
        assert Decimal(analytics["capital"]["annual_income"]) == Decimal("1200")
        assert Decimal(analytics["dividend_bridge"]["monthly_dividends"]) == Decimal("100")
        assert Decimal(analytics["dividend_bridge"]["satoshis"]) > 0

    def test_partial_update_keeps_other_fields(self, client, fii_portfolio):
        url = f"/portfolios/{fii_portfolio.id}/assets/MXRF11"
        client.patch(url, json={"dividend_yield": "12", "vacancy": "3"})

        data = client.patch(url, json={"vacancy": None}).json()

        assert Decimal(data["dividend_yield"]) == Decimal("12")
        assert data["vacancy"] is None

    def test_position_fields_are_not_writable(self, client, fii_portfolio):
        response = client.patch(
            f"/portfolios/{fii_portfolio.id}/assets/MXRF11",
            json={"total_quantity": "5", "average_price": "1"},
        )

        assert response.status_code == 200
        assert Decimal(response.json()["total_quantity"]) == Decimal("1000")
        assert Decimal(response.json()["average_price"]) == Decimal("10")

    @pytest.mark.parametrize("body,field", [
        ({"vacancy": "-1"}, "body.vacancy"),
        ({"vacancy": "101"}, "body.vacancy"),
        ({"prov_dividend": "-5"}, "body.prov_dividend"),
        ({"sector": None}, "body.sector"),
    ])
    def test_invalid_values_rejected(self, client, fii_portfolio, body, field):
        response = client.patch(f"/portfolios/{fii_portfolio.id}/assets/MXRF11", json=body)

        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == field

    def test_unknown_ticker(self, client, fii_portfolio):
        response = client.patch(f"/portfolios/{fii_portfolio.id}/assets/HGLG11", json={"vacancy": "1"})

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "AssetNotFoundError"
        assert data["details"]["resource_id"] == "HGLG11"

    def test_portfolio_not_found(self, client):
        assert client.patch("/portfolios/9999/assets/MXRF11", json={}).status_code == 404


class TestGlobalEndpoints:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert data["checks"]["database"]["database"] == "sqlite"
