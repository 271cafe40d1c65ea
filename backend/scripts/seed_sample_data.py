#!/usr/bin/env python3
# backend/scripts/seed_sample_data.py
"""
Seed a demo portfolio with three crypto assets and three FIIs.

Each holding is recorded as one buy through the ledger, so the cached
positions are derived exactly as they would be through the API. Market data
(current price, daily change, FII income metrics) is then set directly.

Running it twice is safe: the demo portfolio is looked up by email first.
"""
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# Setup path to import gemhub modules
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from sqlalchemy import select

from gemhub.database import SessionLocal, init_database
from gemhub.models import AssetCategory, Portfolio, RiskProfile, TransactionType
from gemhub.services.ledger import LedgerService, NewTransaction
from gemhub.services.persistence import ChangeNotifier, SqlPortfolioStore
from gemhub.utils import setup_logging

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@gemhub.example"
DEMO_PURCHASE_DATE = date(2024, 1, 15)

SAMPLE_ASSETS = [
    {
        "ticker": "BTC", "category": AssetCategory.CRYPTO, "sector": "Ouro Digital",
        "quantity": "0.25", "average_price": "45000", "current_price": "64200", "daily_change": "2.4",
    },
    {
        "ticker": "ETH", "category": AssetCategory.CRYPTO, "sector": "Plataforma",
        "quantity": "4.2", "average_price": "2200", "current_price": "3150", "daily_change": "-1.2",
    },
    {
        "ticker": "SOL", "category": AssetCategory.CRYPTO, "sector": "DeFi",
        "quantity": "50", "average_price": "85", "current_price": "142", "daily_change": "5.7",
    },
    {
        "ticker": "MXRF11", "category": AssetCategory.FII, "sector": "Papel",
        "quantity": "1500", "average_price": "9.80", "current_price": "10.45", "daily_change": "0.3",
        "prov_dividend": "165", "dividend_yield": "12.5", "price_to_book": "1.04", "vacancy": "0",
    },
    {
        "ticker": "HGLG11", "category": AssetCategory.FII, "sector": "Logística",
        "quantity": "85", "average_price": "158", "current_price": "164.20", "daily_change": "-0.5",
        "prov_dividend": "93.5", "dividend_yield": "9.2", "price_to_book": "1.02", "vacancy": "2.1",
    },
    {
        "ticker": "VISC11", "category": AssetCategory.FII, "sector": "Shoppings",
        "quantity": "120", "average_price": "110", "current_price": "118.50", "daily_change": "0.1",
        "prov_dividend": "120", "dividend_yield": "8.8", "price_to_book": "0.95", "vacancy": "4.5",
    },
]

_OPTIONAL_DECIMALS = ("prov_dividend", "dividend_yield", "price_to_book", "vacancy")


def seed() -> None:
    init_database()
    db = SessionLocal()
    try:
        logger.info("Starting database seeding...")

        store = SqlPortfolioStore(db, ChangeNotifier())
        ledger = LedgerService(store)

        existing_id = db.scalar(select(Portfolio.id).where(Portfolio.email == DEMO_EMAIL))
        if existing_id is not None:
            logger.info(f"Demo portfolio exists (id={existing_id}), nothing to do")
            return

        created = store.create(
            name="Carteira Demo",
            email=DEMO_EMAIL,
            risk_profile=RiskProfile.MODERADO,
            preferred_currency="BRL",
        )
        portfolio = store.load(created.id)

        for data in SAMPLE_ASSETS:
            ledger.record(
                portfolio,
                data["ticker"],
                NewTransaction(
                    transaction_type=TransactionType.BUY,
                    quantity=Decimal(data["quantity"]),
                    price=Decimal(data["average_price"]),
                    date=DEMO_PURCHASE_DATE,
                ),
                category=data["category"],
            )

        by_ticker = {asset.ticker: asset for asset in portfolio.assets}
        for data in SAMPLE_ASSETS:
            asset = by_ticker[data["ticker"]]
            asset.sector = data["sector"]
            asset.current_price = Decimal(data["current_price"])
            asset.daily_change = Decimal(data["daily_change"])
            for key in _OPTIONAL_DECIMALS:
                if key in data:
                    setattr(asset, key, Decimal(data[key]))

        store.save(portfolio)
        logger.info(f"Seeded portfolio {portfolio.id} with {len(SAMPLE_ASSETS)} assets")

    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    seed()
