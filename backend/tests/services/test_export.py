# backend/tests/services/test_export.py
"""
Tests for the CSV ledger export.

Covers:
- Row order across assets (date, then recording time)
- Conversion of totals to the reporting currency
- CSV header, decimal formatting and rounding
- Download filename
"""

import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from gemhub.models import Asset, AssetCategory, Portfolio, TransactionSource, TransactionType
from gemhub.services.export import TransactionExporter, export_filename
from tests.conftest import buy, make_transaction, sell


@pytest.fixture
def exporter(converter) -> TransactionExporter:
    return TransactionExporter(converter)


@pytest.fixture
def recorded_portfolio(store, ledger, sample_portfolio):
    portfolio = store.load(sample_portfolio.id)
    ledger.record(portfolio, "BTC", buy("0.1", "40000", "5", on=date(2024, 1, 15)), AssetCategory.CRYPTO)
    ledger.record(portfolio, "MXRF11", buy("100", "9.80", on=date(2024, 1, 10)), AssetCategory.FII)
    ledger.record(portfolio, "BTC", sell("0.05", "50000", on=date(2024, 3, 1)))
    ledger.record(
        portfolio,
        "MXRF11",
        buy("10", "10", on=date(2024, 1, 15), source=TransactionSource.REINVESTMENT),
    )
    return portfolio


def parse(content: str) -> list[dict[str, str]]:
    return list(csv.DictReader(io.StringIO(content)))


class TestBuildRows:

    def test_rows_sorted_by_date_then_recording_order(self, exporter, recorded_portfolio):
        rows = exporter.build_rows(recorded_portfolio, "BRL")

        assert [(r.date, r.ticker) for r in rows] == [
            (date(2024, 1, 10), "MXRF11"),
            (date(2024, 1, 15), "BTC"),
            (date(2024, 1, 15), "MXRF11"),
            (date(2024, 3, 1), "BTC"),
        ]

    def test_same_day_rows_follow_recording_time_not_asset_order(self, exporter):
        """MXRF11 was recorded before BTC on the same day, though BTC is listed first."""
        btc_buy = make_transaction(TransactionType.BUY, "0.1", "40000", on=date(2024, 2, 1))
        btc_buy.created_at = datetime(2024, 2, 1, 12, 5, tzinfo=timezone.utc)
        mxrf_buy = make_transaction(TransactionType.BUY, "100", "10", on=date(2024, 2, 1))
        mxrf_buy.created_at = datetime(2024, 2, 1, 12, 0)  # naive, as read back from SQLite

        portfolio = Portfolio(name="Ordering")
        portfolio.assets = [
            Asset(ticker="BTC", category=AssetCategory.CRYPTO, transactions=[btc_buy]),
            Asset(ticker="MXRF11", category=AssetCategory.FII, transactions=[mxrf_buy]),
        ]

        rows = exporter.build_rows(portfolio, "BRL")

        assert [r.ticker for r in rows] == ["MXRF11", "BTC"]

    def test_totals_converted_to_reporting_currency(self, exporter, recorded_portfolio):
        rows = exporter.build_rows(recorded_portfolio, "BRL")
        btc_buy = rows[1]

        assert btc_buy.currency == "USD"
        # (0.1 × 40000 + 5) × 5.45
        assert btc_buy.total == Decimal("21827.25")

    def test_sell_total_is_sale_value(self, exporter, recorded_portfolio):
        rows = exporter.build_rows(recorded_portfolio, "USD")
        btc_sell = rows[-1]

        assert btc_sell.transaction_type == TransactionType.SELL
        assert btc_sell.total == Decimal("2500")

    def test_empty_portfolio(self, exporter, store, sample_portfolio):
        assert exporter.build_rows(store.load(sample_portfolio.id), "BRL") == []


class TestToCsv:

    def test_header_and_formatting(self, exporter, recorded_portfolio):
        content = exporter.to_csv(exporter.build_rows(recorded_portfolio, "BRL"), "BRL")

        lines = content.splitlines()
        assert lines[0] == "date,ticker,type,source,quantity,unit_price,currency,total_BRL"
        assert lines[2] == "2024-01-15,BTC,buy,new_money,0.1,40000,USD,21827.25"

    def test_reinvestment_source_is_exported(self, exporter, recorded_portfolio):
        records = parse(exporter.to_csv(exporter.build_rows(recorded_portfolio, "BRL"), "BRL"))

        assert records[2]["source"] == "reinvestment"
        assert records[2]["total_BRL"] == "100.00"

    def test_total_rounded_half_up_to_cents(self, exporter, recorded_portfolio):
        """FII totals in USD have long expansions; CSV keeps two places."""
        records = parse(exporter.to_csv(exporter.build_rows(recorded_portfolio, "USD"), "USD"))

        # 100 × 9.80 / 5.45 = 179.816...
        assert records[0]["total_USD"] == "179.82"

    def test_empty_export_has_header_only(self, exporter):
        assert exporter.to_csv([], "usd") == (
            "date,ticker,type,source,quantity,unit_price,currency,total_USD\n"
        )


def test_export_filename():
    assert export_filename(date(2024, 3, 5)) == "gem_portfolio_analytics_2024-03-05.csv"
