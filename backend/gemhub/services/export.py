# backend/gemhub/services/export.py
"""
Flat tabular export of the transaction ledger.

One row per transaction across all assets, ordered by date, then by when
each transaction was recorded:

    date,ticker,type,source,quantity,unit_price,currency,total_BRL
    2024-01-15,BTC,buy,new_money,0.1,40000,USD,21827.25

`total` is (quantity × price + fees) converted from the asset's native
currency to the reporting currency. It is rounded to 2 places only when
written to CSV text.

Usage:
    exporter = TransactionExporter(converter)
    rows = exporter.build_rows(portfolio, "BRL")
    content = exporter.to_csv(rows, "BRL")
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING

from gemhub.models import Portfolio, TransactionSource, TransactionType

if TYPE_CHECKING:
    from gemhub.services.protocols import CurrencyConverterProtocol

logger = logging.getLogger(__name__)

EXPORT_FILENAME_PREFIX = "gem_portfolio_analytics"

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class ExportRow:
    """One exported transaction."""

    date: date
    ticker: str
    transaction_type: TransactionType
    source: TransactionSource
    quantity: Decimal
    unit_price: Decimal
    currency: str
    total: Decimal


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def export_filename(today: date) -> str:
    """Download filename for an export made on `today`."""
    return f"{EXPORT_FILENAME_PREFIX}_{today.isoformat()}.csv"


class TransactionExporter:
    """Serializes a portfolio's ledger to rows and CSV."""

    def __init__(self, converter: CurrencyConverterProtocol) -> None:
        self._converter = converter

    def build_rows(self, portfolio: Portfolio, reporting_currency: str) -> list[ExportRow]:
        """
        Flatten every asset's ledger into export rows.

        Raises:
            FXRateNotFoundError: If the reporting currency is unsupported
        """
        currency = reporting_currency.upper()
        keyed: list[tuple[date, datetime, int, int, ExportRow]] = []

        for asset_index, asset in enumerate(portfolio.assets):
            native = asset.category.native_currency
            rate = self._converter.get_rate(native, currency)

            for txn in asset.transactions:
                total = (txn.quantity * txn.price + txn.fees) * rate
                row = ExportRow(
                    date=txn.date,
                    ticker=asset.ticker,
                    transaction_type=txn.transaction_type,
                    source=txn.source,
                    quantity=txn.quantity,
                    unit_price=txn.price,
                    currency=native,
                    total=total,
                )
                keyed.append((txn.date, _as_utc(txn.created_at), asset_index, txn.seq, row))

        keyed.sort(key=lambda item: item[:4])
        rows = [item[4] for item in keyed]

        logger.debug(f"Built {len(rows)} export rows for portfolio {portfolio.id}")
        return rows

    @staticmethod
    def to_csv(rows: list[ExportRow], reporting_currency: str) -> str:
        """Render rows as CSV text with a header line."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow([
            "date",
            "ticker",
            "type",
            "source",
            "quantity",
            "unit_price",
            "currency",
            f"total_{reporting_currency.upper()}",
        ])

        for row in rows:
            writer.writerow([
                row.date.isoformat(),
                row.ticker,
                row.transaction_type.value,
                row.source.value,
                _plain(row.quantity),
                _plain(row.unit_price),
                row.currency,
                str(row.total.quantize(_CENTS, rounding=ROUND_HALF_UP)),
            ])

        return buffer.getvalue()


def _plain(value: Decimal) -> str:
    """Decimal without trailing zeros or exponent (0.10000000 -> 0.1)."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal("1")))
    return format(normalized, "f")
