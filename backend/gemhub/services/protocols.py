# backend/gemhub/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing classes satisfy protocols without modification
- Test mocks work without explicit inheritance
- Clear documentation of required interfaces
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from gemhub.models import Portfolio


# Called with the saved portfolio after a successful commit
ChangeCallback = Callable[["Portfolio"], None]
Unsubscribe = Callable[[], None]


class CurrencyConverterProtocol(Protocol):
    """Interface required by the valuation calculators, export and analytics."""

    def get_rate(self, base_currency: str, quote_currency: str) -> Decimal:
        ...

    def convert(self, amount: Decimal, base_currency: str, quote_currency: str) -> Decimal:
        ...


class PortfolioStore(Protocol):
    """
    Persistence collaborator used by the ledger.

    The same interface serves a server database or local storage. Conflict
    resolution is last-writer-wins.
    """

    def load(self, portfolio_id: int) -> Portfolio:
        ...

    def save(self, portfolio: Portfolio) -> None:
        ...

    def subscribe(self, portfolio_id: int, callback: ChangeCallback) -> Unsubscribe:
        ...
