"""Collaborator contracts consumed by the posting engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from nexus_ledger.domain.accounts import AccountChartEntry


@dataclass(frozen=True, slots=True)
class TaxCategory:
    code: str
    label: str
    label_localized: str
    deductible: bool
    description: str = ""


class AccountChartProvider(Protocol):
    """Read-only access to the chart of accounts."""

    def resolve(self, name: str, *, field: str | None = None) -> AccountChartEntry:
        """Resolve an account name or id.

        Raises:
            AccountNotFoundError: If the account is not in the chart.
        """
        ...


class TaxCategoryProvider(Protocol):
    """Protocol for the configured tax category table."""

    def lookup(self, code: str) -> TaxCategory | None:
        """Return the category for a code, or None if the code is unknown."""
        ...

    def all_categories(self) -> list[TaxCategory]:
        ...


class CurrencyConverter(Protocol):
    """Protocol for converting foreign-currency amounts into the base currency."""

    def convert(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
        on_date: date,
    ) -> Decimal:
        """Convert an amount at the rate effective on the given date.

        Raises:
            LookupError: If no rate is available for the currency pair.
        """
        ...
