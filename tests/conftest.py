from datetime import date
from decimal import Decimal

import pytest

from nexus_ledger.domain.accounts import AccountChart, default_chart
from nexus_ledger.domain.transactions import TransactionRequest
from nexus_ledger.domain.value_objects import PaymentMethod, PaymentStatus, TransactionKind
from nexus_ledger.repositories.memory import InMemoryLedgerStore
from nexus_ledger.services.journal import JournalEntryGenerator
from nexus_ledger.services.payment_status import PaymentStatusResolver
from nexus_ledger.services.posting import LedgerPoster
from nexus_ledger.services.processor import TransactionProcessor
from nexus_ledger.services.tax_classifier import TaxClassifier


@pytest.fixture
def chart() -> AccountChart:
    return default_chart()


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def generator() -> JournalEntryGenerator:
    return JournalEntryGenerator()


@pytest.fixture
def poster(store: InMemoryLedgerStore, chart: AccountChart) -> LedgerPoster:
    return LedgerPoster(store, chart)


@pytest.fixture
def processor(
    chart: AccountChart, generator: JournalEntryGenerator, poster: LedgerPoster
) -> TransactionProcessor:
    return TransactionProcessor(
        chart=chart,
        generator=generator,
        poster=poster,
        resolver=PaymentStatusResolver(),
        tax_classifier=TaxClassifier(),
    )


@pytest.fixture
def make_request():
    """Factory for requests with sensible defaults for the given kind."""

    def _make(kind: TransactionKind = TransactionKind.SALE, **overrides) -> TransactionRequest:
        values = {
            "kind": kind,
            "amount": Decimal("100000"),
            "transaction_date": date(2025, 3, 1),
            "description": f"Test {kind.value}",
            "payment_method": PaymentMethod.BANK,
            "payment_status": PaymentStatus.PAID,
        }
        values.update(overrides)
        return TransactionRequest(**values)

    return _make
