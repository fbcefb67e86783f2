from nexus_ledger.services.interfaces import (
    AccountChartProvider,
    CurrencyConverter,
    TaxCategory,
    TaxCategoryProvider,
)
from nexus_ledger.services.journal import JournalEntryGenerator, share_split
from nexus_ledger.services.payment_status import PaymentStatusResolver, Settlement
from nexus_ledger.services.posting import LedgerPoster
from nexus_ledger.services.processor import TransactionProcessor
from nexus_ledger.services.tax_classifier import (
    DEFAULT_TAX_CATEGORIES,
    InMemoryTaxCategoryProvider,
    TaxClassifier,
    TaxSummary,
)

__all__ = [
    "AccountChartProvider",
    "CurrencyConverter",
    "DEFAULT_TAX_CATEGORIES",
    "InMemoryTaxCategoryProvider",
    "JournalEntryGenerator",
    "LedgerPoster",
    "PaymentStatusResolver",
    "Settlement",
    "TaxCategory",
    "TaxCategoryProvider",
    "TaxClassifier",
    "TaxSummary",
    "TransactionProcessor",
    "share_split",
]
