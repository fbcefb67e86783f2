from nexus_ledger.domain.postings import ErrorDetail, JournalEntry, LedgerUpdate, PostingResult
from nexus_ledger.domain.transactions import TransactionRequest
from nexus_ledger.domain.value_objects import (
    Money,
    PaymentMethod,
    PaymentStatus,
    TransactionKind,
)
from nexus_ledger.services.processor import TransactionProcessor

__all__ = [
    "ErrorDetail",
    "JournalEntry",
    "LedgerUpdate",
    "Money",
    "PaymentMethod",
    "PaymentStatus",
    "PostingResult",
    "TransactionKind",
    "TransactionProcessor",
    "TransactionRequest",
]

__version__ = "0.1.0"
