from nexus_ledger.repositories.interfaces import (
    HistoryFilter,
    LedgerStore,
    OpenItem,
    PeriodTotal,
    PostedTransaction,
    TransactionSummary,
)
from nexus_ledger.repositories.memory import InMemoryLedgerStore
from nexus_ledger.repositories.sqlite import SQLiteDatabase, SQLiteLedgerStore

__all__ = [
    "HistoryFilter",
    "InMemoryLedgerStore",
    "LedgerStore",
    "OpenItem",
    "PeriodTotal",
    "PostedTransaction",
    "SQLiteDatabase",
    "SQLiteLedgerStore",
    "TransactionSummary",
]
