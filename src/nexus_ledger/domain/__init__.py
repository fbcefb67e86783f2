from nexus_ledger.domain.accounts import (
    AccountChart,
    AccountChartEntry,
    default_chart,
)
from nexus_ledger.domain.postings import (
    ErrorDetail,
    JournalEntry,
    LedgerUpdate,
    PostingResult,
    TaxClassification,
)
from nexus_ledger.domain.transactions import (
    AssetPayload,
    CapitalPayload,
    DividendPayload,
    EquityAdjustmentPayload,
    PurchasePayload,
    SalaryPayload,
    SalePayload,
    ShareIssuancePayload,
    TransactionRequest,
    TransferPayload,
)
from nexus_ledger.domain.value_objects import (
    AccountClass,
    Money,
    PaymentMethod,
    PaymentStatus,
    Register,
    Side,
    TransactionKind,
)

__all__ = [
    "AccountChart",
    "AccountChartEntry",
    "AccountClass",
    "AssetPayload",
    "CapitalPayload",
    "DividendPayload",
    "EquityAdjustmentPayload",
    "ErrorDetail",
    "JournalEntry",
    "LedgerUpdate",
    "Money",
    "PaymentMethod",
    "PaymentStatus",
    "PostingResult",
    "PurchasePayload",
    "Register",
    "SalaryPayload",
    "SalePayload",
    "ShareIssuancePayload",
    "Side",
    "TaxClassification",
    "TransactionKind",
    "TransactionRequest",
    "TransferPayload",
    "default_chart",
]
