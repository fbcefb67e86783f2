"""Exception hierarchy for the Nexus Ledger posting engine.

All engine exceptions inherit from NexusLedgerError. Validation-class
errors describe bad input and are folded into a PostingResult by the
processor; defect-class errors (UnbalancedEntriesError) signal a bug in
the posting rules and are never caused by the caller.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nexus_ledger.domain.postings import PostingResult


class NexusLedgerError(Exception):
    """Base exception for all Nexus Ledger errors.

    Includes an error_code for callers that translate failures into
    API responses and an optional context dictionary.
    """

    error_code: str = "NXL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(NexusLedgerError):
    """Base exception for errors caused by incomplete or inconsistent input."""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, context=context)
        self.field = field


class InvalidPaymentStateError(ValidationError):
    """Raised when a payment status and paid amount are inconsistent."""

    error_code = "INVALID_PAYMENT_STATE"

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Invalid payment state: {reason}",
            field="paid_amount",
            context={"reason": reason},
        )


class UnknownTaxCategoryError(ValidationError):
    """Raised when a tax category code is not in the configured table."""

    error_code = "UNKNOWN_TAX_CATEGORY"

    def __init__(self, code: str) -> None:
        super().__init__(
            f"Unknown tax category: {code}",
            field="tax_category",
            context={"tax_category": code},
        )


class AccountNotFoundError(ValidationError):
    """Raised when an account name or id is not in the chart of accounts."""

    error_code = "ACCOUNT_NOT_FOUND"

    def __init__(self, account: str, *, field: str | None = None) -> None:
        super().__init__(
            f"Account not found: {account}",
            field=field,
            context={"account": account},
        )
        self.account = account


class CurrencyConversionError(ValidationError):
    """Raised when an amount cannot be converted into the base currency."""

    error_code = "CURRENCY_CONVERSION_FAILED"

    def __init__(self, from_currency: str, to_currency: str, reason: str) -> None:
        super().__init__(
            f"Cannot convert {from_currency} to {to_currency}: {reason}",
            field="currency",
            context={"from_currency": from_currency, "to_currency": to_currency},
        )


# =============================================================================
# Posting Errors
# =============================================================================


class PostingError(NexusLedgerError):
    """Base exception for failures after a request passed validation."""

    error_code = "POSTING_ERROR"


class UnbalancedEntriesError(PostingError):
    """Raised when a posting rule produces entries whose debits don't equal credits.

    Always a defect in the rule table, never the caller's fault.
    """

    error_code = "UNBALANCED_ENTRIES"

    def __init__(self, kind: str, debit_total: Decimal, credit_total: Decimal) -> None:
        super().__init__(
            f"Entries for {kind} are unbalanced: "
            f"debits={debit_total}, credits={credit_total}",
            context={
                "kind": kind,
                "debit_total": str(debit_total),
                "credit_total": str(credit_total),
            },
        )


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(NexusLedgerError):
    """Raised when the ledger store fails while committing a posting."""

    error_code = "STORAGE_ERROR"


class DuplicateTransactionError(StorageError):
    """Raised when an idempotency key has already been posted.

    Carries the originally stored result so the caller can replay it.
    """

    error_code = "DUPLICATE_TRANSACTION"

    def __init__(self, idempotency_key: str, original: PostingResult | None) -> None:
        super().__init__(
            f"Transaction already posted: {idempotency_key}",
            context={"idempotency_key": idempotency_key},
        )
        self.idempotency_key = idempotency_key
        self.original = original
