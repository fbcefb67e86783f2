"""Output records of the posting engine: journal lines, ledger updates, results."""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any

from nexus_ledger.domain.value_objects import Register, Side
from nexus_ledger.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class JournalEntry:
    account_id: str
    account_name: str
    side: Side
    amount: Decimal
    memo: str = ""

    @property
    def is_debit(self) -> bool:
        return self.side == Side.DEBIT

    @property
    def is_credit(self) -> bool:
        return self.side == Side.CREDIT

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "account_name": self.account_name,
            "side": self.side.value,
            "amount": str(self.amount),
            "memo": self.memo,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JournalEntry":
        return cls(
            account_id=data["account_id"],
            account_name=data["account_name"],
            side=Side(data["side"]),
            amount=Decimal(data["amount"]),
            memo=data.get("memo", ""),
        )


@dataclass(frozen=True, slots=True)
class LedgerUpdate:
    """One change to a register.

    For the general ledger the key is the account id and amount is the
    signed change to the account's balance in its normal-balance terms.
    For AR/AP the key is the party name; for the capital and dividend
    registers it is the shareholder name (or the dividend reference).
    """

    register: Register
    key: str
    amount: Decimal
    account_id: str | None = None
    due_date: date | None = None
    shares: int = 0
    memo: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "register": self.register.value,
            "key": self.key,
            "amount": str(self.amount),
            "account_id": self.account_id,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "shares": self.shares,
            "memo": self.memo,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerUpdate":
        due = data.get("due_date")
        return cls(
            register=Register(data["register"]),
            key=data["key"],
            amount=Decimal(data["amount"]),
            account_id=data.get("account_id"),
            due_date=date.fromisoformat(due) if due else None,
            shares=int(data.get("shares", 0)),
            memo=data.get("memo", ""),
        )


@dataclass(frozen=True, slots=True)
class ErrorDetail:
    field: str | None
    message: str
    code: str = "VALIDATION_ERROR"

    @classmethod
    def from_exception(cls, exc: ValidationError) -> "ErrorDetail":
        return cls(field=exc.field, message=exc.message, code=exc.error_code)

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message, "code": self.code}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorDetail":
        return cls(
            field=data.get("field"),
            message=data["message"],
            code=data.get("code", "VALIDATION_ERROR"),
        )


@dataclass(frozen=True, slots=True)
class TaxClassification:
    code: str
    deductible: bool
    label: str
    label_localized: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "deductible": self.deductible,
            "label": self.label,
            "label_localized": self.label_localized,
        }


@dataclass(frozen=True)
class PostingResult:
    success: bool
    entries: tuple[JournalEntry, ...] = ()
    ledger_updates: tuple[LedgerUpdate, ...] = ()
    errors: tuple[ErrorDetail, ...] = ()
    idempotency_key: str | None = None
    tax_classification: TaxClassification | None = None
    replayed: bool = False
    currency: str = field(default="RWF")

    @property
    def total_debits(self) -> Decimal:
        return sum((e.amount for e in self.entries if e.is_debit), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((e.amount for e in self.entries if e.is_credit), Decimal("0"))

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits

    def as_replay(self) -> "PostingResult":
        return replace(self, replayed=True)

    @classmethod
    def failure(
        cls, errors: list[ErrorDetail], idempotency_key: str | None = None
    ) -> "PostingResult":
        return cls(success=False, errors=tuple(errors), idempotency_key=idempotency_key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "idempotency_key": self.idempotency_key,
            "currency": self.currency,
            "replayed": self.replayed,
            "entries": [e.to_dict() for e in self.entries],
            "ledger_updates": [u.to_dict() for u in self.ledger_updates],
            "errors": [e.to_dict() for e in self.errors],
            "tax_classification": (
                self.tax_classification.to_dict() if self.tax_classification else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PostingResult":
        tax = data.get("tax_classification")
        return cls(
            success=data["success"],
            entries=tuple(JournalEntry.from_dict(e) for e in data.get("entries", [])),
            ledger_updates=tuple(
                LedgerUpdate.from_dict(u) for u in data.get("ledger_updates", [])
            ),
            errors=tuple(ErrorDetail.from_dict(e) for e in data.get("errors", [])),
            idempotency_key=data.get("idempotency_key"),
            tax_classification=TaxClassification(**tax) if tax else None,
            replayed=data.get("replayed", False),
            currency=data.get("currency", "RWF"),
        )
