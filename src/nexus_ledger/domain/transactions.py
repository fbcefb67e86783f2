"""Transaction requests: one structured payload type per transaction kind."""

from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal

from nexus_ledger.domain.accounts import (
    EQUITY_ADJUSTMENT,
    FIXED_ASSETS,
    OTHER_EXPENSES,
    RETAINED_EARNINGS,
    SALES_REVENUE,
)
from nexus_ledger.domain.postings import ErrorDetail
from nexus_ledger.domain.value_objects import (
    PaymentMethod,
    PaymentStatus,
    TransactionKind,
)


@dataclass(frozen=True, slots=True)
class SalePayload:
    revenue_account: str = SALES_REVENUE


@dataclass(frozen=True, slots=True)
class PurchasePayload:
    """Payload shared by purchase and expense requests."""

    tax_category: str | None = None
    expense_account: str = OTHER_EXPENSES


@dataclass(frozen=True, slots=True)
class SalaryPayload:
    """Payroll detail. When gross_salary is set, amount is the net pay."""

    employee_name: str | None = None
    gross_salary: Decimal | None = None
    paye_deduction: Decimal = Decimal("0")
    rssb_employee: Decimal = Decimal("0")
    rssb_employer: Decimal = Decimal("0")


@dataclass(frozen=True, slots=True)
class AssetPayload:
    asset_name: str | None = None
    asset_category: str | None = None
    useful_life_years: int | None = None
    residual_value: Decimal | None = None
    asset_account: str = FIXED_ASSETS


@dataclass(frozen=True, slots=True)
class TransferPayload:
    from_account: str | None = None
    to_account: str | None = None


@dataclass(frozen=True, slots=True)
class CapitalPayload:
    """Payload shared by capital contributions and withdrawals."""

    shareholder_name: str | None = None
    shareholder_id: str | None = None
    shares_allocated: int = 0


@dataclass(frozen=True, slots=True)
class ShareIssuancePayload:
    shareholder_name: str | None = None
    shareholder_id: str | None = None
    shares_allocated: int | None = None
    par_value: Decimal | None = None


@dataclass(frozen=True, slots=True)
class DividendPayload:
    shareholder_name: str | None = None
    dividend_reference: str | None = None


@dataclass(frozen=True, slots=True)
class EquityAdjustmentPayload:
    from_account: str = RETAINED_EARNINGS
    to_account: str = EQUITY_ADJUSTMENT
    adjustment_type: str = "correction"


Payload = (
    SalePayload
    | PurchasePayload
    | SalaryPayload
    | AssetPayload
    | TransferPayload
    | CapitalPayload
    | ShareIssuancePayload
    | DividendPayload
    | EquityAdjustmentPayload
)

PAYLOAD_TYPES: dict[TransactionKind, type] = {
    TransactionKind.SALE: SalePayload,
    TransactionKind.PURCHASE: PurchasePayload,
    TransactionKind.EXPENSE: PurchasePayload,
    TransactionKind.SALARY: SalaryPayload,
    TransactionKind.ASSET_ACQUISITION: AssetPayload,
    TransactionKind.TRANSFER: TransferPayload,
    TransactionKind.CAPITAL_CONTRIBUTION: CapitalPayload,
    TransactionKind.CAPITAL_WITHDRAWAL: CapitalPayload,
    TransactionKind.SHARE_ISSUANCE: ShareIssuancePayload,
    TransactionKind.DIVIDEND_DECLARATION: DividendPayload,
    TransactionKind.DIVIDEND_PAYMENT: DividendPayload,
    TransactionKind.EQUITY_ADJUSTMENT: EquityAdjustmentPayload,
}


def payload_field_names(kind: TransactionKind) -> set[str]:
    return {f.name for f in fields(PAYLOAD_TYPES[kind])}


@dataclass(frozen=True)
class TransactionRequest:
    kind: TransactionKind
    amount: Decimal
    transaction_date: date
    description: str
    payload: Payload | None = None
    currency: str = "RWF"
    payment_method: PaymentMethod = PaymentMethod.BANK
    payment_status: PaymentStatus = PaymentStatus.PAID
    paid_amount: Decimal | None = None
    due_date: date | None = None
    party_name: str | None = None
    reference_number: str | None = None
    idempotency_key: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.paid_amount is not None and not isinstance(self.paid_amount, Decimal):
            object.__setattr__(self, "paid_amount", Decimal(str(self.paid_amount)))
        if self.payload is None:
            object.__setattr__(self, "payload", PAYLOAD_TYPES[self.kind]())

    @property
    def is_credit(self) -> bool:
        return self.payment_status != PaymentStatus.PAID

    @property
    def shareholder_name(self) -> str | None:
        return getattr(self.payload, "shareholder_name", None)

    def field_errors(self) -> list[ErrorDetail]:
        """Check the request's own invariants, reporting every violated field."""
        errors: list[ErrorDetail] = []

        if self.amount <= 0:
            errors.append(ErrorDetail("amount", "Amount must be greater than 0"))
        if not self.description or not self.description.strip():
            errors.append(ErrorDetail("description", "Description is required"))

        expected = PAYLOAD_TYPES[self.kind]
        if not isinstance(self.payload, expected):
            errors.append(
                ErrorDetail(
                    "payload",
                    f"{self.kind.value} requires a {expected.__name__}",
                )
            )
            return errors

        if self.is_credit:
            if not self.kind.allows_credit:
                errors.append(
                    ErrorDetail(
                        "payment_status",
                        f"{self.kind.value} transactions must be paid in full",
                    )
                )
            if not self.party_name or not self.party_name.strip():
                errors.append(
                    ErrorDetail("party_name", "Party name is required for credit terms")
                )
            if self.due_date is None:
                errors.append(
                    ErrorDetail("due_date", "Due date is required for credit terms")
                )

        if self.payment_status == PaymentStatus.PARTIALLY_PAID:
            if self.paid_amount is None:
                errors.append(
                    ErrorDetail("paid_amount", "Paid amount is required when partially paid")
                )
            elif not (Decimal("0") < self.paid_amount < self.amount):
                errors.append(
                    ErrorDetail(
                        "paid_amount",
                        "Paid amount must be greater than 0 and less than the amount",
                    )
                )

        if self.kind.is_capital:
            name = self.shareholder_name
            if not name or not name.strip():
                errors.append(
                    ErrorDetail(
                        "shareholder_name",
                        "Shareholder name is required for capital transactions",
                    )
                )

        errors.extend(self._payload_errors())
        return errors

    def _payload_errors(self) -> list[ErrorDetail]:
        errors: list[ErrorDetail] = []
        payload = self.payload

        if isinstance(payload, TransferPayload):
            if not payload.from_account:
                errors.append(ErrorDetail("from_account", "Source account is required"))
            if not payload.to_account:
                errors.append(ErrorDetail("to_account", "Destination account is required"))

        elif isinstance(payload, SalaryPayload):
            deductions = (
                ("paye_deduction", payload.paye_deduction),
                ("rssb_employee", payload.rssb_employee),
                ("rssb_employer", payload.rssb_employer),
            )
            for name, value in deductions:
                if value < 0:
                    errors.append(ErrorDetail(name, f"{name} cannot be negative"))
            if payload.gross_salary is not None:
                expected_gross = (
                    self.amount + payload.paye_deduction + payload.rssb_employee
                )
                if payload.gross_salary != expected_gross:
                    errors.append(
                        ErrorDetail(
                            "gross_salary",
                            "Gross salary must equal net pay plus PAYE and employee RSSB",
                        )
                    )

        elif isinstance(payload, ShareIssuancePayload):
            if payload.par_value is not None and payload.par_value <= 0:
                errors.append(ErrorDetail("par_value", "Par value must be greater than 0"))
            if payload.shares_allocated is not None and payload.shares_allocated <= 0:
                errors.append(
                    ErrorDetail("shares_allocated", "Shares allocated must be positive")
                )

        elif isinstance(payload, CapitalPayload):
            if payload.shares_allocated < 0:
                errors.append(
                    ErrorDetail("shares_allocated", "Shares allocated cannot be negative")
                )

        elif isinstance(payload, AssetPayload):
            if payload.residual_value is not None and not (
                Decimal("0") <= payload.residual_value <= self.amount
            ):
                errors.append(
                    ErrorDetail(
                        "residual_value",
                        "Residual value must be between 0 and the acquisition cost",
                    )
                )
            if payload.useful_life_years is not None and payload.useful_life_years <= 0:
                errors.append(
                    ErrorDetail("useful_life_years", "Useful life must be positive")
                )

        return errors
