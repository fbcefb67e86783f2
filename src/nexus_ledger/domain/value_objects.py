from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class TransactionKind(str, Enum):
    SALE = "sale"
    PURCHASE = "purchase"
    EXPENSE = "expense"
    SALARY = "salary"
    ASSET_ACQUISITION = "asset_acquisition"
    TRANSFER = "transfer"
    CAPITAL_CONTRIBUTION = "capital_contribution"
    CAPITAL_WITHDRAWAL = "capital_withdrawal"
    SHARE_ISSUANCE = "share_issuance"
    DIVIDEND_DECLARATION = "dividend_declaration"
    DIVIDEND_PAYMENT = "dividend_payment"
    EQUITY_ADJUSTMENT = "equity_adjustment"

    @property
    def is_capital(self) -> bool:
        return self in CAPITAL_KINDS

    @property
    def is_dividend(self) -> bool:
        return self in DIVIDEND_KINDS

    @property
    def allows_credit(self) -> bool:
        """Whether the kind may be settled later (unpaid / partially paid)."""
        return self in CREDIT_KINDS

    @property
    def is_tax_classified(self) -> bool:
        return self in (TransactionKind.PURCHASE, TransactionKind.EXPENSE)


CAPITAL_KINDS = frozenset(
    {
        TransactionKind.CAPITAL_CONTRIBUTION,
        TransactionKind.CAPITAL_WITHDRAWAL,
        TransactionKind.SHARE_ISSUANCE,
    }
)
DIVIDEND_KINDS = frozenset(
    {TransactionKind.DIVIDEND_DECLARATION, TransactionKind.DIVIDEND_PAYMENT}
)
CREDIT_KINDS = frozenset(
    {TransactionKind.SALE, TransactionKind.PURCHASE, TransactionKind.EXPENSE}
)


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK = "bank"
    MOBILE_MONEY = "mobile_money"
    CARD = "card"
    CHEQUE = "cheque"


class AccountClass(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def normal_side(self) -> "Side":
        """Side on which a posting increases the account's balance."""
        if self in (AccountClass.ASSET, AccountClass.EXPENSE):
            return Side.DEBIT
        return Side.CREDIT


class Side(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class Register(str, Enum):
    GENERAL_LEDGER = "general_ledger"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    ACCOUNTS_PAYABLE = "accounts_payable"
    CAPITAL = "capital"
    DIVIDEND = "dividend"


def quantize(amount: Decimal, places: int) -> Decimal:
    """Round an amount half-up to the given number of decimal places."""
    return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class Money:
    amount: Decimal
    currency: str = "RWF"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(f"Invalid currency: {self.currency}")
        object.__setattr__(self, "currency", self.currency.upper())


__all__ = [
    "AccountClass",
    "CAPITAL_KINDS",
    "CREDIT_KINDS",
    "DIVIDEND_KINDS",
    "Money",
    "PaymentMethod",
    "PaymentStatus",
    "Register",
    "Side",
    "TransactionKind",
    "quantize",
]
