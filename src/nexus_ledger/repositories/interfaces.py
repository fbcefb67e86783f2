from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from nexus_ledger.domain.postings import LedgerUpdate, PostingResult
from nexus_ledger.domain.value_objects import PaymentMethod, Register, TransactionKind


@dataclass(frozen=True, slots=True)
class OpenItem:
    party_name: str
    due_date: date | None
    amount: Decimal


@dataclass(frozen=True, slots=True)
class PostedTransaction:
    """What was posted under one idempotency key, in base currency."""

    idempotency_key: str
    kind: TransactionKind
    transaction_date: date
    payment_method: PaymentMethod
    amount: Decimal
    description: str
    party_name: str | None = None


@dataclass(frozen=True, slots=True)
class HistoryFilter:
    """Optional bounds for transaction history; all bounds are inclusive."""

    kind: TransactionKind | None = None
    date_from: date | None = None
    date_to: date | None = None
    amount_min: Decimal | None = None
    amount_max: Decimal | None = None

    def matches(self, record: PostedTransaction) -> bool:
        if self.kind is not None and record.kind != self.kind:
            return False
        if self.date_from is not None and record.transaction_date < self.date_from:
            return False
        if self.date_to is not None and record.transaction_date > self.date_to:
            return False
        if self.amount_min is not None and record.amount < self.amount_min:
            return False
        if self.amount_max is not None and record.amount > self.amount_max:
            return False
        return True


@dataclass(frozen=True, slots=True)
class PeriodTotal:
    count: int = 0
    amount: Decimal = Decimal("0")

    def add(self, amount: Decimal) -> "PeriodTotal":
        return PeriodTotal(self.count + 1, self.amount + amount)


@dataclass(frozen=True)
class TransactionSummary:
    total: PeriodTotal = PeriodTotal()
    this_month: PeriodTotal = PeriodTotal()
    this_year: PeriodTotal = PeriodTotal()
    by_kind: dict[str, int] = field(default_factory=dict)
    by_payment_method: dict[str, int] = field(default_factory=dict)


class LedgerStore(ABC):
    """Storage collaborator for ledger balances and subsidiary registers.

    Implementations must apply all updates of one posting or none, make
    the already-posted check atomic with the posting itself, and
    serialize concurrent writers.
    """

    @abstractmethod
    def apply_atomically(
        self,
        updates: Sequence[LedgerUpdate],
        idempotency_key: str,
        result: PostingResult,
        record: PostedTransaction | None = None,
    ) -> None:
        """Apply updates and record the result under the idempotency key.

        Postings applied without a record have no history entry.

        Raises:
            DuplicateTransactionError: If the key has already been posted
            StorageError: If the updates could not be applied
        """

    @abstractmethod
    def get_result(self, idempotency_key: str) -> PostingResult | None:
        pass

    @abstractmethod
    def get_balance(self, account_id: str) -> Decimal:
        pass

    @abstractmethod
    def balances(self) -> dict[str, Decimal]:
        pass

    @abstractmethod
    def register_rows(self, register: Register) -> list[LedgerUpdate]:
        pass

    @abstractmethod
    def history(self, filters: HistoryFilter | None = None) -> list[PostedTransaction]:
        """Posted transactions matching filters, newest transaction date first.

        Transactions sharing a date are listed in reverse posting order.
        """

    def open_items(self, register: Register) -> list[OpenItem]:
        """Outstanding AR or AP amounts grouped by party and due date."""
        totals: dict[tuple[str, date | None], Decimal] = {}
        for row in self.register_rows(register):
            key = (row.key, row.due_date)
            totals[key] = totals.get(key, Decimal("0")) + row.amount
        return [
            OpenItem(party_name=party, due_date=due, amount=amount)
            for (party, due), amount in sorted(
                totals.items(), key=lambda item: (item[0][0], item[0][1] or date.min)
            )
            if amount != 0
        ]

    def summary(self, as_of: date) -> TransactionSummary:
        """Counts and amounts overall, since the start of as_of's month and year."""
        month_start = as_of.replace(day=1)
        year_start = as_of.replace(month=1, day=1)

        total = this_month = this_year = PeriodTotal()
        by_kind: dict[str, int] = {}
        by_payment_method: dict[str, int] = {}
        for record in self.history():
            total = total.add(record.amount)
            if record.transaction_date >= month_start:
                this_month = this_month.add(record.amount)
            if record.transaction_date >= year_start:
                this_year = this_year.add(record.amount)
            by_kind[record.kind.value] = by_kind.get(record.kind.value, 0) + 1
            method = record.payment_method.value
            by_payment_method[method] = by_payment_method.get(method, 0) + 1

        return TransactionSummary(
            total=total,
            this_month=this_month,
            this_year=this_year,
            by_kind=by_kind,
            by_payment_method=by_payment_method,
        )
