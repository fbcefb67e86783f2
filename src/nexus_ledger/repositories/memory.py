"""In-memory ledger store, used by tests and as the default collaborator."""

import threading
from collections.abc import Sequence
from decimal import Decimal

from nexus_ledger.domain.postings import LedgerUpdate, PostingResult
from nexus_ledger.domain.value_objects import Register
from nexus_ledger.exceptions import DuplicateTransactionError, StorageError
from nexus_ledger.repositories.interfaces import (
    HistoryFilter,
    LedgerStore,
    PostedTransaction,
)


class InMemoryLedgerStore(LedgerStore):
    """Dict-backed store with copy-then-swap commits under a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._balances: dict[str, Decimal] = {}
        self._rows: dict[Register, list[LedgerUpdate]] = {r: [] for r in Register}
        self._results: dict[str, PostingResult] = {}
        self._records: list[PostedTransaction] = []

    def apply_atomically(
        self,
        updates: Sequence[LedgerUpdate],
        idempotency_key: str,
        result: PostingResult,
        record: PostedTransaction | None = None,
    ) -> None:
        with self._lock:
            if idempotency_key in self._results:
                raise DuplicateTransactionError(
                    idempotency_key, self._results[idempotency_key]
                )

            balances = dict(self._balances)
            rows = {register: list(items) for register, items in self._rows.items()}
            for update in updates:
                if update.register == Register.GENERAL_LEDGER:
                    if not update.account_id:
                        raise StorageError(
                            "General ledger update without an account id",
                            context={"idempotency_key": idempotency_key},
                        )
                    balances[update.account_id] = (
                        balances.get(update.account_id, Decimal("0")) + update.amount
                    )
                rows[update.register].append(update)

            self._balances = balances
            self._rows = rows
            self._results[idempotency_key] = result
            if record is not None:
                self._records.append(record)

    def get_result(self, idempotency_key: str) -> PostingResult | None:
        with self._lock:
            return self._results.get(idempotency_key)

    def get_balance(self, account_id: str) -> Decimal:
        with self._lock:
            return self._balances.get(account_id, Decimal("0"))

    def balances(self) -> dict[str, Decimal]:
        with self._lock:
            return dict(self._balances)

    def register_rows(self, register: Register) -> list[LedgerUpdate]:
        with self._lock:
            return list(self._rows[register])

    def history(self, filters: HistoryFilter | None = None) -> list[PostedTransaction]:
        filters = filters or HistoryFilter()
        with self._lock:
            posted = list(enumerate(self._records))
        matching = [(seq, r) for seq, r in posted if filters.matches(r)]
        matching.sort(key=lambda item: (item[1].transaction_date, item[0]), reverse=True)
        return [record for _, record in matching]

    @property
    def posted_count(self) -> int:
        return len(self._results)
