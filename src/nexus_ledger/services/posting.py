"""LedgerPoster: derives ledger updates from journal entries and commits them."""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from nexus_ledger.domain.accounts import ACCOUNTS_PAYABLE, ACCOUNTS_RECEIVABLE, AccountChart
from nexus_ledger.domain.postings import JournalEntry, LedgerUpdate, PostingResult
from nexus_ledger.domain.transactions import (
    CapitalPayload,
    DividendPayload,
    ShareIssuancePayload,
    TransactionRequest,
)
from nexus_ledger.domain.value_objects import Money, Register, Side, TransactionKind
from nexus_ledger.repositories.interfaces import (
    HistoryFilter,
    LedgerStore,
    OpenItem,
    PostedTransaction,
    TransactionSummary,
)
from nexus_ledger.services.journal import share_split
from nexus_ledger.services.payment_status import Settlement


def _posted_amount(entries: Sequence[JournalEntry]) -> Decimal:
    return sum((e.amount for e in entries if e.is_debit), Decimal("0"))


class LedgerPoster:
    """The only component that mutates ledger state.

    Ledger state lives in the injected LedgerStore; the poster describes
    the atomic unit of work and hands it to the store.
    """

    def __init__(
        self,
        store: LedgerStore,
        chart: AccountChart,
        default_par_value: Decimal = Decimal("1000"),
        base_currency: str = "RWF",
    ) -> None:
        self._store = store
        self._chart = chart
        self._default_par_value = default_par_value
        self._base_currency = base_currency

    @property
    def store(self) -> LedgerStore:
        return self._store

    def build_updates(
        self,
        request: TransactionRequest,
        entries: Sequence[JournalEntry],
        settlement: Settlement,
    ) -> list[LedgerUpdate]:
        """Derive every register change implied by a balanced entry list.

        Args:
            request: The validated request the entries were generated from
            entries: Balanced journal entries
            settlement: Cash/outstanding split of the request amount

        Returns:
            General ledger updates (one per entry) followed by any AR/AP,
            capital or dividend register rows
        """
        updates = [self._general_ledger_update(entry) for entry in entries]

        if settlement.has_outstanding:
            register = (
                Register.ACCOUNTS_RECEIVABLE
                if request.kind == TransactionKind.SALE
                else Register.ACCOUNTS_PAYABLE
            )
            updates.append(
                LedgerUpdate(
                    register=register,
                    key=request.party_name or "",
                    amount=self._outstanding_amount(entries, register),
                    due_date=request.due_date,
                    memo=request.description,
                )
            )

        if request.kind.is_capital:
            updates.append(self._capital_row(request, entries))
        elif request.kind.is_dividend:
            updates.append(self._dividend_row(request, entries))

        return updates

    def post(
        self,
        request: TransactionRequest,
        entries: Sequence[JournalEntry],
        updates: Sequence[LedgerUpdate],
        result: PostingResult,
    ) -> None:
        """Commit the updates as one unit under the request's idempotency key.

        Raises:
            DuplicateTransactionError: If the key was already posted
            StorageError: If the store failed; nothing is applied
        """
        key = result.idempotency_key or request.idempotency_key
        if key is None:
            raise ValueError("An idempotency key is required to post")
        record = PostedTransaction(
            idempotency_key=key,
            kind=request.kind,
            transaction_date=request.transaction_date,
            payment_method=request.payment_method,
            amount=request.amount,
            description=request.description,
            party_name=request.party_name,
        )
        self._store.apply_atomically(list(updates), key, result, record)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def account_balance(self, name: str) -> Money:
        account = self._chart.resolve(name)
        return Money(self._store.get_balance(account.id), self._base_currency)

    def trial_balance(self) -> list[tuple[str, str, Decimal, Decimal]]:
        """Rows of (account id, account name, debit balance, credit balance)."""
        balances = self._store.balances()
        rows = []
        for account in self._chart:
            balance = balances.get(account.id)
            if balance is None or balance == 0:
                continue
            signed = balance if account.normal_side == Side.DEBIT else -balance
            debit = signed if signed > 0 else Decimal("0")
            credit = -signed if signed < 0 else Decimal("0")
            rows.append((account.id, account.name, debit, credit))
        return rows

    def receivables(self) -> list[OpenItem]:
        return self._store.open_items(Register.ACCOUNTS_RECEIVABLE)

    def payables(self) -> list[OpenItem]:
        return self._store.open_items(Register.ACCOUNTS_PAYABLE)

    def capital_register(self) -> list[LedgerUpdate]:
        return self._store.register_rows(Register.CAPITAL)

    def dividend_register(self) -> list[LedgerUpdate]:
        return self._store.register_rows(Register.DIVIDEND)

    def history(self, filters: HistoryFilter | None = None) -> list[PostedTransaction]:
        return self._store.history(filters)

    def summary(self, as_of: date | None = None) -> TransactionSummary:
        return self._store.summary(as_of or date.today())

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _general_ledger_update(self, entry: JournalEntry) -> LedgerUpdate:
        account = self._chart.resolve(entry.account_id)
        amount = entry.amount if entry.side == account.normal_side else -entry.amount
        return LedgerUpdate(
            register=Register.GENERAL_LEDGER,
            key=account.id,
            amount=amount,
            account_id=account.id,
            memo=entry.memo,
        )

    def _outstanding_amount(
        self, entries: Sequence[JournalEntry], register: Register
    ) -> Decimal:
        # Use the posted (quantized) AR/AP line so the register matches the ledger.
        target = self._chart.resolve(
            ACCOUNTS_RECEIVABLE
            if register == Register.ACCOUNTS_RECEIVABLE
            else ACCOUNTS_PAYABLE
        )
        return sum(
            (e.amount for e in entries if e.account_id == target.id), Decimal("0")
        )

    def _capital_row(
        self, request: TransactionRequest, entries: Sequence[JournalEntry]
    ) -> LedgerUpdate:
        payload = request.payload
        shares = 0
        if isinstance(payload, ShareIssuancePayload):
            shares, _, _ = share_split(
                request.amount,
                payload.par_value or self._default_par_value,
                payload.shares_allocated,
            )
        elif isinstance(payload, CapitalPayload):
            shares = payload.shares_allocated

        amount = _posted_amount(entries)
        if request.kind == TransactionKind.CAPITAL_WITHDRAWAL:
            amount = -amount
            shares = -shares
        return LedgerUpdate(
            register=Register.CAPITAL,
            key=request.shareholder_name or "",
            amount=amount,
            shares=shares,
            memo=request.description,
        )

    def _dividend_row(
        self, request: TransactionRequest, entries: Sequence[JournalEntry]
    ) -> LedgerUpdate:
        payload = request.payload
        assert isinstance(payload, DividendPayload)
        key = payload.shareholder_name or payload.dividend_reference or "all shareholders"
        amount = _posted_amount(entries)
        if request.kind == TransactionKind.DIVIDEND_PAYMENT:
            amount = -amount
        return LedgerUpdate(
            register=Register.DIVIDEND,
            key=key,
            amount=amount,
            memo=request.description,
        )
